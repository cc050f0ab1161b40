"""
Readlater View-Models — Screen State Tests
============================================

What we test:
    ✅ Store: listeners on change only, unsubscribe, nothing after close()
    ✅ Profile: cached card first then network; failures keep the cache;
       account deletion error messages and logout on success
    ✅ Create profile: local username rules, debounce, the suggested name
       checked on start, server verdicts, submit validation and login
       failures
    ✅ Manage account: data cache reset outcome

Collaborators are small in-memory fakes of the ABCs in viewmodels.services.
"""

import asyncio
import uuid
from typing import List, Optional

import pytest

from readlater.result import Err, Ok
from readlater.viewmodels.create_profile import CreateProfileViewModel
from readlater.viewmodels.manage_account import UNABLE_TO_RESET_CACHE, ManageAccountViewModel
from readlater.viewmodels.profile import (
    UNABLE_TO_DELETE_ACCOUNT,
    UNABLE_TO_LOAD_ACCOUNT,
    ProfileCardData,
    ProfileViewModel,
)
from readlater.viewmodels.services import (
    Authenticator,
    DataService,
    EventTracker,
    LoginError,
    LoginFailure,
    UsernameErrorKind,
    UsernameValidationError,
    Viewer,
)
from readlater.viewmodels.store import Store
from readlater.viewmodels.user_profile import PotentialUsernameStatus, UserProfile

VIEWER_ID = uuid.UUID("00000000-0000-4000-8000-0000000000f1")


class FakeDataService(DataService):
    def __init__(
        self,
        cached: Optional[Viewer] = None,
        remote: Optional[Viewer] = None,
        fail_fetch: bool = False,
        fail_delete: bool = False,
        fail_reset: bool = False,
        username_error: Optional[UsernameErrorKind] = None,
    ):
        self.cached = cached
        self.remote = remote
        self.fail_fetch = fail_fetch
        self.fail_delete = fail_delete
        self.fail_reset = fail_reset
        self.username_error = username_error
        self.validated: List[str] = []
        self.deleted: List[uuid.UUID] = []
        self.reset_calls = 0

    @property
    def current_viewer(self) -> Optional[Viewer]:
        return self.cached

    async def fetch_viewer(self) -> Viewer:
        if self.fail_fetch:
            raise ConnectionError("offline")
        return self.remote

    async def delete_account(self, user_id: uuid.UUID) -> None:
        if self.fail_delete:
            raise ConnectionError("offline")
        self.deleted.append(user_id)

    async def validate_username(self, username: str) -> None:
        self.validated.append(username)
        if self.username_error is not None:
            raise UsernameValidationError(self.username_error)

    async def reset_data_cache(self) -> None:
        self.reset_calls += 1
        if self.fail_reset:
            raise OSError("disk full")


class FakeAuthenticator(Authenticator):
    def __init__(self, failure: Optional[LoginError] = None):
        self.failure = failure
        self.created: List[UserProfile] = []
        self.logouts: List[bool] = []

    async def create_account(self, profile: UserProfile) -> None:
        if self.failure is not None:
            raise LoginFailure(self.failure)
        self.created.append(profile)

    def logout(self, data_service: DataService, is_account_deletion: bool = False) -> None:
        self.logouts.append(is_account_deletion)


class FakeEventTracker(EventTracker):
    def __init__(self):
        self.resets = 0

    def reset(self) -> None:
        self.resets += 1


def _viewer(name="Alice", username="alice", image=None) -> Viewer:
    return Viewer(user_id=VIEWER_ID, name=name, username=username, profile_image_url=image)


# ══════════════════════════════════════════════════════════════════════════
# Store
# ══════════════════════════════════════════════════════════════════════════

def _add(state: int, action: int) -> int:
    return state + action


class TestStore:
    def test_listeners_only_see_changes(self):
        store = Store(0, _add)
        seen = []
        store.subscribe(seen.append)

        store.dispatch(2)
        store.dispatch(0)
        store.dispatch(3)

        assert store.state == 5
        assert seen == [2, 5]

    def test_unsubscribe(self):
        store = Store(0, _add)
        seen = []
        unsubscribe = store.subscribe(seen.append)

        unsubscribe()
        store.dispatch(1)

        assert seen == []

    @pytest.mark.asyncio
    async def test_close_cancels_effects_and_ignores_dispatch(self):
        store = Store(0, _add)
        started = asyncio.Event()

        async def slow_effect():
            started.set()
            await asyncio.sleep(10)
            store.dispatch(100)

        task = store.launch(slow_effect())
        await started.wait()
        await store.close()

        assert task.cancelled()
        store.dispatch(1)
        assert store.state == 0
        assert store.closed is True

    @pytest.mark.asyncio
    async def test_launch_after_close_is_noop(self):
        store = Store(0, _add)
        await store.close()

        async def effect():
            store.dispatch(1)

        assert store.launch(effect()) is None
        assert store.state == 0


# ══════════════════════════════════════════════════════════════════════════
# Profile
# ══════════════════════════════════════════════════════════════════════════

class TestProfileViewModel:
    @pytest.mark.asyncio
    async def test_cached_then_network(self):
        vm = ProfileViewModel()
        cards = []
        vm.store.subscribe(lambda s: cards.append(s.profile_card_data))
        service = FakeDataService(
            cached=_viewer(name="Old Name"),
            remote=_viewer(name="New Name", image="https://img.example.com/a.png"),
        )

        await vm.load_profile_data(service)

        names = [c.name for c in cards]
        assert "Old Name" in names
        assert vm.state.profile_card_data == ProfileCardData(
            name="New Name", username="alice", image_url="https://img.example.com/a.png"
        )
        assert vm.state.is_loading is False

    @pytest.mark.asyncio
    async def test_network_failure_keeps_cached_card(self):
        vm = ProfileViewModel()

        await vm.load_profile_data(FakeDataService(cached=_viewer(), fail_fetch=True))

        assert vm.state.profile_card_data.username == "alice"
        assert vm.state.is_loading is False

    @pytest.mark.asyncio
    async def test_viewer_without_username_is_not_rendered(self):
        vm = ProfileViewModel()

        await vm.load_profile_data(FakeDataService(remote=_viewer(username=None)))

        assert vm.state.profile_card_data == ProfileCardData()

    @pytest.mark.asyncio
    async def test_delete_without_viewer(self):
        vm = ProfileViewModel()
        authenticator = FakeAuthenticator()

        await vm.delete_account(FakeDataService(), authenticator)

        assert vm.state.delete_account_error_message == UNABLE_TO_LOAD_ACCOUNT
        assert authenticator.logouts == []

    @pytest.mark.asyncio
    async def test_delete_failure(self):
        vm = ProfileViewModel()
        authenticator = FakeAuthenticator()

        await vm.delete_account(FakeDataService(cached=_viewer(), fail_delete=True), authenticator)

        assert vm.state.delete_account_error_message == UNABLE_TO_DELETE_ACCOUNT
        assert authenticator.logouts == []

    @pytest.mark.asyncio
    async def test_delete_success_logs_out(self):
        vm = ProfileViewModel()
        service = FakeDataService(cached=_viewer())
        authenticator = FakeAuthenticator()
        tracker = FakeEventTracker()

        await vm.delete_account(service, authenticator, tracker)

        assert service.deleted == [VIEWER_ID]
        assert authenticator.logouts == [True]
        assert tracker.resets == 1
        assert vm.state.delete_account_error_message is None

    def test_version_string(self):
        assert ProfileViewModel("2.4.1").app_version_string == "Readlater Version 2.4.1"
        assert ProfileViewModel().app_version_string == ""


# ══════════════════════════════════════════════════════════════════════════
# Create profile
# ══════════════════════════════════════════════════════════════════════════

class TestUserProfile:
    def test_make_normalises_username(self):
        result = UserProfile.make(username="  Reader_01 ", name=" Jo ")

        assert isinstance(result, Ok)
        assert result.value.username == "reader_01"
        assert result.value.name == "Jo"

    @pytest.mark.parametrize(
        "username,message",
        [
            ("abc", "Username must contain at least 4 characters"),
            ("a" * 15, "Username must be less than 15 characters"),
            ("_reader", "Username can contain only letters and numbers"),
            ("read-er", "Username can contain only letters and numbers"),
        ],
    )
    def test_make_rejects_bad_usernames(self, username, message):
        result = UserProfile.make(username=username, name="Jo")
        assert result == Err(message)

    def test_make_rejects_empty_name(self):
        assert UserProfile.make(username="reader", name="   ") == Err("Name cannot be empty")

    def test_make_rejects_long_bio(self):
        assert isinstance(UserProfile.make(username="reader", name="Jo", bio="x" * 401), Err)


class TestCreateProfileViewModel:
    def test_texts_for_suggested_profile(self):
        suggested = CreateProfileViewModel(UserProfile(username="jo", name="Jo"))
        blank = CreateProfileViewModel(UserProfile(username="", name=""))

        assert suggested.headline_text == "Confirm Your Profile"
        assert suggested.submit_button_text == "Confirm"
        assert blank.headline_text == "Create Your Profile"
        assert blank.submit_button_text == "Submit"

    @pytest.mark.asyncio
    async def test_local_rules_skip_the_server(self):
        vm = CreateProfileViewModel(UserProfile(username="", name=""))
        service = FakeDataService()

        await vm.validate_username("ab", service)

        assert vm.state.potential_username_status == PotentialUsernameStatus.TOO_SHORT
        assert service.validated == []

    @pytest.mark.asyncio
    async def test_available_username(self):
        vm = CreateProfileViewModel(UserProfile(username="", name=""))

        await vm.validate_username("reader", FakeDataService())

        assert vm.state.potential_username_status == PotentialUsernameStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_server_says_unavailable(self):
        vm = CreateProfileViewModel(UserProfile(username="", name=""))

        await vm.validate_username(
            "reader", FakeDataService(username_error=UsernameErrorKind.NAME_UNAVAILABLE)
        )

        assert vm.state.potential_username_status == PotentialUsernameStatus.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_network_error_becomes_login_error(self):
        vm = CreateProfileViewModel(UserProfile(username="", name=""))

        await vm.validate_username(
            "reader", FakeDataService(username_error=UsernameErrorKind.NETWORK)
        )

        assert vm.state.login_error == LoginError.NETWORK
        assert vm.state.potential_username_status == PotentialUsernameStatus.NO_USERNAME

    @pytest.mark.asyncio
    async def test_typing_debounces_validation(self):
        """Only the last username typed within the pause is sent to the server."""
        vm = CreateProfileViewModel(UserProfile(username="", name=""), debounce_seconds=0.01)
        service = FakeDataService()

        vm.set_potential_username("read", service)
        vm.set_potential_username("reade", service)
        vm.set_potential_username("reader", service)
        assert vm.state.potential_username == "reader"

        await asyncio.sleep(0.05)

        assert service.validated == ["reader"]
        assert vm.state.potential_username_status == PotentialUsernameStatus.AVAILABLE
        await vm.store.close()

    @pytest.mark.asyncio
    async def test_start_validates_suggested_username(self):
        vm = CreateProfileViewModel(UserProfile(username="reader", name="Jo"), debounce_seconds=0.01)
        service = FakeDataService(username_error=UsernameErrorKind.NAME_UNAVAILABLE)
        assert vm.state.potential_username_status == PotentialUsernameStatus.NO_USERNAME

        vm.start(service)
        await asyncio.sleep(0.05)

        assert vm.state.potential_username_status == PotentialUsernameStatus.UNAVAILABLE
        await vm.store.close()

    @pytest.mark.asyncio
    async def test_start_then_typing_validates_only_the_typed_name(self):
        vm = CreateProfileViewModel(UserProfile(username="reader", name="Jo"), debounce_seconds=0.01)
        service = FakeDataService()

        vm.start(service)
        vm.set_potential_username("writer", service)
        await asyncio.sleep(0.05)

        assert service.validated == ["writer"]
        await vm.store.close()

    @pytest.mark.asyncio
    async def test_submit_with_invalid_name(self):
        vm = CreateProfileViewModel(UserProfile(username="reader", name=""))
        authenticator = FakeAuthenticator()

        await vm.submit_profile("", "", authenticator)

        assert vm.state.validation_error_message == "Name cannot be empty"
        assert authenticator.created == []

    @pytest.mark.asyncio
    async def test_submit_creates_account(self):
        vm = CreateProfileViewModel(UserProfile(username="Reader", name="Jo"))
        authenticator = FakeAuthenticator()

        await vm.submit_profile("Jo", "", authenticator)

        assert authenticator.created == [UserProfile(username="reader", name="Jo", bio=None)]
        assert vm.state.validation_error_message is None

    @pytest.mark.asyncio
    async def test_submit_login_failure(self):
        vm = CreateProfileViewModel(UserProfile(username="reader", name="Jo"))

        await vm.submit_profile(
            "Jo", "hi", FakeAuthenticator(failure=LoginError.PENDING_EMAIL_VERIFICATION)
        )

        assert vm.state.login_error == LoginError.PENDING_EMAIL_VERIFICATION


# ══════════════════════════════════════════════════════════════════════════
# Manage account
# ══════════════════════════════════════════════════════════════════════════

class TestManageAccountViewModel:
    @pytest.mark.asyncio
    async def test_reset_success(self):
        vm = ManageAccountViewModel()
        service = FakeDataService()

        await vm.reset_data_cache(service)

        assert service.reset_calls == 1
        assert vm.state.is_resetting is False
        assert vm.state.error_message is None

    @pytest.mark.asyncio
    async def test_reset_failure(self):
        vm = ManageAccountViewModel()

        await vm.reset_data_cache(FakeDataService(fail_reset=True))

        assert vm.state.error_message == UNABLE_TO_RESET_CACHE
        assert vm.state.is_resetting is False
