"""
Readlater View-Models — Profile Screen
========================================

What:  Profile card data, account deletion and the version footer.
How:   load_profile_data() renders the viewer cached on device first, then
       whatever the network returns. The two writes are independent: the
       later one wins. Effects should be started through `store.launch()` so
       closing the screen cancels them.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from readlater.viewmodels.services import Authenticator, DataService, EventTracker, Viewer
from readlater.viewmodels.store import Store

logger = logging.getLogger(__name__)

UNABLE_TO_LOAD_ACCOUNT = "Unable to load account information."
UNABLE_TO_DELETE_ACCOUNT = "We were unable to delete your account."


@dataclass(frozen=True)
class ProfileCardData:
    name: str = ""
    username: str = ""
    image_url: Optional[str] = None


@dataclass(frozen=True)
class ProfileState:
    is_loading: bool = False
    profile_card_data: ProfileCardData = ProfileCardData()
    delete_account_error_message: Optional[str] = None


# ── Actions ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LoadingChanged:
    is_loading: bool


@dataclass(frozen=True)
class ProfileCardLoaded:
    data: ProfileCardData


@dataclass(frozen=True)
class DeleteAccountFailed:
    message: str


def reduce_profile(state: ProfileState, action) -> ProfileState:
    if isinstance(action, LoadingChanged):
        return replace(state, is_loading=action.is_loading)
    if isinstance(action, ProfileCardLoaded):
        return replace(state, profile_card_data=action.data)
    if isinstance(action, DeleteAccountFailed):
        return replace(state, delete_account_error_message=action.message)
    return state


def _card_for(viewer: Viewer) -> Optional[ProfileCardData]:
    if viewer.name is None or viewer.username is None:
        return None
    return ProfileCardData(
        name=viewer.name,
        username=viewer.username,
        image_url=viewer.profile_image_url or None,
    )


class ProfileViewModel:
    def __init__(self, app_version: Optional[str] = None):
        self.app_version = app_version
        self.store: Store[ProfileState] = Store(ProfileState(), reduce_profile)

    @property
    def state(self) -> ProfileState:
        return self.store.state

    @property
    def app_version_string(self) -> str:
        return f"Readlater Version {self.app_version}" if self.app_version else ""

    async def load_profile_data(self, data_service: DataService) -> None:
        self.store.dispatch(LoadingChanged(True))
        try:
            cached = data_service.current_viewer
            if cached is not None:
                card = _card_for(cached)
                if card is not None:
                    self.store.dispatch(ProfileCardLoaded(card))

            try:
                viewer = await data_service.fetch_viewer()
            except Exception as e:
                # The cached card (if any) stays on screen
                logger.warning("Could not refresh viewer: %s", str(e))
            else:
                card = _card_for(viewer)
                if card is not None:
                    self.store.dispatch(ProfileCardLoaded(card))
        finally:
            self.store.dispatch(LoadingChanged(False))

    async def delete_account(
        self,
        data_service: DataService,
        authenticator: Authenticator,
        event_tracker: Optional[EventTracker] = None,
    ) -> None:
        viewer = data_service.current_viewer
        if viewer is None:
            self.store.dispatch(DeleteAccountFailed(UNABLE_TO_LOAD_ACCOUNT))
            return

        try:
            await data_service.delete_account(viewer.user_id)
        except Exception as e:
            logger.error("Account deletion failed for %s: %s", viewer.user_id, str(e))
            self.store.dispatch(DeleteAccountFailed(UNABLE_TO_DELETE_ACCOUNT))
            return

        authenticator.logout(data_service, is_account_deletion=True)
        if event_tracker is not None:
            event_tracker.reset()
