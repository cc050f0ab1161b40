"""
Readlater View-Models — Create Profile Screen
===============================================

What:  Username availability feedback and profile submission for a new
       account.
How:   set_potential_username() records the text immediately and schedules a
       validation 0.5 s later; typing again cancels the pending one. The
       validation checks the local rules first and only asks the server
       when they pass. start() runs the same debounced check on the
       suggested username when the screen opens.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Optional

from readlater.result import Err
from readlater.viewmodels.services import (
    Authenticator,
    DataService,
    LoginError,
    LoginFailure,
    UsernameErrorKind,
    UsernameValidationError,
)
from readlater.viewmodels.store import Store
from readlater.viewmodels.user_profile import PotentialUsernameStatus, UserProfile

logger = logging.getLogger(__name__)

USERNAME_DEBOUNCE_SECONDS = 0.5

_STATUS_FOR_KIND = {
    UsernameErrorKind.TOO_SHORT: PotentialUsernameStatus.TOO_SHORT,
    UsernameErrorKind.TOO_LONG: PotentialUsernameStatus.TOO_LONG,
    UsernameErrorKind.INVALID_PATTERN: PotentialUsernameStatus.INVALID_PATTERN,
    UsernameErrorKind.NAME_UNAVAILABLE: PotentialUsernameStatus.UNAVAILABLE,
}


@dataclass(frozen=True)
class CreateProfileState:
    potential_username: str = ""
    potential_username_status: PotentialUsernameStatus = PotentialUsernameStatus.NO_USERNAME
    login_error: Optional[LoginError] = None
    validation_error_message: Optional[str] = None


@dataclass(frozen=True)
class UsernameChanged:
    username: str


@dataclass(frozen=True)
class UsernameStatusChanged:
    status: PotentialUsernameStatus


@dataclass(frozen=True)
class LoginFailed:
    error: LoginError


@dataclass(frozen=True)
class ValidationFailed:
    message: Optional[str]


def reduce_create_profile(state: CreateProfileState, action) -> CreateProfileState:
    if isinstance(action, UsernameChanged):
        return replace(state, potential_username=action.username)
    if isinstance(action, UsernameStatusChanged):
        return replace(state, potential_username_status=action.status)
    if isinstance(action, LoginFailed):
        return replace(state, login_error=action.error)
    if isinstance(action, ValidationFailed):
        return replace(state, validation_error_message=action.message)
    return state


class CreateProfileViewModel:
    def __init__(
        self,
        initial_user_profile: UserProfile,
        debounce_seconds: float = USERNAME_DEBOUNCE_SECONDS,
    ):
        self.initial_user_profile = initial_user_profile
        self.debounce_seconds = debounce_seconds
        self.store: Store[CreateProfileState] = Store(
            CreateProfileState(potential_username=initial_user_profile.username),
            reduce_create_profile,
        )
        self._pending_validation: Optional[asyncio.Task] = None

    @property
    def state(self) -> CreateProfileState:
        return self.store.state

    @property
    def has_suggested_profile(self) -> bool:
        return bool(self.initial_user_profile.name or self.initial_user_profile.username)

    @property
    def headline_text(self) -> str:
        return "Confirm Your Profile" if self.has_suggested_profile else "Create Your Profile"

    @property
    def submit_button_text(self) -> str:
        return "Confirm" if self.has_suggested_profile else "Submit"

    def start(self, data_service: DataService) -> None:
        """Validate the suggested username once the screen is shown."""
        self.set_potential_username(self.state.potential_username, data_service)

    def set_potential_username(self, username: str, data_service: DataService) -> None:
        self.store.dispatch(UsernameChanged(username))
        if self._pending_validation is not None and not self._pending_validation.done():
            self._pending_validation.cancel()
        self._pending_validation = self.store.launch(
            self._validate_after_pause(username, data_service)
        )

    async def _validate_after_pause(self, username: str, data_service: DataService) -> None:
        await asyncio.sleep(self.debounce_seconds)
        await self.validate_username(username, data_service)

    async def validate_username(self, username: str, data_service: DataService) -> None:
        local_error = PotentialUsernameStatus.validation_error(username.lower())
        if local_error is not None:
            self.store.dispatch(UsernameStatusChanged(local_error))
            return

        try:
            await data_service.validate_username(username)
        except UsernameValidationError as e:
            status = _STATUS_FOR_KIND.get(e.kind)
            if status is not None:
                self.store.dispatch(UsernameStatusChanged(status))
            elif e.kind == UsernameErrorKind.NETWORK:
                self.store.dispatch(LoginFailed(LoginError.NETWORK))
            else:
                self.store.dispatch(LoginFailed(LoginError.UNKNOWN))
            return

        self.store.dispatch(UsernameStatusChanged(PotentialUsernameStatus.AVAILABLE))

    async def submit_profile(self, name: str, bio: str, authenticator: Authenticator) -> None:
        profile = UserProfile.make(
            username=self.state.potential_username,
            name=name,
            bio=bio or None,
        )
        if isinstance(profile, Err):
            self.store.dispatch(ValidationFailed(profile.error))
            return

        self.store.dispatch(ValidationFailed(None))
        try:
            await authenticator.create_account(profile.value)
        except LoginFailure as e:
            logger.info("Account creation refused: %s", e.error.value)
            self.store.dispatch(LoginFailed(e.error))
