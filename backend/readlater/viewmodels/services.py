"""
Readlater View-Models — Collaborator Interfaces
=================================================

What:  The app-side services the screen view-models talk to.
How:   Abstract base classes; the app injects concrete implementations
       (network-backed DataService, keychain-backed Authenticator) and the
       tests inject fakes.
"""

import enum
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from readlater.viewmodels.user_profile import UserProfile


@dataclass(frozen=True)
class Viewer:
    """The signed-in user as the app knows it."""

    user_id: uuid.UUID
    name: Optional[str]
    username: Optional[str]
    profile_image_url: Optional[str] = None


class UsernameErrorKind(str, enum.Enum):
    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"
    INVALID_PATTERN = "INVALID_PATTERN"
    NAME_UNAVAILABLE = "NAME_UNAVAILABLE"
    INTERNAL_SERVER = "INTERNAL_SERVER"
    NETWORK = "NETWORK"
    UNKNOWN = "UNKNOWN"


class UsernameValidationError(Exception):
    def __init__(self, kind: UsernameErrorKind):
        self.kind = kind
        super().__init__(f"Username rejected: {kind.value}")


class LoginError(str, enum.Enum):
    NETWORK = "NETWORK"
    UNAUTHORIZED = "UNAUTHORIZED"
    PENDING_EMAIL_VERIFICATION = "PENDING_EMAIL_VERIFICATION"
    UNKNOWN = "UNKNOWN"


class LoginFailure(Exception):
    def __init__(self, error: LoginError):
        self.error = error
        super().__init__(f"Login failed: {error.value}")


class DataService(ABC):
    @property
    @abstractmethod
    def current_viewer(self) -> Optional[Viewer]:
        """Viewer cached on device, if any. Never touches the network."""

    @abstractmethod
    async def fetch_viewer(self) -> Viewer:
        ...

    @abstractmethod
    async def delete_account(self, user_id: uuid.UUID) -> None:
        ...

    @abstractmethod
    async def validate_username(self, username: str) -> None:
        """
        Ask the server whether `username` can be claimed.

        Raises:
            UsernameValidationError: With the reason it cannot.
        """

    @abstractmethod
    async def reset_data_cache(self) -> None:
        """Drop locally cached library data so it is re-synced."""


class Authenticator(ABC):
    @abstractmethod
    async def create_account(self, profile: "UserProfile") -> None:
        """
        Raises:
            LoginFailure: Account creation was refused.
        """

    @abstractmethod
    def logout(self, data_service: DataService, is_account_deletion: bool = False) -> None:
        ...


class EventTracker(ABC):
    @abstractmethod
    def reset(self) -> None:
        """Forget the tracked identity (after logout or account deletion)."""
