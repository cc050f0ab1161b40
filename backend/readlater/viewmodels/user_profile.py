"""
Readlater View-Models — User Profile Rules
============================================

What:  The profile a new account is created with, and the local username
       rules checked before asking the server.

Username rules (checked on the lowercased input):
    - 4 to 14 characters
    - letters, digits and inner underscores; must start and end with a
      letter or digit
"""

import enum
import re
from dataclasses import dataclass
from typing import Optional

from readlater.result import Err, Ok, Result

USERNAME_MIN_LENGTH = 4
USERNAME_MAX_LENGTH = 14
USERNAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_]+[a-z0-9]$")

NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 400


class PotentialUsernameStatus(str, enum.Enum):
    NO_USERNAME = "NO_USERNAME"
    AVAILABLE = "AVAILABLE"
    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"
    INVALID_PATTERN = "INVALID_PATTERN"
    UNAVAILABLE = "UNAVAILABLE"

    @property
    def message(self) -> Optional[str]:
        return _STATUS_MESSAGES.get(self)

    @classmethod
    def validation_error(cls, username: str) -> Optional["PotentialUsernameStatus"]:
        """The local rule `username` breaks, or None if it passes."""
        if len(username) < USERNAME_MIN_LENGTH:
            return cls.TOO_SHORT
        if len(username) > USERNAME_MAX_LENGTH:
            return cls.TOO_LONG
        if not USERNAME_PATTERN.match(username):
            return cls.INVALID_PATTERN
        return None


_STATUS_MESSAGES = {
    PotentialUsernameStatus.TOO_SHORT: "Username must contain at least 4 characters",
    PotentialUsernameStatus.TOO_LONG: "Username must be less than 15 characters",
    PotentialUsernameStatus.INVALID_PATTERN: "Username can contain only letters and numbers",
    PotentialUsernameStatus.UNAVAILABLE: "This name is not available",
}


@dataclass(frozen=True)
class UserProfile:
    username: str
    name: str
    bio: Optional[str] = None

    @classmethod
    def make(cls, username: str, name: str, bio: Optional[str] = None) -> Result["UserProfile", str]:
        """Validated constructor: Ok(profile) or Err(message to show the user)."""
        username = username.strip().lower()
        status = PotentialUsernameStatus.validation_error(username)
        if status is not None:
            return Err(status.message)

        name = name.strip()
        if not name:
            return Err("Name cannot be empty")
        if len(name) > NAME_MAX_LENGTH:
            return Err(f"Name must be less than {NAME_MAX_LENGTH + 1} characters")

        if bio is not None and len(bio) > BIO_MAX_LENGTH:
            return Err(f"Bio must be less than {BIO_MAX_LENGTH + 1} characters")

        return Ok(cls(username=username, name=name, bio=bio))
