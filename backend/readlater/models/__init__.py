"""ORM models. Importing this package registers every table on Base.metadata."""

from readlater.models.device_token import UserDeviceToken
from readlater.models.library_item import LibraryItem, LibraryItemFolder
from readlater.models.rule import Rule, RuleActionType
from readlater.models.user import User

__all__ = [
    "LibraryItem",
    "LibraryItemFolder",
    "Rule",
    "RuleActionType",
    "User",
    "UserDeviceToken",
]
