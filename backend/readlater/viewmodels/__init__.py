"""
Screen view-models for the Readlater apps: explicit state + reducer stores
(see store.py) driving the profile, create-profile and manage-account screens.
"""

from readlater.viewmodels.create_profile import CreateProfileViewModel
from readlater.viewmodels.manage_account import ManageAccountViewModel
from readlater.viewmodels.profile import ProfileViewModel
from readlater.viewmodels.store import Store
from readlater.viewmodels.user_profile import PotentialUsernameStatus, UserProfile

__all__ = [
    "CreateProfileViewModel",
    "ManageAccountViewModel",
    "PotentialUsernameStatus",
    "ProfileViewModel",
    "Store",
    "UserProfile",
]
