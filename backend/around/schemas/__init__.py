"""
Pydantic schemas for request/response validation.

Import all schemas here for easy access.
"""

from around.schemas.auth import UserAccount, UserLogin, UserSignup
from around.schemas.post import ContentRecord, Location, MediaKind

__all__ = [
    # Accounts
    "UserAccount",
    "UserLogin",
    "UserSignup",
    # Posts
    "ContentRecord",
    "Location",
    "MediaKind",
]
