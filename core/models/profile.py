# =============================================================================
# core/models/profile.py - User Profile Schemas
# =============================================================================

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""
    full_name: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=2048)


class UserActiveUpdate(BaseModel):
    """Admin request to activate or deactivate an account."""
    is_active: bool


class UserProfile(BaseModel):
    """
    A profiles row plus the caller's admin flag.

    Built from the token alone when the user has no profile row yet.
    """
    id: str
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    is_active: bool = True
    is_admin: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_db_row(cls, row: dict[str, Any], is_admin: bool = False) -> "UserProfile":
        return cls(
            id=str(row["id"]),
            email=row.get("email"),
            full_name=row.get("full_name"),
            avatar_url=row.get("avatar_url"),
            is_active=row.get("is_active", True) is not False,
            is_admin=is_admin,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class UserStats(BaseModel):
    """Counts shown on the admin user page."""
    total_users: int = 0
    active_users: int = 0
    admin_users: int = 0
    recent_signups: int = Field(default=0, description="Profiles created in the last 7 days")
    pending_invitations: int = 0
