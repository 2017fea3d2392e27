# =============================================================================
# core/models/access.py - Sheet Sharing Schemas
# =============================================================================
# Sheet access grants (sheet_access table) and public links (public_links).
#
# Access levels, from least to most:
#   viewer -> read the sheet
#   editor -> also write cells, rows and columns
#   admin  -> also manage other users' grants
# The sheet owner implicitly has every level.
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class AccessLevel(str, Enum):
    """Level granted to a user on a sheet."""
    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"


# Levels that may write to a sheet
WRITE_LEVELS = frozenset({AccessLevel.EDITOR.value, AccessLevel.ADMIN.value})


class AccessGrantRequest(BaseModel):
    """
    Request body for sharing a sheet with a user.

    Example:
        {"user_email": "engineer@example.com", "access_level": "editor"}
    """
    user_email: str = Field(..., min_length=3, description="Email of the user to share with")
    access_level: AccessLevel
    expires_at: datetime | None = Field(default=None, description="Grant stops working after this time")
    notes: str | None = None


class AccessUpdateRequest(BaseModel):
    """Request body for changing an existing grant."""
    access_level: AccessLevel | None = None
    expires_at: datetime | None = None
    notes: str | None = None


class PublicLinkToggle(BaseModel):
    """Enable or disable a sheet's public link."""
    is_active: bool


class PublicLinkResponse(BaseModel):
    """Response after creating or rotating a public link."""
    sheet_id: UUID
    access_key: str
    public_link: str
