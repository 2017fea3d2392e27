# =============================================================================
# core/models/folder.py - Site Folder Schemas
# =============================================================================
# Folder and file metadata for the site document pages. Files themselves live
# in object storage; only the rows are managed here.
# =============================================================================

from pydantic import BaseModel, Field


class FolderCreate(BaseModel):
    """Request body for creating a folder under a site type."""
    name: str | None = Field(default=None, max_length=255)
    description: str | None = None


class FolderPermissionCreate(BaseModel):
    """
    Request body for granting a user access to a folder.

    Example:
        {"user_email": "tech@example.com", "can_view": true, "can_edit": true}
    """
    user_email: str | None = None
    can_view: bool = True
    can_edit: bool = False
    can_delete: bool = False
