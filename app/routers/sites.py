# =============================================================================
# app/routers/sites.py - Site Folder Endpoints
# =============================================================================
# Folder metadata and per-user folder permissions for the site pages.
# File contents live in object storage and are not served here.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import check_is_admin, get_current_user, AuthUser
from core.models.folder import FolderCreate, FolderPermissionCreate
from core.services.folder_service import FolderService

router = APIRouter()

SiteType = Annotated[str, Path(min_length=1, max_length=50, description="Site type, e.g. 'ericsson'")]
FolderId = Annotated[UUID, Path(description="Folder UUID")]


@router.get("/{site_type}/folders")
async def list_folders(
    site_type: SiteType,
    user: AuthUser = Depends(get_current_user),
):
    """Folders the caller created, was given view access to, or (admins) all."""
    folders = FolderService.list_folders(site_type, user.id, is_admin=check_is_admin(user))
    return {"folders": folders, "count": len(folders)}


@router.post("/{site_type}/folders", status_code=201)
async def create_folder(
    site_type: SiteType,
    request: FolderCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Create a folder."""
    return {"folder": FolderService.create_folder(site_type, user.id, request)}


@router.delete("/folders/{folder_id}")
async def delete_folder(
    folder_id: FolderId,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a folder with its permissions and file rows (creator or admin)."""
    FolderService.delete_folder(folder_id, user.id, is_admin=check_is_admin(user))
    return {"success": True}


@router.get("/folders/{folder_id}/permissions")
async def list_folder_permissions(
    folder_id: FolderId,
    user: AuthUser = Depends(get_current_user),
):
    """Who has access to a folder (creator or admin)."""
    permissions = FolderService.list_permissions(folder_id, user.id, is_admin=check_is_admin(user))
    return {"permissions": permissions}


@router.post("/folders/{folder_id}/permissions", status_code=201)
async def add_folder_permission(
    folder_id: FolderId,
    request: FolderPermissionCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Give a user access to a folder.

    Raises:
        404: No user with that email
        409: The user already has a permission row
    """
    permission = FolderService.add_permission(folder_id, user.id, request, is_admin=check_is_admin(user))
    return {"permission": permission}


@router.delete("/folders/{folder_id}/permissions/{permission_id}")
async def remove_folder_permission(
    folder_id: FolderId,
    permission_id: Annotated[UUID, Path(description="Permission UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Remove a user's access to a folder."""
    FolderService.remove_permission(folder_id, permission_id, user.id, is_admin=check_is_admin(user))
    return {"success": True}


@router.get("/folders/{folder_id}/files")
async def list_folder_files(
    folder_id: FolderId,
    user: AuthUser = Depends(get_current_user),
):
    """File metadata for a folder the caller can view."""
    files = FolderService.list_files(folder_id, user.id, is_admin=check_is_admin(user))
    return {"files": files, "count": len(files)}
