# =============================================================================
# app/routers/sheet_access.py - Sheet Sharing Endpoints
# =============================================================================
# Manage who can see a sheet: per-user grants and the owner's public link.
# Mounted under /api/v1/sheets alongside the sheet endpoints.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.access import (
    AccessGrantRequest,
    AccessUpdateRequest,
    PublicLinkResponse,
    PublicLinkToggle,
)
from core.services.access_service import AccessService
from core.services.public_link_service import PublicLinkService

router = APIRouter()

SheetId = Annotated[UUID, Path(description="Sheet UUID")]
AccessId = Annotated[UUID, Path(description="Access grant UUID")]


# =============================================================================
# Grants
# =============================================================================

@router.get("/{sheet_id}/access")
async def list_sheet_access(
    sheet_id: SheetId,
    user: AuthUser = Depends(get_current_user),
):
    """Active grants on a sheet, with grantee email and name."""
    return AccessService.list_access(sheet_id, user.id)


@router.post("/{sheet_id}/access", status_code=201)
async def grant_sheet_access(
    sheet_id: SheetId,
    request: AccessGrantRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Share a sheet with a user by email.

    Raises:
        400: Target is the sheet owner
        404: No user with that email
    """
    grant = AccessService.grant_access(sheet_id, user.id, request)
    return {"success": True, "access": grant}


@router.patch("/{sheet_id}/access/{access_id}")
async def update_sheet_access(
    sheet_id: SheetId,
    access_id: AccessId,
    request: AccessUpdateRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Change a grant's level, expiry or notes."""
    grant = AccessService.update_access(sheet_id, access_id, user.id, request)
    return {"success": True, "access": grant}


@router.delete("/{sheet_id}/access/{access_id}")
async def revoke_sheet_access(
    sheet_id: SheetId,
    access_id: AccessId,
    user: AuthUser = Depends(get_current_user),
):
    """Revoke a grant."""
    AccessService.revoke_access(sheet_id, access_id, user.id)
    return {"success": True}


@router.get("/{sheet_id}/users/search")
async def search_users(
    sheet_id: SheetId,
    q: Annotated[str, Query(description="Part of an email address")] = "",
    user: AuthUser = Depends(get_current_user),
):
    """Users the sheet could be shared with (at most 10)."""
    return {"users": AccessService.search_users(sheet_id, user.id, q)}


# =============================================================================
# Public Link
# =============================================================================

@router.post("/{sheet_id}/public-link", response_model=PublicLinkResponse)
async def create_public_link(
    sheet_id: SheetId,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create or rotate the sheet's public link (owner only).

    Any previous key stops working.
    """
    return PublicLinkService.create_link(sheet_id, user.id)


@router.patch("/{sheet_id}/public-link")
async def toggle_public_link(
    sheet_id: SheetId,
    request: PublicLinkToggle,
    user: AuthUser = Depends(get_current_user),
):
    """Enable or disable the sheet's public link (owner only)."""
    link = PublicLinkService.set_active(sheet_id, user.id, request.is_active)
    return {"success": True, "link": link}
