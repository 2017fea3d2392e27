# =============================================================================
# app/routers/settlement.py - Settlement Tracker Endpoints
# =============================================================================
# The shared settlement list. Any signed-in user can read and change it.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user, AuthUser
from core.models.reserve import SettlementBulkRequest, SettlementItemCreate, SettlementItemUpdate
from core.services.settlement_service import SettlementService

router = APIRouter()

ItemId = Annotated[UUID, Path(description="Settlement item UUID")]


@router.get("")
async def list_settlement_items(user: AuthUser = Depends(get_current_user)):
    """
    All settlement items, newest first.

    Raises:
        404: The settlement table hasn't been created
    """
    items = SettlementService.list_items()
    return {"data": items, "count": len(items)}


@router.post("", status_code=201)
async def create_settlement_item(
    request: SettlementItemCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Add an MR number.

    Raises:
        400: Blank MR number
        409: MR number already listed
    """
    return {"data": SettlementService.create_item(request)}


@router.post("/bulk")
async def bulk_settlement_action(
    request: SettlementBulkRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Bulk update_status, delete or import.

    Raises:
        400: Unknown action
    """
    return SettlementService.bulk(request)


@router.patch("/{item_id}")
async def update_settlement_item(
    item_id: ItemId,
    request: SettlementItemUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Update an item's status and/or notes."""
    return {"data": SettlementService.update_item(item_id, request)}


@router.delete("/{item_id}")
async def delete_settlement_item(
    item_id: ItemId,
    user: AuthUser = Depends(get_current_user),
):
    """Delete an item."""
    SettlementService.delete_item(item_id)
    return {"success": True}
