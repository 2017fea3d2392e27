# =============================================================================
# app/routers/reserve.py - Reserve Tracker Endpoints
# =============================================================================
# The caller's own list of reserved MR numbers.
# Static paths (/import, /bulk, /categories, /export) are declared before
# /{item_id} so they aren't captured as ids.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse

from app.auth import get_current_user, AuthUser
from core.models.reserve import (
    ImportRequest,
    ItemStatus,
    Priority,
    ReserveBulkRequest,
    ReserveItemCreate,
    ReserveItemUpdate,
)
from core.services.export_service import ExportService
from core.services.reserve_service import ReserveService

router = APIRouter()

ItemId = Annotated[UUID, Path(description="Reserve item UUID")]


@router.get("")
async def list_reserve_items(
    status: Annotated[ItemStatus | None, Query(description="Filter by status")] = None,
    priority: Annotated[Priority | None, Query(description="Filter by priority")] = None,
    category: Annotated[str | None, Query(description="Filter by category")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """The caller's reserve items, newest first."""
    items = ReserveService.list_items(user.id, status=status, priority=priority, category=category)
    return {"data": items, "count": len(items)}


@router.post("", status_code=201)
async def create_reserve_item(
    request: ReserveItemCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Add an MR number.

    Raises:
        400: Blank MR number
        409: MR number already in the caller's list
    """
    return {"data": ReserveService.create_item(user.id, request)}


@router.post("/import")
async def import_reserve_items(
    request: ImportRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Add many MR numbers, skipping ones already present."""
    return ReserveService.import_numbers(user.id, request.mr_numbers)


@router.post("/bulk")
async def bulk_reserve_action(
    request: ReserveBulkRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Update status/priority/category of, or delete, many items."""
    return ReserveService.bulk(user.id, request)


@router.get("/categories")
async def list_reserve_categories(user: AuthUser = Depends(get_current_user)):
    """Distinct categories the caller uses."""
    return {"categories": ReserveService.list_categories(user.id)}


@router.get("/export")
async def export_reserve_items(user: AuthUser = Depends(get_current_user)):
    """Download the caller's reserve items as CSV."""
    df = ExportService.reserve_to_dataframe(ReserveService.list_items(user.id))

    return StreamingResponse(
        iter([ExportService.to_csv(df)]),
        media_type="text/csv",
        headers={
            "Content-Disposition": "attachment; filename=reserve_items.csv",
        }
    )


@router.patch("/{item_id}")
async def update_reserve_item(
    item_id: ItemId,
    request: ReserveItemUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Update an item's status, notes, priority, category or due date."""
    return {"data": ReserveService.update_item(item_id, user.id, request)}


@router.delete("/{item_id}")
async def delete_reserve_item(
    item_id: ItemId,
    user: AuthUser = Depends(get_current_user),
):
    """Delete an item."""
    ReserveService.delete_item(item_id, user.id)
    return {"success": True}
