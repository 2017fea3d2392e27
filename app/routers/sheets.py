# =============================================================================
# app/routers/sheets.py - Spreadsheet Endpoints
# =============================================================================
# Sheets, cells, columns and rows.
# All endpoints require authentication; access to a given sheet is checked
# by SheetService (owner, or an active sheet_access grant).
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse

from app.auth import get_current_user, AuthUser
from core.models.sheet import (
    BulkCellUpdate,
    CellUpdate,
    ColumnCreate,
    ColumnUpdate,
    SheetCreate,
    SheetCreateResponse,
    SheetSearchRequest,
    SheetSearchResponse,
    SheetStats,
    SheetUpdate,
)
from core.services.export_service import ExportService
from core.services.sheet_service import SheetService

router = APIRouter()

SheetId = Annotated[UUID, Path(description="Sheet UUID")]


# =============================================================================
# Sheets
# =============================================================================

@router.get("")
async def list_sheets(user: AuthUser = Depends(get_current_user)):
    """
    List sheets owned by or shared with the current user, newest first.

    Each sheet carries `access_level` ("owner", "admin", "editor" or "viewer").
    """
    sheets = SheetService.list_sheets(user.id)
    return {"sheets": sheets, "count": len(sheets)}


@router.post("", response_model=SheetCreateResponse, status_code=201)
async def create_sheet(
    request: SheetCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a sheet.

    The sheet starts with the default site-tracking columns and one
    empty row.
    """
    return SheetService.create_sheet(user.id, request)


@router.get("/{sheet_id}")
async def get_sheet(
    sheet_id: SheetId,
    user: AuthUser = Depends(get_current_user),
):
    """
    Get a sheet with its columns and rows.

    Rows carry a `cells` map of column_id -> value.

    Raises:
        404: Sheet not found or access denied
    """
    return SheetService.get_sheet_data(sheet_id, user.id)


@router.patch("/{sheet_id}")
async def update_sheet(
    sheet_id: SheetId,
    request: SheetUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Rename a sheet or change its description/settings (owner only)."""
    return SheetService.update_sheet(sheet_id, user.id, request)


@router.delete("/{sheet_id}")
async def delete_sheet(
    sheet_id: SheetId,
    user: AuthUser = Depends(get_current_user),
):
    """Soft-delete a sheet (owner only)."""
    SheetService.delete_sheet(sheet_id, user.id)
    return {"success": True, "sheet_id": str(sheet_id)}


# =============================================================================
# Cells
# =============================================================================

@router.put("/{sheet_id}/cells")
async def bulk_update_cells(
    sheet_id: SheetId,
    request: BulkCellUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Write many cells at once.

    Each update is an upsert on (row_id, column_id).

    Raises:
        400: Empty list or more than BULK_LIMIT updates
    """
    return SheetService.bulk_update_cells(sheet_id, user.id, request.updates)


@router.patch("/{sheet_id}/cells")
async def update_cell(
    sheet_id: SheetId,
    request: CellUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Write a single cell."""
    return SheetService.update_cell(sheet_id, user.id, request)


# =============================================================================
# Columns
# =============================================================================

@router.post("/{sheet_id}/columns", status_code=201)
async def add_column(
    sheet_id: SheetId,
    request: ColumnCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Append a column to a sheet."""
    return SheetService.add_column(sheet_id, user.id, request)


@router.patch("/{sheet_id}/columns/{column_id}")
async def update_column(
    sheet_id: SheetId,
    column_id: Annotated[UUID, Path(description="Column UUID")],
    request: ColumnUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Rename, resize, move or retype a column."""
    return SheetService.update_column(sheet_id, column_id, user.id, request)


@router.delete("/{sheet_id}/columns/{column_id}")
async def delete_column(
    sheet_id: SheetId,
    column_id: Annotated[UUID, Path(description="Column UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Delete a column and its cells."""
    SheetService.delete_column(sheet_id, column_id, user.id)
    return {"success": True, "column_id": str(column_id)}


# =============================================================================
# Rows
# =============================================================================

@router.post("/{sheet_id}/rows", status_code=201)
async def add_row(
    sheet_id: SheetId,
    user: AuthUser = Depends(get_current_user),
):
    """Append a row filled with each column's default value."""
    return SheetService.add_row(sheet_id, user.id)


@router.delete("/{sheet_id}/rows/{row_id}")
async def delete_row(
    sheet_id: SheetId,
    row_id: Annotated[UUID, Path(description="Row UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Soft-delete a row."""
    SheetService.delete_row(sheet_id, row_id, user.id)
    return {"success": True, "row_id": str(row_id)}


# =============================================================================
# Search, Stats, History & Export
# =============================================================================

@router.post("/{sheet_id}/search", response_model=SheetSearchResponse)
async def search_sheet(
    sheet_id: SheetId,
    request: SheetSearchRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Ids of rows matching a search term and column filters."""
    return SheetService.search(sheet_id, user.id, request)


@router.get("/{sheet_id}/stats", response_model=SheetStats)
async def get_sheet_stats(
    sheet_id: SheetId,
    user: AuthUser = Depends(get_current_user),
):
    """Column, row and cell counts for a sheet."""
    return SheetService.get_stats(sheet_id, user.id)


@router.get("/{sheet_id}/history")
async def get_sheet_history(
    sheet_id: SheetId,
    limit: Annotated[int | None, Query(ge=1, description="Max entries (capped at MAX_PAGE_SIZE)")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Recent changes to a sheet, newest first."""
    history = SheetService.get_history(sheet_id, user.id, limit=limit)
    return {"history": history, "count": len(history)}


@router.get("/{sheet_id}/export")
async def export_sheet(
    sheet_id: SheetId,
    user: AuthUser = Depends(get_current_user),
):
    """Download a sheet as CSV (header row = column names)."""
    data = SheetService.get_sheet_data(sheet_id, user.id)
    df = ExportService.sheet_to_dataframe(data["columns"], data["rows"])
    filename = f"sheet_{str(sheet_id)[:8]}.csv"

    return StreamingResponse(
        iter([ExportService.to_csv(df)]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
        }
    )
