# =============================================================================
# core/services/sheet_service.py - Spreadsheet Business Logic
# =============================================================================
# Handles sheets, columns, rows and cells.
#
# The Supabase client runs with the service key (RLS bypassed), so every
# operation first resolves the caller's access level on the sheet:
#   owner  -> everything
#   admin  -> read, write, manage grants
#   editor -> read, write
#   viewer -> read
# Unreadable sheets are reported as "not found" so their existence isn't
# revealed.
# =============================================================================

import logging
import time
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
    translate_database_error,
)
from core.models.access import AccessLevel, WRITE_LEVELS
from core.models.sheet import (
    DEFAULT_COLUMN_WIDTH,
    DEFAULT_COLUMNS,
    CellUpdate,
    ColumnCreate,
    ColumnUpdate,
    SheetCreate,
    SheetSearchRequest,
    SheetUpdate,
    ValidationStatus,
)
from core.services.common import execute, first_row, rows_of
from lib.cells import default_cell_value, validate_cell_value
from lib.supabase_client import UNIQUE_VIOLATION_CODE, SupabaseClient, error_code
from lib.utils import is_expired, normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

OWNER = "owner"
SHEET_NOT_FOUND = "Sheet not found or access denied"

# Extra attempts at max(position)+n before falling back to a timestamp
MAX_ROW_POSITION_RETRIES = 3


class SheetService:
    """
    Service for spreadsheet operations.

    Provides a clean interface between API routes and the sheet tables.
    """

    # -------------------------------------------------------------------------
    # Access Resolution
    # -------------------------------------------------------------------------

    @staticmethod
    def get_sheet_row(sheet_id: str | UUID) -> dict[str, Any] | None:
        """Fetch an active sheet row, or None."""
        try:
            return SupabaseClient.fetch_one(
                "sheets", {"id": normalize_uuid(sheet_id), "is_active": True}
            )
        except Exception as e:
            raise translate_database_error(e, "fetch sheet", resource="sheet", table="sheets") from e

    @staticmethod
    def get_access_level(sheet: dict[str, Any], user_id: str | UUID) -> str | None:
        """
        Resolve the caller's level on a sheet.

        Returns:
            "owner", a grant level, or None when the caller has no
            active, unexpired grant
        """
        if str(sheet.get("owner_id")) == str(user_id):
            return OWNER

        try:
            grant = SupabaseClient.fetch_one(
                "sheet_access",
                {"sheet_id": sheet["id"], "user_id": normalize_uuid(user_id), "is_active": True},
                columns="access_level, expires_at",
            )
        except Exception as e:
            raise translate_database_error(e, "check sheet access", table="sheet_access") from e

        if not grant or is_expired(grant.get("expires_at")):
            return None
        return grant.get("access_level")

    @staticmethod
    def require_reader(sheet_id: str | UUID, user_id: str | UUID) -> tuple[dict[str, Any], str]:
        """
        Load a sheet the caller can read.

        Returns:
            (sheet, access_level)

        Raises:
            NotFoundError: Sheet missing, deleted, or not shared with the caller
        """
        sheet = SheetService.get_sheet_row(sheet_id)
        if not sheet:
            raise NotFoundError("sheet", str(sheet_id), message=SHEET_NOT_FOUND)

        level = SheetService.get_access_level(sheet, user_id)
        if level is None:
            raise NotFoundError("sheet", str(sheet_id), message=SHEET_NOT_FOUND)
        return sheet, level

    @staticmethod
    def require_editor(sheet_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Load a sheet the caller can write to."""
        sheet, level = SheetService.require_reader(sheet_id, user_id)
        if level != OWNER and level not in WRITE_LEVELS:
            raise ForbiddenError("You don't have permission to edit this sheet")
        return sheet

    @staticmethod
    def require_manager(sheet_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Load a sheet whose grants the caller may manage (owner or admin)."""
        sheet, level = SheetService.require_reader(sheet_id, user_id)
        if level not in (OWNER, AccessLevel.ADMIN.value):
            raise ForbiddenError("You don't have permission to manage access to this sheet")
        return sheet

    @staticmethod
    def require_owner(sheet_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Load a sheet owned by the caller."""
        sheet, level = SheetService.require_reader(sheet_id, user_id)
        if level != OWNER:
            raise ForbiddenError("Only the sheet owner can do this")
        return sheet

    # -------------------------------------------------------------------------
    # Sheets
    # -------------------------------------------------------------------------

    @staticmethod
    def list_sheets(user_id: str | UUID) -> list[dict[str, Any]]:
        """
        List sheets owned by or shared with a user, newest first.

        Each sheet carries an `access_level` key ("owner" or the grant level).
        """
        client = SupabaseClient.get_client()
        user_id_str = normalize_uuid(user_id)

        owned = rows_of(execute(
            client.table("sheets")
            .select("*")
            .eq("owner_id", user_id_str)
            .eq("is_active", True)
            .order("created_at", desc=True),
            "fetch sheets",
            table="sheets",
        ))
        for sheet in owned:
            sheet["access_level"] = OWNER

        grants = rows_of(execute(
            client.table("sheet_access")
            .select("sheet_id, access_level, expires_at")
            .eq("user_id", user_id_str)
            .eq("is_active", True),
            "fetch shared sheets",
            table="sheet_access",
        ))
        owned_ids = {str(sheet["id"]) for sheet in owned}
        levels = {
            str(grant["sheet_id"]): grant.get("access_level")
            for grant in grants
            if not is_expired(grant.get("expires_at")) and str(grant["sheet_id"]) not in owned_ids
        }

        shared: list[dict[str, Any]] = []
        if levels:
            shared = rows_of(execute(
                client.table("sheets")
                .select("*")
                .in_("id", list(levels))
                .eq("is_active", True),
                "fetch shared sheets",
                table="sheets",
            ))
            for sheet in shared:
                sheet["access_level"] = levels.get(str(sheet["id"]))

        sheets = owned + shared
        sheets.sort(key=lambda s: s.get("created_at") or "", reverse=True)
        return sheets

    @staticmethod
    def create_sheet(user_id: str | UUID, request: SheetCreate) -> dict[str, Any]:
        """
        Create a sheet with the default columns and one empty row.

        The sheet, columns, row, cells and history entry are separate
        inserts; a failure part-way leaves the earlier ones in place.

        Returns:
            {sheet_id, name, description, created_at}

        Raises:
            ValidationFailedError: If the name is blank
        """
        name = (request.name or "").strip()
        if not name:
            raise ValidationFailedError("Sheet name is required")

        client = SupabaseClient.get_client()
        user_id_str = normalize_uuid(user_id)

        sheet = first_row(execute(
            client.table("sheets").insert({
                "name": name,
                "description": request.description,
                "owner_id": user_id_str,
                "is_active": True,
                "settings": request.settings,
            }),
            "create sheet",
            resource="sheet",
            table="sheets",
        ), "create sheet")
        sheet_id = sheet["id"]

        columns = rows_of(execute(
            client.table("columns").insert([
                {
                    "sheet_id": sheet_id,
                    "width": DEFAULT_COLUMN_WIDTH,
                    "validation_rules": {},
                    **column,
                }
                for column in DEFAULT_COLUMNS
            ]),
            "create default columns",
            resource="column",
            table="columns",
        ))

        row = first_row(execute(
            client.table("rows").insert({"sheet_id": sheet_id, "position": 0}),
            "create first row",
            resource="row",
            table="rows",
        ), "create first row")

        SheetService._insert_default_cells(row["id"], columns)
        SheetService.log_history(sheet_id, user_id_str, "create_sheet", {"name": name})

        logger.info(f"Created sheet: {sheet_id} for user: {user_id_str}")
        return {
            "sheet_id": sheet_id,
            "name": sheet.get("name", name),
            "description": sheet.get("description"),
            "created_at": sheet.get("created_at"),
        }

    @staticmethod
    def get_sheet_data(sheet_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get a sheet with its columns and live rows.

        Returns:
            {sheet, columns, rows, access_level}; every row has a `cells`
            map of column_id -> value
        """
        sheet, level = SheetService.require_reader(sheet_id, user_id)
        columns, rows = SheetService.load_grid(sheet["id"])
        return {
            "sheet": sheet,
            "columns": columns,
            "rows": rows,
            "access_level": level,
        }

    @staticmethod
    def load_grid(sheet_id: str | UUID) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """
        Fetch columns (by position) and non-deleted rows with their cells.

        No access check; callers resolve access first.
        """
        client = SupabaseClient.get_client()
        sheet_id_str = normalize_uuid(sheet_id)

        columns = rows_of(execute(
            client.table("columns").select("*").eq("sheet_id", sheet_id_str).order("position"),
            "fetch columns",
            table="columns",
        ))
        rows = rows_of(execute(
            client.table("rows")
            .select("*")
            .eq("sheet_id", sheet_id_str)
            .eq("is_deleted", False)
            .order("position"),
            "fetch rows",
            table="rows",
        ))

        cells_by_row = SheetService._fetch_cells_by_row([row["id"] for row in rows])
        for row in rows:
            row["cells"] = {
                str(cell["column_id"]): cell.get("value")
                for cell in cells_by_row.get(str(row["id"]), [])
            }
        return columns, rows

    @staticmethod
    def update_sheet(sheet_id: str | UUID, user_id: str | UUID, request: SheetUpdate) -> dict[str, Any]:
        """Rename or re-describe a sheet (owner only)."""
        sheet = SheetService.require_owner(sheet_id, user_id)

        update_data = request.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
            if not update_data["name"]:
                raise ValidationFailedError("Sheet name cannot be empty")
        if not update_data:
            return sheet  # Nothing to update

        update_data["updated_at"] = utc_now_iso()
        client = SupabaseClient.get_client()
        updated = first_row(execute(
            client.table("sheets").update(update_data).eq("id", sheet["id"]),
            "update sheet",
            resource="sheet",
            table="sheets",
        ), "update sheet")

        SheetService.log_history(sheet["id"], user_id, "update_sheet", update_data)
        logger.info(f"Updated sheet: {sheet['id']}")
        return updated

    @staticmethod
    def delete_sheet(sheet_id: str | UUID, user_id: str | UUID) -> None:
        """Soft-delete a sheet (owner only)."""
        sheet = SheetService.require_owner(sheet_id, user_id)

        client = SupabaseClient.get_client()
        execute(
            client.table("sheets")
            .update({"is_active": False, "updated_at": utc_now_iso()})
            .eq("id", sheet["id"]),
            "delete sheet",
            resource="sheet",
            table="sheets",
        )
        logger.info(f"Deleted sheet: {sheet['id']}")

    # -------------------------------------------------------------------------
    # Cells
    # -------------------------------------------------------------------------

    @staticmethod
    def bulk_update_cells(
        sheet_id: str | UUID,
        user_id: str | UUID,
        updates: list[CellUpdate] | None,
    ) -> dict[str, Any]:
        """
        Upsert many cells at once.

        Each write is keyed on (row_id, column_id) and stored with a
        validation status computed from its column.

        Returns:
            {"updated": count}

        Raises:
            ValidationFailedError: Empty list, too many updates, or a
                column or row that isn't part of the sheet
        """
        if not updates:
            raise ValidationFailedError("No cell updates provided")
        if len(updates) > settings.BULK_LIMIT:
            raise ValidationFailedError(
                f"Too many cell updates (max {settings.BULK_LIMIT})",
                details={"count": len(updates), "limit": settings.BULK_LIMIT},
            )

        sheet = SheetService.require_editor(sheet_id, user_id)
        columns = SheetService._columns_by_id(sheet["id"])

        payload = []
        for update in updates:
            column = columns.get(str(update.column_id))
            if column is None:
                raise ValidationFailedError(
                    "Column does not belong to this sheet",
                    details={"column_id": str(update.column_id)},
                )
            payload.append(SheetService._cell_payload(update, column))

        SheetService._require_live_rows(sheet["id"], [update.row_id for update in updates])

        client = SupabaseClient.get_client()
        execute(
            client.table("cells").upsert(payload, on_conflict="row_id,column_id"),
            "update cells",
            resource="cell",
            table="cells",
        )

        logger.info(f"Updated {len(payload)} cells in sheet: {sheet['id']}")
        return {"updated": len(payload)}

    @staticmethod
    def update_cell(sheet_id: str | UUID, user_id: str | UUID, update: CellUpdate) -> dict[str, Any]:
        """Write a single cell, updating the existing row or inserting one."""
        sheet = SheetService.require_editor(sheet_id, user_id)
        column = SheetService._columns_by_id(sheet["id"]).get(str(update.column_id))
        if column is None:
            raise NotFoundError("column", str(update.column_id))
        SheetService._require_live_rows(sheet["id"], [update.row_id])

        payload = SheetService._cell_payload(update, column)
        client = SupabaseClient.get_client()

        try:
            existing = SupabaseClient.fetch_one(
                "cells",
                {"row_id": payload["row_id"], "column_id": payload["column_id"]},
                columns="id",
            )
        except Exception as e:
            raise translate_database_error(e, "fetch cell", resource="cell", table="cells") from e

        if existing:
            query = client.table("cells").update(payload).eq("id", existing["id"])
        else:
            query = client.table("cells").insert(payload)

        cell = first_row(execute(query, "update cell", resource="cell", table="cells"), "update cell")
        logger.info(f"Updated cell ({payload['row_id']}, {payload['column_id']}) in sheet: {sheet['id']}")
        return cell

    # -------------------------------------------------------------------------
    # Columns
    # -------------------------------------------------------------------------

    @staticmethod
    def add_column(sheet_id: str | UUID, user_id: str | UUID, request: ColumnCreate) -> dict[str, Any]:
        """Append a column after the current last position."""
        sheet = SheetService.require_editor(sheet_id, user_id)
        client = SupabaseClient.get_client()

        last = rows_of(execute(
            client.table("columns")
            .select("position")
            .eq("sheet_id", sheet["id"])
            .order("position", desc=True)
            .limit(1),
            "fetch column positions",
            table="columns",
        ))
        position = last[0]["position"] + 1 if last else 0

        data = request.model_dump(mode="json")
        data["name"] = data["name"].strip()
        data.update({"sheet_id": sheet["id"], "position": position})

        column = first_row(execute(
            client.table("columns").insert(data),
            "add column",
            resource="column",
            table="columns",
        ), "add column")

        SheetService.log_history(
            sheet["id"], user_id, "add_column", {"column_id": column["id"], "name": column.get("name")}
        )
        logger.info(f"Added column {column['id']} to sheet: {sheet['id']}")
        return column

    @staticmethod
    def update_column(
        sheet_id: str | UUID,
        column_id: str | UUID,
        user_id: str | UUID,
        request: ColumnUpdate,
    ) -> dict[str, Any]:
        """Rename, resize, move or retype a column."""
        sheet = SheetService.require_editor(sheet_id, user_id)
        column = SheetService._require_column(sheet["id"], column_id)

        update_data = request.model_dump(mode="json", exclude_unset=True)
        if not update_data:
            return column  # Nothing to update

        client = SupabaseClient.get_client()
        updated = first_row(execute(
            client.table("columns").update(update_data).eq("id", column["id"]),
            "update column",
            resource="column",
            table="columns",
        ), "update column")

        SheetService.log_history(sheet["id"], user_id, "update_column", {"column_id": column["id"], **update_data})
        return updated

    @staticmethod
    def delete_column(sheet_id: str | UUID, column_id: str | UUID, user_id: str | UUID) -> None:
        """Delete a column and every cell in it."""
        sheet = SheetService.require_editor(sheet_id, user_id)
        column = SheetService._require_column(sheet["id"], column_id)
        client = SupabaseClient.get_client()

        execute(
            client.table("cells").delete().eq("column_id", column["id"]),
            "delete column cells",
            table="cells",
        )
        execute(
            client.table("columns").delete().eq("id", column["id"]),
            "delete column",
            resource="column",
            table="columns",
        )

        SheetService.log_history(sheet["id"], user_id, "delete_column", {"column_id": column["id"]})
        logger.info(f"Deleted column {column['id']} from sheet: {sheet['id']}")

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------

    @staticmethod
    def add_row(sheet_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Append a row and fill it with default cells.

        Position is max(position)+1 over all rows (deleted ones keep their
        slot). A concurrent insert can take that position first; the
        unique violation is retried with the next position, and after the
        retries a millisecond timestamp is used instead.

        Returns:
            The row with a `cells` map of column_id -> value
        """
        sheet = SheetService.require_editor(sheet_id, user_id)
        client = SupabaseClient.get_client()

        last = rows_of(execute(
            client.table("rows")
            .select("position")
            .eq("sheet_id", sheet["id"])
            .order("position", desc=True)
            .limit(1),
            "fetch row positions",
            table="rows",
        ))
        position = last[0]["position"] + 1 if last else 0

        row = None
        for _ in range(MAX_ROW_POSITION_RETRIES + 1):
            try:
                response = client.table("rows").insert({"sheet_id": sheet["id"], "position": position}).execute()
            except Exception as e:
                if error_code(e) != UNIQUE_VIOLATION_CODE:
                    raise translate_database_error(e, "add row", resource="row", table="rows") from e
                logger.warning(f"Row position {position} taken in sheet {sheet['id']}, retrying")
                position += 1
                continue
            row = first_row(response, "add row")
            break

        if row is None:
            position = int(time.time() * 1000)
            row = first_row(execute(
                client.table("rows").insert({"sheet_id": sheet["id"], "position": position}),
                "add row",
                resource="row",
                table="rows",
            ), "add row")

        columns = list(SheetService._columns_by_id(sheet["id"]).values())
        cells = SheetService._insert_default_cells(row["id"], columns)
        row["cells"] = {str(cell["column_id"]): cell.get("value") for cell in cells}

        logger.info(f"Added row {row['id']} at position {position} to sheet: {sheet['id']}")
        return row

    @staticmethod
    def delete_row(sheet_id: str | UUID, row_id: str | UUID, user_id: str | UUID) -> None:
        """Soft-delete a row."""
        sheet = SheetService.require_editor(sheet_id, user_id)

        try:
            row = SupabaseClient.fetch_one(
                "rows", {"id": normalize_uuid(row_id), "sheet_id": sheet["id"]}, columns="id"
            )
        except Exception as e:
            raise translate_database_error(e, "fetch row", resource="row", table="rows") from e
        if not row:
            raise NotFoundError("row", str(row_id))

        client = SupabaseClient.get_client()
        execute(
            client.table("rows").update({"is_deleted": True}).eq("id", row["id"]),
            "delete row",
            resource="row",
            table="rows",
        )
        logger.info(f"Deleted row {row['id']} from sheet: {sheet['id']}")

    # -------------------------------------------------------------------------
    # Search, Stats & History
    # -------------------------------------------------------------------------

    @staticmethod
    def search(sheet_id: str | UUID, user_id: str | UUID, request: SheetSearchRequest) -> dict[str, Any]:
        """
        Find live rows matching a free-text term and per-column filters.

        Matching is case-insensitive substring. With no term and no
        filters every live row matches.
        """
        sheet, _ = SheetService.require_reader(sheet_id, user_id)
        _, rows = SheetService.load_grid(sheet["id"])

        term = request.search_term.strip().lower()
        filters = {
            column_id: value.strip().lower()
            for column_id, value in request.column_filters.items()
            if value and value.strip()
        }

        results = []
        for row in rows:
            cells = row["cells"]
            if term and not any(
                term in str(value).lower() for value in cells.values() if value is not None
            ):
                continue
            if any(
                needle not in str(cells.get(column_id) if cells.get(column_id) is not None else "").lower()
                for column_id, needle in filters.items()
            ):
                continue
            results.append(str(row["id"]))

        return {"results": results, "count": len(results)}

    @staticmethod
    def get_stats(sheet_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Count columns, rows and filled/invalid cells."""
        sheet, _ = SheetService.require_reader(sheet_id, user_id)
        client = SupabaseClient.get_client()

        column_ids = list(SheetService._columns_by_id(sheet["id"]))
        rows = rows_of(execute(
            client.table("rows").select("id, is_deleted").eq("sheet_id", sheet["id"]),
            "fetch rows",
            table="rows",
        ))
        live_ids = [row["id"] for row in rows if not row.get("is_deleted")]
        cells_by_row = SheetService._fetch_cells_by_row(live_ids)

        column_fill = {column_id: 0 for column_id in column_ids}
        filled = 0
        invalid = 0
        for cells in cells_by_row.values():
            for cell in cells:
                if cell.get("validation_status") == ValidationStatus.INVALID.value:
                    invalid += 1
                value = cell.get("value")
                if value is None or (isinstance(value, str) and not value.strip()):
                    continue
                filled += 1
                column_id = str(cell["column_id"])
                column_fill[column_id] = column_fill.get(column_id, 0) + 1

        return {
            "sheet_id": sheet["id"],
            "column_count": len(column_ids),
            "row_count": len(live_ids),
            "deleted_row_count": len(rows) - len(live_ids),
            "filled_cell_count": filled,
            "invalid_cell_count": invalid,
            "column_fill": column_fill,
        }

    @staticmethod
    def get_history(
        sheet_id: str | UUID,
        user_id: str | UUID,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Most recent sheet_history entries, newest first (DEFAULT_PAGE_SIZE by default)."""
        sheet, _ = SheetService.require_reader(sheet_id, user_id)
        limit = limit or settings.DEFAULT_PAGE_SIZE
        client = SupabaseClient.get_client()
        return rows_of(execute(
            client.table("sheet_history")
            .select("*")
            .eq("sheet_id", sheet["id"])
            .order("created_at", desc=True)
            .limit(min(limit, settings.MAX_PAGE_SIZE)),
            "fetch sheet history",
            table="sheet_history",
        ))

    @staticmethod
    def log_history(
        sheet_id: str | UUID,
        user_id: str | UUID,
        action: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Record a sheet_history entry.

        History is an audit trail; a failed write is logged and the
        operation that triggered it still succeeds.
        """
        client = SupabaseClient.get_client()
        try:
            client.table("sheet_history").insert({
                "sheet_id": normalize_uuid(sheet_id),
                "user_id": normalize_uuid(user_id),
                "action": action,
                "details": details or {},
            }).execute()
        except Exception as e:
            logger.warning(f"Failed to record history '{action}' for sheet {sheet_id}: {e}")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _columns_by_id(sheet_id: str) -> dict[str, dict[str, Any]]:
        client = SupabaseClient.get_client()
        columns = rows_of(execute(
            client.table("columns").select("*").eq("sheet_id", sheet_id).order("position"),
            "fetch columns",
            table="columns",
        ))
        return {str(column["id"]): column for column in columns}

    @staticmethod
    def _require_live_rows(sheet_id: str, row_ids: list[str | UUID]) -> None:
        """Reject row ids that are deleted or belong to another sheet."""
        wanted = sorted({normalize_uuid(row_id) for row_id in row_ids})
        client = SupabaseClient.get_client()
        found = rows_of(execute(
            client.table("rows")
            .select("id")
            .in_("id", wanted)
            .eq("sheet_id", sheet_id)
            .eq("is_deleted", False),
            "fetch rows",
            resource="row",
            table="rows",
        ))
        missing = set(wanted) - {str(row["id"]) for row in found}
        if missing:
            raise ValidationFailedError(
                "Row does not belong to this sheet",
                details={"row_ids": sorted(missing)},
            )

    @staticmethod
    def _require_column(sheet_id: str, column_id: str | UUID) -> dict[str, Any]:
        try:
            column = SupabaseClient.fetch_one(
                "columns", {"id": normalize_uuid(column_id), "sheet_id": sheet_id}
            )
        except Exception as e:
            raise translate_database_error(e, "fetch column", resource="column", table="columns") from e
        if not column:
            raise NotFoundError("column", str(column_id))
        return column

    @staticmethod
    def _fetch_cells_by_row(row_ids: list[str]) -> dict[str, list[dict[str, Any]]]:
        if not row_ids:
            return {}
        client = SupabaseClient.get_client()
        cells = rows_of(execute(
            client.table("cells").select("*").in_("row_id", [str(row_id) for row_id in row_ids]),
            "fetch cells",
            table="cells",
        ))
        grouped: dict[str, list[dict[str, Any]]] = {}
        for cell in cells:
            grouped.setdefault(str(cell["row_id"]), []).append(cell)
        return grouped

    @staticmethod
    def _insert_default_cells(row_id: str, columns: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not columns:
            return []
        client = SupabaseClient.get_client()
        payload = [
            {
                "row_id": row_id,
                "column_id": column["id"],
                "value": default_cell_value(column.get("type", "text"), column.get("default_value")),
                "validation_status": ValidationStatus.VALID.value,
            }
            for column in columns
        ]
        return rows_of(execute(
            client.table("cells").insert(payload),
            "create default cells",
            resource="cell",
            table="cells",
        ))

    @staticmethod
    def _cell_payload(update: CellUpdate, column: dict[str, Any]) -> dict[str, Any]:
        status, message = validate_cell_value(
            column.get("type", "text"),
            update.value,
            is_required=bool(column.get("is_required")),
            validation_rules=column.get("validation_rules"),
        )
        return {
            "row_id": str(update.row_id),
            "column_id": str(update.column_id),
            "value": update.value,
            "formatted_value": update.formatted_value,
            "validation_status": status,
            "validation_message": message,
            "updated_at": utc_now_iso(),
        }
