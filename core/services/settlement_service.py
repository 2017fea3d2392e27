# =============================================================================
# core/services/settlement_service.py - Settlement Item Logic
# =============================================================================
# Settlement items are a single list shared by every signed-in user.
# MR numbers are unique across the whole table.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import ConflictError, NotFoundError, ValidationFailedError, translate_database_error
from core.models.reserve import (
    BulkAction,
    ItemStatus,
    SettlementBulkRequest,
    SettlementItemCreate,
    SettlementItemUpdate,
)
from core.services.common import execute, first_row, rows_of
from core.services.reserve_service import dedupe_mr_numbers
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "settlement_items"

SETTLEMENT_BULK_ACTIONS = {
    BulkAction.UPDATE_STATUS.value,
    BulkAction.DELETE.value,
    BulkAction.IMPORT.value,
}


class SettlementService:
    """Service for the shared settlement list."""

    @staticmethod
    def list_items() -> list[dict[str, Any]]:
        """
        All settlement items, newest first.

        Raises:
            TableMissingError: settlement_items hasn't been created
        """
        client = SupabaseClient.get_client()
        return rows_of(execute(
            client.table(TABLE).select("*").order("created_at", desc=True),
            "fetch settlement items",
            table=TABLE,
        ))

    @staticmethod
    def create_item(request: SettlementItemCreate) -> dict[str, Any]:
        """
        Add an MR number.

        Raises:
            ValidationFailedError: Blank MR number
            ConflictError: The MR number is already listed
        """
        mr_number = (request.mr_number or "").strip()
        if not mr_number:
            raise ValidationFailedError("MR number is required")

        if SettlementService._existing_numbers([mr_number]):
            raise ConflictError("MR number already exists", details={"mr_number": mr_number})

        client = SupabaseClient.get_client()
        item = first_row(execute(
            client.table(TABLE).insert({
                "mr_number": mr_number,
                "status": ItemStatus.NONE.value,
                "notes": "",
            }),
            "create settlement item",
            resource="settlement item",
            table=TABLE,
        ), "create settlement item")

        logger.info(f"Created settlement item {item['id']} ({mr_number})")
        return item

    @staticmethod
    def update_item(item_id: str | UUID, request: SettlementItemUpdate) -> dict[str, Any]:
        """Update status and/or notes and stamp updated_at."""
        update_data = request.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if not update_data:
            raise ValidationFailedError("Nothing to update")
        update_data["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(TABLE).update(update_data).eq("id", normalize_uuid(item_id)),
            "update settlement item",
            resource="settlement item",
            table=TABLE,
        ))
        if not rows:
            raise NotFoundError("settlement item", str(item_id))

        logger.info(f"Updated settlement item: {item_id}")
        return rows[0]

    @staticmethod
    def delete_item(item_id: str | UUID) -> None:
        """Delete a settlement item."""
        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(TABLE).delete().eq("id", normalize_uuid(item_id)),
            "delete settlement item",
            resource="settlement item",
            table=TABLE,
        ))
        if not rows:
            raise NotFoundError("settlement item", str(item_id))
        logger.info(f"Deleted settlement item: {item_id}")

    @staticmethod
    def bulk(request: SettlementBulkRequest) -> dict[str, Any]:
        """
        Apply a bulk action.

        - update_status: set `status` on `ids`
        - delete: remove `ids`
        - import: insert `mr_numbers`, skipping existing ones

        Raises:
            ValidationFailedError: Unknown action or missing inputs
        """
        action = request.action
        if action not in SETTLEMENT_BULK_ACTIONS:
            raise ValidationFailedError(
                "Invalid action",
                details={"allowed": sorted(SETTLEMENT_BULK_ACTIONS)},
            )

        if action == BulkAction.IMPORT.value:
            return SettlementService._import(request.mr_numbers)

        if not request.ids:
            raise ValidationFailedError("No items selected")
        if len(request.ids) > settings.BULK_LIMIT:
            raise ValidationFailedError(f"Too many items (max {settings.BULK_LIMIT})")

        client = SupabaseClient.get_client()
        if action == BulkAction.UPDATE_STATUS.value:
            if request.status is None:
                raise ValidationFailedError("Status is required")
            query = client.table(TABLE).update({
                "status": request.status.value,
                "updated_at": utc_now_iso(),
            })
        else:
            query = client.table(TABLE).delete()

        rows = rows_of(execute(
            query.in_("id", request.ids),
            f"{action.replace('_', ' ')} settlement items",
            resource="settlement item",
            table=TABLE,
        ))

        logger.info(f"Bulk {action} on {len(rows)} settlement items")
        return {"action": action, "data": rows, "affected": len(rows)}

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _import(mr_numbers: list[str]) -> dict[str, Any]:
        cleaned = [n.strip() for n in mr_numbers if n and n.strip()]
        if not cleaned:
            raise ValidationFailedError("No MR numbers provided")
        if len(mr_numbers) > settings.BULK_LIMIT:
            raise ValidationFailedError(f"Too many MR numbers (max {settings.BULK_LIMIT})")

        fresh, duplicates = dedupe_mr_numbers(mr_numbers, SettlementService._existing_numbers(cleaned))
        if not fresh:
            return {
                "action": BulkAction.IMPORT.value,
                "data": [],
                "duplicates_count": len(duplicates),
                "message": "All MR numbers already exist",
            }

        client = SupabaseClient.get_client()
        inserted = rows_of(execute(
            client.table(TABLE).insert([
                {"mr_number": number, "status": ItemStatus.NONE.value, "notes": ""}
                for number in fresh
            ]),
            "import settlement items",
            resource="settlement item",
            table=TABLE,
        ))

        logger.info(f"Imported {len(inserted)} settlement items ({len(duplicates)} duplicates)")
        return {
            "action": BulkAction.IMPORT.value,
            "data": inserted,
            "duplicates_count": len(duplicates),
        }

    @staticmethod
    def _existing_numbers(mr_numbers: list[str]) -> set[str]:
        client = SupabaseClient.get_client()
        try:
            rows = (
                client.table(TABLE)
                .select("mr_number")
                .in_("mr_number", mr_numbers)
                .execute()
            ).data or []
        except Exception as e:
            raise translate_database_error(e, "check existing MR numbers", table=TABLE) from e
        return {row["mr_number"] for row in rows}
