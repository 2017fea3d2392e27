# =============================================================================
# core/services/reserve_service.py - Reserve Item Logic
# =============================================================================
# Reserve items track MR numbers a user has set aside. Every query is
# scoped to the caller's user_id; another user's item is "not found".
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import ConflictError, NotFoundError, ValidationFailedError, translate_database_error
from core.models.reserve import (
    BulkAction,
    ItemStatus,
    Priority,
    ReserveBulkRequest,
    ReserveItemCreate,
    ReserveItemUpdate,
)
from core.services.common import execute, first_row, rows_of
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "reserve_items"

RESERVE_BULK_ACTIONS = {
    BulkAction.UPDATE_STATUS.value,
    BulkAction.UPDATE_PRIORITY.value,
    BulkAction.UPDATE_CATEGORY.value,
    BulkAction.DELETE.value,
}


def dedupe_mr_numbers(mr_numbers: list[str], existing: set[str]) -> tuple[list[str], list[str]]:
    """
    Split MR numbers into new ones and duplicates.

    Numbers are trimmed and blanks dropped. The first occurrence of a
    number within the list wins; later ones and numbers already in
    `existing` are duplicates.

    Returns:
        (new_numbers, duplicates) both in input order
    """
    seen: set[str] = set()
    fresh: list[str] = []
    duplicates: list[str] = []
    for raw in mr_numbers:
        number = (raw or "").strip()
        if not number:
            continue
        if number in existing or number in seen:
            duplicates.append(number)
            continue
        seen.add(number)
        fresh.append(number)
    return fresh, duplicates


class ReserveService:
    """Service for a user's reserve items."""

    @staticmethod
    def list_items(
        user_id: str | UUID,
        status: ItemStatus | None = None,
        priority: Priority | None = None,
        category: str | None = None,
    ) -> list[dict[str, Any]]:
        """List the caller's items newest first, optionally filtered."""
        client = SupabaseClient.get_client()
        query = client.table(TABLE).select("*").eq("user_id", normalize_uuid(user_id))
        if status:
            query = query.eq("status", status.value)
        if priority:
            query = query.eq("priority", priority.value)
        if category:
            query = query.eq("category", category)

        return rows_of(execute(
            query.order("created_at", desc=True),
            "fetch reserve items",
            table=TABLE,
        ))

    @staticmethod
    def create_item(user_id: str | UUID, request: ReserveItemCreate) -> dict[str, Any]:
        """
        Add an MR number to the caller's reserve list.

        Raises:
            ValidationFailedError: Blank MR number
            ConflictError: The caller already has this MR number
        """
        mr_number = (request.mr_number or "").strip()
        if not mr_number:
            raise ValidationFailedError("MR number is required")

        user_id_str = normalize_uuid(user_id)
        if mr_number in ReserveService._existing_numbers(user_id_str, [mr_number]):
            raise ConflictError("MR number already exists", details={"mr_number": mr_number})

        client = SupabaseClient.get_client()
        item = first_row(execute(
            client.table(TABLE).insert({
                "user_id": user_id_str,
                "mr_number": mr_number,
                "status": ItemStatus.NONE.value,
                "notes": "",
                "priority": request.priority.value,
                "category": request.category.strip(),
                "due_date": request.due_date.isoformat() if request.due_date else None,
            }),
            "create reserve item",
            resource="reserve item",
            table=TABLE,
        ), "create reserve item")

        logger.info(f"Created reserve item {item['id']} ({mr_number}) for user: {user_id_str}")
        return item

    @staticmethod
    def update_item(item_id: str | UUID, user_id: str | UUID, request: ReserveItemUpdate) -> dict[str, Any]:
        """Update the provided fields and stamp updated_at."""
        update_data = request.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        update_data["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(TABLE)
            .update(update_data)
            .eq("id", normalize_uuid(item_id))
            .eq("user_id", normalize_uuid(user_id)),
            "update reserve item",
            resource="reserve item",
            table=TABLE,
        ))
        if not rows:
            raise NotFoundError("reserve item", str(item_id))

        logger.info(f"Updated reserve item: {item_id}")
        return rows[0]

    @staticmethod
    def delete_item(item_id: str | UUID, user_id: str | UUID) -> None:
        """Delete one of the caller's items."""
        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(TABLE)
            .delete()
            .eq("id", normalize_uuid(item_id))
            .eq("user_id", normalize_uuid(user_id)),
            "delete reserve item",
            resource="reserve item",
            table=TABLE,
        ))
        if not rows:
            raise NotFoundError("reserve item", str(item_id))
        logger.info(f"Deleted reserve item: {item_id}")

    @staticmethod
    def import_numbers(user_id: str | UUID, mr_numbers: list[str]) -> dict[str, Any]:
        """
        Import many MR numbers, skipping ones the caller already has.

        Returns:
            {data: inserted items, duplicates_count, duplicates}
        """
        if not [n for n in mr_numbers if n and n.strip()]:
            raise ValidationFailedError("No MR numbers provided")
        if len(mr_numbers) > settings.BULK_LIMIT:
            raise ValidationFailedError(f"Too many MR numbers (max {settings.BULK_LIMIT})")

        user_id_str = normalize_uuid(user_id)
        existing = ReserveService._existing_numbers(
            user_id_str, [n.strip() for n in mr_numbers if n and n.strip()]
        )
        fresh, duplicates = dedupe_mr_numbers(mr_numbers, existing)

        inserted: list[dict[str, Any]] = []
        if fresh:
            client = SupabaseClient.get_client()
            inserted = rows_of(execute(
                client.table(TABLE).insert([
                    {
                        "user_id": user_id_str,
                        "mr_number": number,
                        "status": ItemStatus.NONE.value,
                        "notes": "",
                        "priority": Priority.MEDIUM.value,
                        "category": "",
                    }
                    for number in fresh
                ]),
                "import reserve items",
                resource="reserve item",
                table=TABLE,
            ))

        logger.info(f"Imported {len(inserted)} reserve items for user {user_id_str} ({len(duplicates)} duplicates)")
        return {
            "data": inserted,
            "duplicates_count": len(duplicates),
            "duplicates": duplicates,
        }

    @staticmethod
    def bulk(user_id: str | UUID, request: ReserveBulkRequest) -> dict[str, Any]:
        """
        Apply one action to many of the caller's items.

        Returns:
            {"action", "affected": count}
        """
        action = request.action
        if action not in RESERVE_BULK_ACTIONS:
            raise ValidationFailedError(
                "Invalid action",
                details={"allowed": sorted(RESERVE_BULK_ACTIONS)},
            )
        if not request.ids:
            raise ValidationFailedError("No items selected")
        if len(request.ids) > settings.BULK_LIMIT:
            raise ValidationFailedError(f"Too many items (max {settings.BULK_LIMIT})")

        client = SupabaseClient.get_client()
        base = client.table(TABLE)

        if action == BulkAction.DELETE.value:
            query = base.delete()
        else:
            if action == BulkAction.UPDATE_STATUS.value:
                update_data = {"status": ReserveService._enum_value(ItemStatus, request.value, "status")}
            elif action == BulkAction.UPDATE_PRIORITY.value:
                update_data = {"priority": ReserveService._enum_value(Priority, request.value, "priority")}
            else:
                update_data = {"category": (request.value or "").strip()}
            update_data["updated_at"] = utc_now_iso()
            query = base.update(update_data)

        rows = rows_of(execute(
            query.in_("id", request.ids).eq("user_id", normalize_uuid(user_id)),
            f"{action.replace('_', ' ')} reserve items",
            resource="reserve item",
            table=TABLE,
        ))

        logger.info(f"Bulk {action} on {len(rows)} reserve items for user: {user_id}")
        return {"action": action, "affected": len(rows)}

    @staticmethod
    def list_categories(user_id: str | UUID) -> list[str]:
        """Distinct non-empty categories used by the caller, sorted."""
        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(TABLE).select("category").eq("user_id", normalize_uuid(user_id)),
            "fetch reserve categories",
            table=TABLE,
        ))
        return sorted({(row.get("category") or "").strip() for row in rows} - {""})

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _existing_numbers(user_id: str, mr_numbers: list[str]) -> set[str]:
        if not mr_numbers:
            return set()
        client = SupabaseClient.get_client()
        try:
            rows = (
                client.table(TABLE)
                .select("mr_number")
                .eq("user_id", user_id)
                .in_("mr_number", mr_numbers)
                .execute()
            ).data or []
        except Exception as e:
            raise translate_database_error(e, "check existing MR numbers", table=TABLE) from e
        return {row["mr_number"] for row in rows}

    @staticmethod
    def _enum_value(enum_cls, value: str | None, field: str) -> str:
        try:
            return enum_cls(value).value
        except ValueError:
            raise ValidationFailedError(
                f"Invalid {field}",
                details={"allowed": [member.value for member in enum_cls]},
            )
