# =============================================================================
# core/services/public_link_service.py - Public Sheet Links
# =============================================================================
# A public link is an unguessable access key that lets anyone read one
# sheet without signing in. Each sheet has at most one link; regenerating
# rotates the key on the existing row.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import NotFoundError, translate_database_error
from core.services.common import execute, first_row
from core.services.sheet_service import SheetService
from lib.supabase_client import SupabaseClient
from lib.utils import generate_access_key, is_expired, normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

LINK_NOT_FOUND = "Public link not found or expired"


class PublicLinkService:
    """Service for creating, toggling and resolving public sheet links."""

    @staticmethod
    def build_link(access_key: str) -> str:
        """Relative URL a public link is served under."""
        return f"{settings.PUBLIC_LINK_BASE_PATH.rstrip('/')}/{access_key}"

    @staticmethod
    def create_link(sheet_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Create or rotate a sheet's public link (owner only).

        Returns:
            {sheet_id, access_key, public_link}
        """
        sheet = SheetService.require_owner(sheet_id, user_id)
        access_key = generate_access_key()
        client = SupabaseClient.get_client()

        existing = PublicLinkService._fetch_for_sheet(sheet["id"])
        if existing:
            query = (
                client.table("public_links")
                .update({"access_key": access_key, "is_active": True, "updated_at": utc_now_iso()})
                .eq("id", existing["id"])
            )
        else:
            query = client.table("public_links").insert({
                "sheet_id": sheet["id"],
                "access_key": access_key,
                "created_by": normalize_uuid(user_id),
                "is_active": True,
            })

        execute(query, "create public link", resource="public link", table="public_links")
        logger.info(f"Created public link for sheet: {sheet['id']}")
        return {
            "sheet_id": sheet["id"],
            "access_key": access_key,
            "public_link": PublicLinkService.build_link(access_key),
        }

    @staticmethod
    def set_active(sheet_id: str | UUID, user_id: str | UUID, is_active: bool) -> dict[str, Any]:
        """Enable or disable a sheet's public link (owner only)."""
        sheet = SheetService.require_owner(sheet_id, user_id)
        existing = PublicLinkService._fetch_for_sheet(sheet["id"])
        if not existing:
            raise NotFoundError("public link", message="This sheet has no public link")

        client = SupabaseClient.get_client()
        link = first_row(execute(
            client.table("public_links")
            .update({"is_active": is_active, "updated_at": utc_now_iso()})
            .eq("id", existing["id"]),
            "update public link",
            resource="public link",
            table="public_links",
        ), "update public link")

        logger.info(f"Public link for sheet {sheet['id']} {'enabled' if is_active else 'disabled'}")
        return link

    @staticmethod
    def get_public_sheet(access_key: str) -> dict[str, Any]:
        """
        Resolve an access key to a read-only view of its sheet.

        Returns:
            {sheet: {id, name, description}, columns, rows}

        Raises:
            NotFoundError: Unknown, inactive or expired key, or the sheet
                has been deleted
        """
        try:
            link = SupabaseClient.fetch_one(
                "public_links", {"access_key": access_key, "is_active": True}
            )
        except Exception as e:
            raise translate_database_error(e, "fetch public link", resource="public link", table="public_links") from e

        if not link or is_expired(link.get("expires_at")):
            raise NotFoundError("public link", message=LINK_NOT_FOUND)

        sheet = SheetService.get_sheet_row(link["sheet_id"])
        if not sheet:
            raise NotFoundError("public link", message=LINK_NOT_FOUND)

        columns, rows = SheetService.load_grid(sheet["id"])
        return {
            "sheet": {
                "id": sheet["id"],
                "name": sheet.get("name"),
                "description": sheet.get("description"),
            },
            "columns": columns,
            "rows": rows,
        }

    @staticmethod
    def _fetch_for_sheet(sheet_id: str) -> dict[str, Any] | None:
        try:
            return SupabaseClient.fetch_one("public_links", {"sheet_id": sheet_id})
        except Exception as e:
            raise translate_database_error(e, "fetch public link", resource="public link", table="public_links") from e
