# =============================================================================
# core/services/access_service.py - Sheet Sharing Logic
# =============================================================================
# Manages sheet_access grants: who besides the owner may read, edit or
# manage a sheet. Revoking a grant only deactivates it, so re-sharing with
# the same user re-activates the existing row (upsert on sheet_id,user_id).
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import NotFoundError, ValidationFailedError, translate_database_error
from core.models.access import AccessGrantRequest, AccessUpdateRequest
from core.services.common import execute, first_row, rows_of
from core.services.sheet_service import SheetService
from lib.supabase_client import SupabaseClient
from lib.utils import is_expired, normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

# Shortest query accepted by user search
MIN_SEARCH_LENGTH = 2
MAX_SEARCH_RESULTS = 10


class AccessService:
    """Service for sheet access grants."""

    @staticmethod
    def list_access(sheet_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        List active grants on a sheet with each grantee's profile.

        Returns:
            {"access": [...], "is_owner": bool}
        """
        sheet = SheetService.require_manager(sheet_id, user_id)
        client = SupabaseClient.get_client()

        grants = rows_of(execute(
            client.table("sheet_access")
            .select("*")
            .eq("sheet_id", sheet["id"])
            .eq("is_active", True)
            .order("created_at", desc=True),
            "fetch sheet access",
            table="sheet_access",
        ))

        profiles = AccessService._profiles_by_id([grant["user_id"] for grant in grants])
        for grant in grants:
            profile = profiles.get(str(grant["user_id"]), {})
            grant["user_email"] = profile.get("email")
            grant["user_name"] = profile.get("full_name")
            grant["is_expired"] = is_expired(grant.get("expires_at"))

        return {
            "access": grants,
            "is_owner": str(sheet.get("owner_id")) == str(user_id),
        }

    @staticmethod
    def grant_access(
        sheet_id: str | UUID,
        user_id: str | UUID,
        request: AccessGrantRequest,
    ) -> dict[str, Any]:
        """
        Share a sheet with a user identified by email.

        Raises:
            NotFoundError: No profile has that email
            ValidationFailedError: The target is the sheet owner
        """
        sheet = SheetService.require_manager(sheet_id, user_id)

        email = request.user_email.strip().lower()
        if not email:
            raise ValidationFailedError("User email is required")

        try:
            target = SupabaseClient.fetch_profile_by_email(email)
        except Exception as e:
            raise translate_database_error(e, "look up user", resource="user", table="profiles") from e
        if not target:
            raise NotFoundError("user", message=f"No user found with email {email}")

        if str(target["id"]) == str(sheet.get("owner_id")):
            raise ValidationFailedError("The sheet owner already has full access")

        client = SupabaseClient.get_client()
        grant = first_row(execute(
            client.table("sheet_access").upsert(
                {
                    "sheet_id": sheet["id"],
                    "user_id": target["id"],
                    "access_level": request.access_level.value,
                    "granted_by": normalize_uuid(user_id),
                    "expires_at": request.expires_at.isoformat() if request.expires_at else None,
                    "notes": request.notes,
                    "is_active": True,
                    "updated_at": utc_now_iso(),
                },
                on_conflict="sheet_id,user_id",
            ),
            "grant sheet access",
            resource="access grant",
            table="sheet_access",
        ), "grant sheet access")

        grant["user_email"] = target.get("email")
        grant["user_name"] = target.get("full_name")
        logger.info(f"Granted {request.access_level.value} on sheet {sheet['id']} to user {target['id']}")
        return grant

    @staticmethod
    def update_access(
        sheet_id: str | UUID,
        access_id: str | UUID,
        user_id: str | UUID,
        request: AccessUpdateRequest,
    ) -> dict[str, Any]:
        """Change the level, expiry or notes of a grant."""
        sheet = SheetService.require_manager(sheet_id, user_id)
        grant = AccessService._require_grant(sheet["id"], access_id)

        update_data = request.model_dump(mode="json", exclude_unset=True)
        if not update_data:
            return grant  # Nothing to update
        update_data["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        updated = first_row(execute(
            client.table("sheet_access").update(update_data).eq("id", grant["id"]),
            "update sheet access",
            resource="access grant",
            table="sheet_access",
        ), "update sheet access")
        logger.info(f"Updated access grant {grant['id']} on sheet {sheet['id']}")
        return updated

    @staticmethod
    def revoke_access(sheet_id: str | UUID, access_id: str | UUID, user_id: str | UUID) -> None:
        """Deactivate a grant."""
        sheet = SheetService.require_manager(sheet_id, user_id)
        grant = AccessService._require_grant(sheet["id"], access_id)

        client = SupabaseClient.get_client()
        execute(
            client.table("sheet_access")
            .update({"is_active": False, "updated_at": utc_now_iso()})
            .eq("id", grant["id"]),
            "revoke sheet access",
            resource="access grant",
            table="sheet_access",
        )
        logger.info(f"Revoked access grant {grant['id']} on sheet {sheet['id']}")

    @staticmethod
    def search_users(sheet_id: str | UUID, user_id: str | UUID, query: str) -> list[dict[str, Any]]:
        """
        Find profiles to share a sheet with.

        Excludes the owner and users who already hold an active grant.
        Queries shorter than two characters return nothing.
        """
        sheet = SheetService.require_manager(sheet_id, user_id)

        term = (query or "").strip().lower()
        if len(term) < MIN_SEARCH_LENGTH:
            return []

        client = SupabaseClient.get_client()
        grants = rows_of(execute(
            client.table("sheet_access")
            .select("user_id")
            .eq("sheet_id", sheet["id"])
            .eq("is_active", True),
            "fetch sheet access",
            table="sheet_access",
        ))
        excluded = {str(grant["user_id"]) for grant in grants}
        excluded.add(str(sheet.get("owner_id")))

        candidates = rows_of(execute(
            client.table("profiles")
            .select("id, email, full_name")
            .ilike("email", f"%{term}%")
            .limit(MAX_SEARCH_RESULTS + len(excluded)),
            "search users",
            table="profiles",
        ))
        return [p for p in candidates if str(p["id"]) not in excluded][:MAX_SEARCH_RESULTS]

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_grant(sheet_id: str, access_id: str | UUID) -> dict[str, Any]:
        try:
            grant = SupabaseClient.fetch_one(
                "sheet_access", {"id": normalize_uuid(access_id), "sheet_id": sheet_id}
            )
        except Exception as e:
            raise translate_database_error(e, "fetch access grant", resource="access grant", table="sheet_access") from e
        if not grant:
            raise NotFoundError("access grant", str(access_id))
        return grant

    @staticmethod
    def _profiles_by_id(user_ids: list[str]) -> dict[str, dict[str, Any]]:
        if not user_ids:
            return {}
        client = SupabaseClient.get_client()
        profiles = rows_of(execute(
            client.table("profiles")
            .select("id, email, full_name")
            .in_("id", [str(uid) for uid in set(user_ids)]),
            "fetch profiles",
            table="profiles",
        ))
        return {str(profile["id"]): profile for profile in profiles}
