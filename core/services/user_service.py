# =============================================================================
# core/services/user_service.py - Profiles & User Administration
# =============================================================================
# Reads and updates rows in `profiles`, and the read-only admin views over
# all users and account activation. Admin role changes are made in the
# database, not here.
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import NotFoundError, ValidationFailedError, translate_database_error
from core.models.profile import ProfileUpdate, UserProfile, UserStats
from core.services.common import execute, rows_of
from lib.supabase_client import SupabaseClient, is_missing_table_error
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

RECENT_SIGNUP_DAYS = 7


class UserService:
    """Service for user profiles and admin user listings."""

    @staticmethod
    def get_profile(user_id: str | UUID, email: str | None = None) -> UserProfile:
        """
        The caller's profile with their admin flag.

        Falls back to the token's id/email when no profile row exists.
        """
        try:
            row = SupabaseClient.fetch_profile(user_id)
            is_admin = SupabaseClient.is_admin(user_id, email)
        except Exception as e:
            raise translate_database_error(e, "fetch profile", resource="profile", table="profiles") from e

        if not row:
            return UserProfile(id=normalize_uuid(user_id), email=email, is_admin=is_admin)
        return UserProfile.from_db_row(row, is_admin=is_admin)

    @staticmethod
    def update_profile(user_id: str | UUID, request: ProfileUpdate, email: str | None = None) -> UserProfile:
        """Update full_name/avatar_url on the caller's own profile."""
        update_data = request.model_dump(exclude_unset=True)
        if not update_data:
            return UserService.get_profile(user_id, email)
        update_data["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table("profiles").update(update_data).eq("id", normalize_uuid(user_id)),
            "update profile",
            resource="profile",
            table="profiles",
        ))
        if not rows:
            raise NotFoundError("profile", str(user_id))

        logger.info(f"Updated profile: {user_id}")
        return UserProfile.from_db_row(rows[0], is_admin=SupabaseClient.is_admin(user_id, email))

    @staticmethod
    def list_users() -> list[UserProfile]:
        """All profiles newest first, each flagged with is_admin."""
        client = SupabaseClient.get_client()
        profiles = rows_of(execute(
            client.table("profiles").select("*").order("created_at", desc=True),
            "fetch users",
            table="profiles",
        ))
        admin_ids = UserService._admin_user_ids()
        admin_emails = set(settings.admin_emails_list)

        return [
            UserProfile.from_db_row(
                row,
                is_admin=str(row["id"]) in admin_ids or (row.get("email") or "").lower() in admin_emails,
            )
            for row in profiles
        ]

    @staticmethod
    def set_active(user_id: str | UUID, is_active: bool, admin_id: str | UUID) -> UserProfile:
        """
        Activate or deactivate an account.

        Raises:
            ValidationFailedError: An admin deactivating their own account
            NotFoundError: No profile with that id
        """
        target_id = normalize_uuid(user_id)
        if target_id == normalize_uuid(admin_id) and not is_active:
            raise ValidationFailedError("Cannot deactivate yourself")

        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table("profiles")
            .update({"is_active": is_active, "updated_at": utc_now_iso()})
            .eq("id", target_id),
            "update user status",
            resource="profile",
            table="profiles",
        ))
        if not rows:
            raise NotFoundError("profile", target_id)

        logger.info(f"User {target_id} set is_active={is_active} by admin {admin_id}")
        return UserProfile.from_db_row(rows[0], is_admin=SupabaseClient.is_admin(target_id, rows[0].get("email")))

    @staticmethod
    def get_user_stats() -> UserStats:
        """
        Counts for the admin dashboard.

        pending_invitations is 0 when the invitations table doesn't exist.
        """
        client = SupabaseClient.get_client()
        week_ago = (datetime.now(timezone.utc) - timedelta(days=RECENT_SIGNUP_DAYS)).isoformat()

        total = execute(
            client.table("profiles").select("id", count="exact").limit(1),
            "count users",
            table="profiles",
        )
        active = execute(
            client.table("profiles").select("id", count="exact").eq("is_active", True).limit(1),
            "count active users",
            table="profiles",
        )
        admins = execute(
            client.table("admin_users").select("id", count="exact").limit(1),
            "count admin users",
            table="admin_users",
        )
        recent = execute(
            client.table("profiles").select("id", count="exact").gte("created_at", week_ago).limit(1),
            "count recent signups",
            table="profiles",
        )

        try:
            invitations = (
                client.table("user_invitations")
                .select("id", count="exact")
                .eq("status", "pending")
                .limit(1)
                .execute()
            )
            pending = invitations.count or 0
        except Exception as e:
            if not is_missing_table_error(e):
                raise translate_database_error(e, "count invitations", table="user_invitations") from e
            pending = 0

        return UserStats(
            total_users=total.count or 0,
            active_users=active.count or 0,
            admin_users=admins.count or 0,
            recent_signups=recent.count or 0,
            pending_invitations=pending,
        )

    @staticmethod
    def _admin_user_ids() -> set[str]:
        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table("admin_users").select("user_id"),
            "fetch admin users",
            table="admin_users",
        ))
        return {str(row["user_id"]) for row in rows}
