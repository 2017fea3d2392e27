# =============================================================================
# core/services/folder_service.py - Site Folder Logic
# =============================================================================
# Folder metadata for the site document pages.
#
# Visibility:
#   - creators see and manage their folders
#   - admins see and manage every folder
#   - other users see a folder when folder_permissions grants can_view
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
    translate_database_error,
)
from core.models.folder import FolderCreate, FolderPermissionCreate
from core.services.common import execute, first_row, rows_of
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)

FOLDERS_TABLE = "site_folders"
PERMISSIONS_TABLE = "folder_permissions"
FILES_TABLE = "folder_files"

UNKNOWN_USER = "Unknown User"


class FolderService:
    """Service for site folders, their permissions and file rows."""

    @staticmethod
    def list_folders(site_type: str, user_id: str | UUID, is_admin: bool = False) -> list[dict[str, Any]]:
        """
        Folders of a site type visible to the caller, newest first.

        Owned folders, folders shared with can_view and, for admins, every
        folder; each folder appears once.
        """
        client = SupabaseClient.get_client()
        user_id_str = normalize_uuid(user_id)

        if is_admin:
            folders = rows_of(execute(
                client.table(FOLDERS_TABLE).select("*").eq("site_type", site_type),
                "fetch folders",
                table=FOLDERS_TABLE,
            ))
        else:
            folders = rows_of(execute(
                client.table(FOLDERS_TABLE)
                .select("*")
                .eq("site_type", site_type)
                .eq("created_by", user_id_str),
                "fetch folders",
                table=FOLDERS_TABLE,
            ))

            permissions = rows_of(execute(
                client.table(PERMISSIONS_TABLE)
                .select("folder_id")
                .eq("user_id", user_id_str)
                .eq("can_view", True),
                "fetch folder permissions",
                table=PERMISSIONS_TABLE,
            ))
            shared_ids = [str(p["folder_id"]) for p in permissions]
            if shared_ids:
                folders += rows_of(execute(
                    client.table(FOLDERS_TABLE)
                    .select("*")
                    .eq("site_type", site_type)
                    .in_("id", shared_ids),
                    "fetch shared folders",
                    table=FOLDERS_TABLE,
                ))

        unique: dict[str, dict[str, Any]] = {}
        for folder in folders:
            unique.setdefault(str(folder["id"]), folder)
        return sorted(unique.values(), key=lambda f: f.get("created_at") or "", reverse=True)

    @staticmethod
    def create_folder(site_type: str, user_id: str | UUID, request: FolderCreate) -> dict[str, Any]:
        """Create a folder under a site type."""
        name = (request.name or "").strip()
        if not name:
            raise ValidationFailedError("Folder name is required")

        client = SupabaseClient.get_client()
        folder = first_row(execute(
            client.table(FOLDERS_TABLE).insert({
                "name": name,
                "description": request.description,
                "site_type": site_type,
                "created_by": normalize_uuid(user_id),
            }),
            "create folder",
            resource="folder",
            table=FOLDERS_TABLE,
        ), "create folder")

        logger.info(f"Created folder {folder['id']} ({site_type})")
        return folder

    @staticmethod
    def delete_folder(folder_id: str | UUID, user_id: str | UUID, is_admin: bool = False) -> None:
        """Delete a folder after its permission and file rows."""
        folder = FolderService.require_manager(folder_id, user_id, is_admin)
        client = SupabaseClient.get_client()

        execute(
            client.table(PERMISSIONS_TABLE).delete().eq("folder_id", folder["id"]),
            "delete folder permissions",
            table=PERMISSIONS_TABLE,
        )
        execute(
            client.table(FILES_TABLE).delete().eq("folder_id", folder["id"]),
            "delete folder files",
            table=FILES_TABLE,
        )
        execute(
            client.table(FOLDERS_TABLE).delete().eq("id", folder["id"]),
            "delete folder",
            resource="folder",
            table=FOLDERS_TABLE,
        )
        logger.info(f"Deleted folder: {folder['id']}")

    # -------------------------------------------------------------------------
    # Permissions
    # -------------------------------------------------------------------------

    @staticmethod
    def list_permissions(folder_id: str | UUID, user_id: str | UUID, is_admin: bool = False) -> list[dict[str, Any]]:
        """Permission rows with each grantee's email."""
        folder = FolderService.require_manager(folder_id, user_id, is_admin)
        client = SupabaseClient.get_client()

        permissions = rows_of(execute(
            client.table(PERMISSIONS_TABLE).select("*").eq("folder_id", folder["id"]),
            "fetch folder permissions",
            table=PERMISSIONS_TABLE,
        ))
        user_ids = list({str(p["user_id"]) for p in permissions})
        emails: dict[str, str] = {}
        if user_ids:
            profiles = rows_of(execute(
                client.table("profiles").select("id, email").in_("id", user_ids),
                "fetch profiles",
                table="profiles",
            ))
            emails = {str(p["id"]): p.get("email") for p in profiles}

        for permission in permissions:
            permission["user_email"] = emails.get(str(permission["user_id"])) or UNKNOWN_USER
        return permissions

    @staticmethod
    def add_permission(
        folder_id: str | UUID,
        user_id: str | UUID,
        request: FolderPermissionCreate,
        is_admin: bool = False,
    ) -> dict[str, Any]:
        """
        Grant a user access to a folder.

        Raises:
            NotFoundError: No profile has that email
            ConflictError: The user already has a permission row
        """
        folder = FolderService.require_manager(folder_id, user_id, is_admin)

        email = (request.user_email or "").strip().lower()
        if not email:
            raise ValidationFailedError("User email is required")

        try:
            target = SupabaseClient.fetch_profile_by_email(email)
        except Exception as e:
            raise translate_database_error(e, "look up user", resource="user", table="profiles") from e
        if not target:
            raise NotFoundError("user", message=f"No user found with email {email}")

        try:
            existing = SupabaseClient.fetch_one(
                PERMISSIONS_TABLE, {"folder_id": folder["id"], "user_id": target["id"]}, columns="id"
            )
        except Exception as e:
            raise translate_database_error(e, "check folder permission", table=PERMISSIONS_TABLE) from e
        if existing:
            raise ConflictError("User already has permissions for this folder")

        client = SupabaseClient.get_client()
        permission = first_row(execute(
            client.table(PERMISSIONS_TABLE).insert({
                "folder_id": folder["id"],
                "user_id": target["id"],
                "can_view": request.can_view,
                "can_edit": request.can_edit,
                "can_delete": request.can_delete,
            }),
            "add folder permission",
            resource="permission",
            table=PERMISSIONS_TABLE,
        ), "add folder permission")

        permission["user_email"] = target.get("email")
        logger.info(f"Granted folder {folder['id']} permissions to user {target['id']}")
        return permission

    @staticmethod
    def remove_permission(
        folder_id: str | UUID,
        permission_id: str | UUID,
        user_id: str | UUID,
        is_admin: bool = False,
    ) -> None:
        """Delete a permission row."""
        folder = FolderService.require_manager(folder_id, user_id, is_admin)
        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table(PERMISSIONS_TABLE)
            .delete()
            .eq("id", normalize_uuid(permission_id))
            .eq("folder_id", folder["id"]),
            "remove folder permission",
            resource="permission",
            table=PERMISSIONS_TABLE,
        ))
        if not rows:
            raise NotFoundError("permission", str(permission_id))
        logger.info(f"Removed permission {permission_id} from folder {folder['id']}")

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    @staticmethod
    def list_files(folder_id: str | UUID, user_id: str | UUID, is_admin: bool = False) -> list[dict[str, Any]]:
        """File metadata rows of a folder the caller can view, newest first."""
        folder = FolderService.require_viewer(folder_id, user_id, is_admin)
        client = SupabaseClient.get_client()
        return rows_of(execute(
            client.table(FILES_TABLE)
            .select("*")
            .eq("folder_id", folder["id"])
            .order("created_at", desc=True),
            "fetch folder files",
            table=FILES_TABLE,
        ))

    # -------------------------------------------------------------------------
    # Access Checks
    # -------------------------------------------------------------------------

    @staticmethod
    def require_manager(folder_id: str | UUID, user_id: str | UUID, is_admin: bool = False) -> dict[str, Any]:
        """Load a folder the caller created (or any folder for admins)."""
        folder = FolderService._get_folder(folder_id)
        if not is_admin and str(folder.get("created_by")) != str(user_id):
            raise ForbiddenError("Only the folder creator or an admin can do this")
        return folder

    @staticmethod
    def require_viewer(folder_id: str | UUID, user_id: str | UUID, is_admin: bool = False) -> dict[str, Any]:
        """Load a folder the caller created, can view, or administers."""
        folder = FolderService._get_folder(folder_id)
        if is_admin or str(folder.get("created_by")) == str(user_id):
            return folder

        try:
            permission = SupabaseClient.fetch_one(
                PERMISSIONS_TABLE,
                {"folder_id": folder["id"], "user_id": normalize_uuid(user_id), "can_view": True},
                columns="id",
            )
        except Exception as e:
            raise translate_database_error(e, "check folder permission", table=PERMISSIONS_TABLE) from e

        if not permission:
            raise NotFoundError("folder", str(folder_id))
        return folder

    @staticmethod
    def _get_folder(folder_id: str | UUID) -> dict[str, Any]:
        try:
            folder = SupabaseClient.fetch_one(FOLDERS_TABLE, {"id": normalize_uuid(folder_id)})
        except Exception as e:
            raise translate_database_error(e, "fetch folder", resource="folder", table=FOLDERS_TABLE) from e
        if not folder:
            raise NotFoundError("folder", str(folder_id))
        return folder
