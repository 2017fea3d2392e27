# =============================================================================
# tests/test_folder_service.py - Site Folder Tests
# =============================================================================
# This module contains tests for:
# - Folder visibility (owned, shared via can_view, admin)
# - Folder permissions (emails, duplicates)
# - File listing access
# =============================================================================

import pytest

from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from core.models.folder import FolderCreate, FolderPermissionCreate
from core.services.folder_service import UNKNOWN_USER, FolderService
from tests.conftest import FOLDER_ID, OTHER_USER_ID, USER_ID


@pytest.fixture
def folder_row():
    return {
        "id": FOLDER_ID,
        "name": "Cairo North",
        "site_type": "relocation",
        "created_by": USER_ID,
        "created_at": "2024-04-01T00:00:00+00:00",
    }


class TestListFolders:
    """Test which folders a user sees."""

    def test_owned_and_shared_without_duplicates(self, fake_supabase, folder_row):
        shared = {**folder_row, "id": "folder-2", "created_by": OTHER_USER_ID, "created_at": "2024-05-01T00:00:00+00:00"}
        fake_supabase.queue("site_folders", [folder_row], [shared, folder_row])
        fake_supabase.queue("folder_permissions", [{"folder_id": "folder-2"}, {"folder_id": FOLDER_ID}])

        folders = FolderService.list_folders("relocation", USER_ID)

        assert [f["id"] for f in folders] == ["folder-2", FOLDER_ID]
        shared_query = fake_supabase.queries("site_folders")[1]
        assert shared_query.args_of("in_") == [("id", ["folder-2", FOLDER_ID])]

    def test_no_permissions_skips_shared_query(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [folder_row])
        fake_supabase.queue("folder_permissions", [])

        FolderService.list_folders("relocation", USER_ID)

        assert len(fake_supabase.queries("site_folders")) == 1

    def test_admin_sees_everything(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [folder_row, {**folder_row, "id": "f3", "created_by": OTHER_USER_ID}])

        folders = FolderService.list_folders("relocation", USER_ID, is_admin=True)

        assert len(folders) == 2
        assert fake_supabase.queries("folder_permissions") == []
        assert fake_supabase.queries("site_folders")[0].filters() == {"site_type": "relocation"}


class TestFolderCrud:
    """Test creating and deleting folders."""

    def test_blank_name(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            FolderService.create_folder("relocation", USER_ID, FolderCreate(name=" "))

    def test_create(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [folder_row])

        FolderService.create_folder("relocation", USER_ID, FolderCreate(name=" Cairo North "))

        insert = fake_supabase.queries("site_folders", "insert")[0].payload
        assert insert["name"] == "Cairo North"
        assert insert["site_type"] == "relocation"
        assert insert["created_by"] == USER_ID

    def test_delete_by_non_creator(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [{**folder_row, "created_by": OTHER_USER_ID}])

        with pytest.raises(ForbiddenError):
            FolderService.delete_folder(FOLDER_ID, USER_ID)

    def test_delete_clears_dependants_first(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [folder_row])

        FolderService.delete_folder(FOLDER_ID, USER_ID)

        tables = [q.table for q in fake_supabase.executed if q.operation == "delete"]
        assert tables == ["folder_permissions", "folder_files", "site_folders"]


class TestPermissions:
    """Test folder permissions."""

    def test_list_with_unknown_users(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [folder_row])
        fake_supabase.queue("folder_permissions", [
            {"id": "p1", "user_id": OTHER_USER_ID},
            {"id": "p2", "user_id": "ghost"},
        ])
        fake_supabase.queue("profiles", [{"id": OTHER_USER_ID, "email": "tech@example.com"}])

        permissions = FolderService.list_permissions(FOLDER_ID, USER_ID)

        assert [p["user_email"] for p in permissions] == ["tech@example.com", UNKNOWN_USER]

    def test_add(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [folder_row])
        fake_supabase.queue("profiles", [{"id": OTHER_USER_ID, "email": "tech@example.com"}])
        fake_supabase.queue("folder_permissions", [], [{"id": "p1", "user_id": OTHER_USER_ID}])

        permission = FolderService.add_permission(
            FOLDER_ID, USER_ID, FolderPermissionCreate(user_email="Tech@Example.com", can_edit=True)
        )

        assert permission["user_email"] == "tech@example.com"
        insert = fake_supabase.queries("folder_permissions", "insert")[0].payload
        assert insert == {
            "folder_id": FOLDER_ID,
            "user_id": OTHER_USER_ID,
            "can_view": True,
            "can_edit": True,
            "can_delete": False,
        }

    def test_add_existing_conflicts(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [folder_row])
        fake_supabase.queue("profiles", [{"id": OTHER_USER_ID, "email": "tech@example.com"}])
        fake_supabase.queue("folder_permissions", [{"id": "p1"}])

        with pytest.raises(ConflictError):
            FolderService.add_permission(FOLDER_ID, USER_ID, FolderPermissionCreate(user_email="tech@example.com"))

    def test_add_unknown_email(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [folder_row])
        fake_supabase.queue("profiles", [])

        with pytest.raises(NotFoundError):
            FolderService.add_permission(FOLDER_ID, USER_ID, FolderPermissionCreate(user_email="x@example.com"))

    def test_admin_manages_any_folder(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [{**folder_row, "created_by": OTHER_USER_ID}])
        fake_supabase.queue("folder_permissions", [{"id": "p1"}])

        FolderService.remove_permission(FOLDER_ID, "p1", USER_ID, is_admin=True)

        delete = fake_supabase.queries("folder_permissions", "delete")[0]
        assert delete.filters() == {"id": "p1", "folder_id": FOLDER_ID}


class TestFiles:
    """Test file listing access."""

    def test_viewer_with_permission(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [{**folder_row, "created_by": OTHER_USER_ID}])
        fake_supabase.queue("folder_permissions", [{"id": "p1"}])
        fake_supabase.queue("folder_files", [{"id": "file-1"}])

        assert FolderService.list_files(FOLDER_ID, USER_ID) == [{"id": "file-1"}]

    def test_no_permission_is_not_found(self, fake_supabase, folder_row):
        fake_supabase.queue("site_folders", [{**folder_row, "created_by": OTHER_USER_ID}])
        fake_supabase.queue("folder_permissions", [])

        with pytest.raises(NotFoundError):
            FolderService.list_files(FOLDER_ID, USER_ID)
        assert fake_supabase.queries("folder_files") == []
