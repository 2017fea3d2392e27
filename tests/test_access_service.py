# =============================================================================
# tests/test_access_service.py - Sheet Sharing Tests
# =============================================================================
# This module contains tests for:
# - Granting, updating and revoking sheet_access grants
# - Who may manage grants (owner and admin grantees only)
# - User search for the share dialog
# - Public links: creation, rotation, toggling and anonymous reads
# =============================================================================

from datetime import datetime, timedelta, timezone

import pytest

from app.exceptions import ForbiddenError, NotFoundError, ValidationFailedError
from core.models.access import AccessGrantRequest, AccessLevel, AccessUpdateRequest
from core.services.access_service import AccessService
from core.services.public_link_service import LINK_NOT_FOUND, PublicLinkService
from tests.conftest import COLUMN_ID, OTHER_USER_ID, ROW_ID, SHEET_ID, USER_ID

GRANTEE = {"id": OTHER_USER_ID, "email": "field.eng@example.com", "full_name": "Field Engineer"}


def shared_sheet(sheet_row):
    return {**sheet_row, "owner_id": OTHER_USER_ID}


# =============================================================================
# Grants
# =============================================================================

class TestGrantAccess:
    """Test sharing a sheet by email."""

    def test_grant_upserts_on_sheet_and_user(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("profiles", [GRANTEE])
        fake_supabase.queue("sheet_access", [{"id": "grant-1", "user_id": OTHER_USER_ID, "access_level": "editor"}])

        grant = AccessService.grant_access(SHEET_ID, USER_ID, AccessGrantRequest(
            user_email="  Field.Eng@Example.com ", access_level=AccessLevel.EDITOR,
        ))

        assert grant["user_email"] == "field.eng@example.com"
        assert grant["user_name"] == "Field Engineer"

        lookup = fake_supabase.queries("profiles")[0]
        assert lookup.filters() == {"email": "field.eng@example.com"}

        upsert = fake_supabase.queries("sheet_access", "upsert")[0]
        assert upsert.kwargs_of("upsert") == [{"on_conflict": "sheet_id,user_id"}]
        assert upsert.payload["access_level"] == "editor"
        assert upsert.payload["granted_by"] == USER_ID
        assert upsert.payload["is_active"] is True
        assert upsert.payload["expires_at"] is None

    def test_unknown_email(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("profiles", [])

        with pytest.raises(NotFoundError) as exc_info:
            AccessService.grant_access(SHEET_ID, USER_ID, AccessGrantRequest(
                user_email="nobody@example.com", access_level=AccessLevel.VIEWER,
            ))
        assert "nobody@example.com" in exc_info.value.message

    def test_cannot_grant_to_owner(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("profiles", [{"id": USER_ID, "email": "owner@example.com"}])

        with pytest.raises(ValidationFailedError):
            AccessService.grant_access(SHEET_ID, USER_ID, AccessGrantRequest(
                user_email="owner@example.com", access_level=AccessLevel.ADMIN,
            ))
        assert fake_supabase.queries("sheet_access") == []

    def test_editor_cannot_manage_grants(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [shared_sheet(sheet_row)])
        fake_supabase.queue("sheet_access", [{"access_level": "editor", "expires_at": None}])

        with pytest.raises(ForbiddenError):
            AccessService.list_access(SHEET_ID, USER_ID)


class TestListAccess:
    """Test listing grants."""

    def test_admin_grantee_lists_grants_with_profiles(self, fake_supabase, sheet_row):
        past = (datetime.now(timezone.utc) - timedelta(days=2)).isoformat()
        fake_supabase.queue("sheets", [shared_sheet(sheet_row)])
        fake_supabase.queue(
            "sheet_access",
            [{"access_level": "admin", "expires_at": None}],
            [
                {"id": "grant-1", "user_id": USER_ID, "access_level": "admin", "expires_at": None},
                {"id": "grant-2", "user_id": "someone-else", "access_level": "viewer", "expires_at": past},
            ],
        )
        fake_supabase.queue("profiles", [{"id": USER_ID, "email": "me@example.com", "full_name": "Me"}])

        result = AccessService.list_access(SHEET_ID, USER_ID)

        assert result["is_owner"] is False
        first, second = result["access"]
        assert first["user_email"] == "me@example.com"
        assert first["is_expired"] is False
        assert second["user_email"] is None
        assert second["is_expired"] is True


class TestChangeAccess:
    """Test updating and revoking grants."""

    def test_update_level(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue(
            "sheet_access",
            [{"id": "grant-1", "access_level": "viewer"}],
            [{"id": "grant-1", "access_level": "editor"}],
        )

        updated = AccessService.update_access(
            SHEET_ID, "grant-1", USER_ID, AccessUpdateRequest(access_level=AccessLevel.EDITOR)
        )

        assert updated["access_level"] == "editor"
        update = fake_supabase.queries("sheet_access", "update")[0]
        assert update.payload["access_level"] == "editor"
        assert "expires_at" not in update.payload

    def test_revoke_deactivates(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("sheet_access", [{"id": "grant-1"}])

        AccessService.revoke_access(SHEET_ID, "grant-1", USER_ID)

        update = fake_supabase.queries("sheet_access", "update")[0]
        assert update.payload["is_active"] is False
        assert fake_supabase.queries("sheet_access", "delete") == []

    def test_revoke_unknown_grant(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("sheet_access", [])

        with pytest.raises(NotFoundError):
            AccessService.revoke_access(SHEET_ID, "grant-404", USER_ID)


class TestSearchUsers:
    """Test the share dialog's user search."""

    def test_short_query_returns_nothing(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])

        assert AccessService.search_users(SHEET_ID, USER_ID, " a ") == []
        assert fake_supabase.queries("profiles") == []

    def test_excludes_owner_and_existing_grantees(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("sheet_access", [{"user_id": OTHER_USER_ID}])
        fake_supabase.queue("profiles", [
            {"id": USER_ID, "email": "owner@example.com"},
            GRANTEE,
            {"id": "new-user", "email": "new.eng@example.com"},
        ])

        users = AccessService.search_users(SHEET_ID, USER_ID, "Example")

        assert [u["id"] for u in users] == ["new-user"]
        query = fake_supabase.queries("profiles")[0]
        assert query.args_of("ilike") == [("email", "%example%")]


# =============================================================================
# Public Links
# =============================================================================

class TestPublicLinks:
    """Test public link lifecycle."""

    def test_create_new_link(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("public_links", [], [{"id": "link-1"}])

        result = PublicLinkService.create_link(SHEET_ID, USER_ID)

        assert result["sheet_id"] == SHEET_ID
        assert result["public_link"] == f"/public/sheets/{result['access_key']}"
        insert = fake_supabase.queries("public_links", "insert")[0]
        assert insert.payload["access_key"] == result["access_key"]
        assert insert.payload["created_by"] == USER_ID

    def test_regenerate_rotates_existing_key(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("public_links", [{"id": "link-1", "access_key": "old-key"}], [{"id": "link-1"}])

        result = PublicLinkService.create_link(SHEET_ID, USER_ID)

        update = fake_supabase.queries("public_links", "update")[0]
        assert update.filters() == {"id": "link-1"}
        assert update.payload["access_key"] == result["access_key"] != "old-key"
        assert fake_supabase.queries("public_links", "insert") == []

    def test_only_owner_creates_links(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [shared_sheet(sheet_row)])
        fake_supabase.queue("sheet_access", [{"access_level": "admin", "expires_at": None}])

        with pytest.raises(ForbiddenError):
            PublicLinkService.create_link(SHEET_ID, USER_ID)

    def test_toggle_without_link(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("public_links", [])

        with pytest.raises(NotFoundError):
            PublicLinkService.set_active(SHEET_ID, USER_ID, False)

    def test_toggle_off(self, fake_supabase, sheet_row):
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("public_links", [{"id": "link-1"}], [{"id": "link-1", "is_active": False}])

        link = PublicLinkService.set_active(SHEET_ID, USER_ID, False)

        assert link["is_active"] is False

    def test_public_read_hides_owner(self, fake_supabase, sheet_row, column_rows):
        fake_supabase.queue("public_links", [{"sheet_id": SHEET_ID, "expires_at": None}])
        fake_supabase.queue("sheets", [sheet_row])
        fake_supabase.queue("columns", column_rows)
        fake_supabase.queue("rows", [{"id": ROW_ID}])
        fake_supabase.queue("cells", [{"row_id": ROW_ID, "column_id": COLUMN_ID, "value": "SITE-7"}])

        data = PublicLinkService.get_public_sheet("abc-key")

        assert data["sheet"] == {"id": SHEET_ID, "name": "Relocation Q3", "description": "North region"}
        assert data["rows"][0]["cells"] == {COLUMN_ID: "SITE-7"}
        lookup = fake_supabase.queries("public_links")[0]
        assert lookup.filters() == {"access_key": "abc-key", "is_active": True}

    def test_expired_link(self, fake_supabase):
        past = (datetime.now(timezone.utc) - timedelta(minutes=5)).isoformat()
        fake_supabase.queue("public_links", [{"sheet_id": SHEET_ID, "expires_at": past}])

        with pytest.raises(NotFoundError) as exc_info:
            PublicLinkService.get_public_sheet("abc-key")
        assert exc_info.value.message == LINK_NOT_FOUND

    def test_link_to_deleted_sheet(self, fake_supabase):
        fake_supabase.queue("public_links", [{"sheet_id": SHEET_ID, "expires_at": None}])
        fake_supabase.queue("sheets", [])

        with pytest.raises(NotFoundError):
            PublicLinkService.get_public_sheet("abc-key")
