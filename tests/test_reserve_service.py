# =============================================================================
# tests/test_reserve_service.py - Reserve & Settlement Tests
# =============================================================================
# This module contains tests for:
# - MR number de-duplication
# - Reserve items (per-user): create, update, import, bulk, categories
# - Settlement items (shared): missing table, import, bulk actions
# - CSV exports built with pandas
# =============================================================================

import pandas as pd
import pytest

from app.exceptions import ConflictError, NotFoundError, TableMissingError, ValidationFailedError
from core.models.reserve import (
    ItemStatus,
    Priority,
    ReserveBulkRequest,
    ReserveItemCreate,
    ReserveItemUpdate,
    SettlementBulkRequest,
    SettlementItemCreate,
    SettlementItemUpdate,
)
from core.services.export_service import RESERVE_EXPORT_COLUMNS, ExportService
from core.services.reserve_service import ReserveService, dedupe_mr_numbers
from core.services.settlement_service import SettlementService
from tests.conftest import COLUMN_ID, ITEM_ID, ROW_ID, USER_ID, api_error


# =============================================================================
# De-duplication
# =============================================================================

class TestDedupe:
    """Test splitting MR numbers into new ones and duplicates."""

    def test_existing_and_repeated_numbers_are_duplicates(self):
        fresh, duplicates = dedupe_mr_numbers(
            [" MR-1 ", "MR-2", "", "MR-1", "MR-3", None],
            existing={"MR-3"},
        )

        assert fresh == ["MR-1", "MR-2"]
        assert duplicates == ["MR-1", "MR-3"]

    def test_nothing_existing(self):
        assert dedupe_mr_numbers(["A", "B"], set()) == (["A", "B"], [])


# =============================================================================
# Reserve Items
# =============================================================================

class TestReserveItems:
    """Test per-user reserve items."""

    def test_create(self, fake_supabase):
        fake_supabase.queue("reserve_items", [], [{"id": ITEM_ID, "mr_number": "MR-10442"}])

        item = ReserveService.create_item(
            USER_ID, ReserveItemCreate(mr_number=" MR-10442 ", priority=Priority.HIGH, category=" RAN ")
        )

        assert item["id"] == ITEM_ID
        insert = fake_supabase.queries("reserve_items", "insert")[0].payload
        assert insert == {
            "user_id": USER_ID,
            "mr_number": "MR-10442",
            "status": "none",
            "notes": "",
            "priority": "high",
            "category": "RAN",
            "due_date": None,
        }

    def test_duplicate_for_same_user_conflicts(self, fake_supabase):
        fake_supabase.queue("reserve_items", [{"mr_number": "MR-1"}])

        with pytest.raises(ConflictError) as exc_info:
            ReserveService.create_item(USER_ID, ReserveItemCreate(mr_number="MR-1"))
        assert exc_info.value.status_code == 409

        lookup = fake_supabase.queries("reserve_items")[0]
        assert lookup.filters() == {"user_id": USER_ID}

    def test_blank_number(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            ReserveService.create_item(USER_ID, ReserveItemCreate(mr_number="  "))
        assert fake_supabase.executed == []

    def test_list_filters(self, fake_supabase):
        fake_supabase.queue("reserve_items", [{"id": ITEM_ID}])

        ReserveService.list_items(USER_ID, status=ItemStatus.PROBLEM, category="RAN")

        query = fake_supabase.queries("reserve_items")[0]
        assert query.filters() == {"user_id": USER_ID, "status": "problem", "category": "RAN"}

    def test_update_scoped_to_user(self, fake_supabase):
        fake_supabase.queue("reserve_items", [{"id": ITEM_ID, "status": "done"}])

        item = ReserveService.update_item(ITEM_ID, USER_ID, ReserveItemUpdate(status=ItemStatus.DONE))

        assert item["status"] == "done"
        update = fake_supabase.queries("reserve_items", "update")[0]
        assert update.filters() == {"id": ITEM_ID, "user_id": USER_ID}
        assert update.payload["status"] == "done"
        assert "updated_at" in update.payload

    def test_update_ignores_explicit_nulls(self, fake_supabase):
        fake_supabase.queue("reserve_items", [{"id": ITEM_ID, "notes": "swap due"}])

        ReserveService.update_item(ITEM_ID, USER_ID, ReserveItemUpdate(status=None, notes="swap due"))

        update = fake_supabase.queries("reserve_items", "update")[0]
        assert set(update.payload) == {"notes", "updated_at"}

    def test_update_other_users_item(self, fake_supabase):
        fake_supabase.queue("reserve_items", [])

        with pytest.raises(NotFoundError):
            ReserveService.update_item(ITEM_ID, USER_ID, ReserveItemUpdate(notes="mine"))

    def test_delete_missing(self, fake_supabase):
        fake_supabase.queue("reserve_items", [])

        with pytest.raises(NotFoundError):
            ReserveService.delete_item(ITEM_ID, USER_ID)

    def test_import_skips_existing(self, fake_supabase):
        fake_supabase.queue(
            "reserve_items",
            [{"mr_number": "MR-2"}],
            [{"id": "a", "mr_number": "MR-1"}, {"id": "b", "mr_number": "MR-3"}],
        )

        result = ReserveService.import_numbers(USER_ID, ["MR-1", "MR-2", "MR-3", "MR-1"])

        assert result["duplicates_count"] == 2
        assert result["duplicates"] == ["MR-2", "MR-1"]
        assert len(result["data"]) == 2
        insert = fake_supabase.queries("reserve_items", "insert")[0].payload
        assert [row["mr_number"] for row in insert] == ["MR-1", "MR-3"]
        assert {row["priority"] for row in insert} == {"medium"}

    def test_import_all_duplicates_inserts_nothing(self, fake_supabase):
        fake_supabase.queue("reserve_items", [{"mr_number": "MR-1"}])

        result = ReserveService.import_numbers(USER_ID, ["MR-1"])

        assert result["data"] == []
        assert fake_supabase.queries("reserve_items", "insert") == []

    def test_import_empty(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            ReserveService.import_numbers(USER_ID, ["", "  "])

    def test_categories_are_distinct_and_sorted(self, fake_supabase):
        fake_supabase.queue("reserve_items", [
            {"category": "Transport"}, {"category": ""}, {"category": "RAN"},
            {"category": None}, {"category": "RAN "},
        ])

        assert ReserveService.list_categories(USER_ID) == ["RAN", "Transport"]


class TestReserveBulk:
    """Test bulk actions on reserve items."""

    def test_unknown_action(self, fake_supabase):
        with pytest.raises(ValidationFailedError) as exc_info:
            ReserveService.bulk(USER_ID, ReserveBulkRequest(action="archive", ids=[ITEM_ID]))
        assert exc_info.value.status_code == 400
        assert fake_supabase.executed == []

    def test_import_is_not_a_reserve_bulk_action(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            ReserveService.bulk(USER_ID, ReserveBulkRequest(action="import", ids=[ITEM_ID]))

    def test_no_ids(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            ReserveService.bulk(USER_ID, ReserveBulkRequest(action="delete", ids=[]))

    def test_update_priority(self, fake_supabase):
        fake_supabase.queue("reserve_items", [{"id": "a"}, {"id": "b"}])

        result = ReserveService.bulk(
            USER_ID, ReserveBulkRequest(action="update_priority", ids=["a", "b"], value="high")
        )

        assert result == {"action": "update_priority", "affected": 2}
        update = fake_supabase.queries("reserve_items", "update")[0]
        assert update.payload["priority"] == "high"
        assert update.args_of("in_") == [("id", ["a", "b"])]
        assert update.filters() == {"user_id": USER_ID}

    def test_invalid_status_value(self, fake_supabase):
        with pytest.raises(ValidationFailedError) as exc_info:
            ReserveService.bulk(
                USER_ID, ReserveBulkRequest(action="update_status", ids=["a"], value="lost")
            )
        assert exc_info.value.details == {"allowed": ["none", "problem", "done"]}

    def test_delete(self, fake_supabase):
        fake_supabase.queue("reserve_items", [{"id": "a"}])

        result = ReserveService.bulk(USER_ID, ReserveBulkRequest(action="delete", ids=["a"]))

        assert result["affected"] == 1
        assert len(fake_supabase.queries("reserve_items", "delete")) == 1


# =============================================================================
# Settlement Items
# =============================================================================

class TestSettlementItems:
    """Test the shared settlement list."""

    def test_missing_table(self, fake_supabase):
        fake_supabase.queue(
            "settlement_items",
            api_error("PGRST205", "Could not find the table 'public.settlement_items' in the schema cache"),
        )

        with pytest.raises(TableMissingError) as exc_info:
            SettlementService.list_items()
        assert exc_info.value.status_code == 404

    def test_duplicate_conflicts_across_users(self, fake_supabase):
        fake_supabase.queue("settlement_items", [{"mr_number": "MR-7"}])

        with pytest.raises(ConflictError):
            SettlementService.create_item(SettlementItemCreate(mr_number="MR-7"))

        lookup = fake_supabase.queries("settlement_items")[0]
        assert lookup.filters() == {}

    def test_update_requires_a_field(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            SettlementService.update_item(ITEM_ID, SettlementItemUpdate())

    def test_update_missing(self, fake_supabase):
        fake_supabase.queue("settlement_items", [])

        with pytest.raises(NotFoundError):
            SettlementService.update_item(ITEM_ID, SettlementItemUpdate(notes="waiting on PO"))

    def test_import_all_duplicates(self, fake_supabase):
        fake_supabase.queue("settlement_items", [{"mr_number": "MR-1"}, {"mr_number": "MR-2"}])

        result = SettlementService.bulk(
            SettlementBulkRequest(action="import", mr_numbers=["MR-1", "MR-2"])
        )

        assert result["message"] == "All MR numbers already exist"
        assert result["duplicates_count"] == 2
        assert fake_supabase.queries("settlement_items", "insert") == []

    def test_import_inserts_new(self, fake_supabase):
        fake_supabase.queue("settlement_items", [{"mr_number": "MR-1"}], [{"id": "x", "mr_number": "MR-9"}])

        result = SettlementService.bulk(
            SettlementBulkRequest(action="import", mr_numbers=["MR-1", "MR-9"])
        )

        assert result["duplicates_count"] == 1
        assert result["data"] == [{"id": "x", "mr_number": "MR-9"}]
        assert "message" not in result

    def test_unknown_action(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            SettlementService.bulk(SettlementBulkRequest(action="update_priority", ids=["a"]))

    def test_update_status_requires_status(self, fake_supabase):
        with pytest.raises(ValidationFailedError):
            SettlementService.bulk(SettlementBulkRequest(action="update_status", ids=["a"]))

    def test_bulk_update_status(self, fake_supabase):
        fake_supabase.queue("settlement_items", [{"id": "a", "status": "done"}])

        result = SettlementService.bulk(
            SettlementBulkRequest(action="update_status", ids=["a"], status=ItemStatus.DONE)
        )

        assert result["affected"] == 1
        update = fake_supabase.queries("settlement_items", "update")[0]
        assert update.payload["status"] == "done"


# =============================================================================
# Exports
# =============================================================================

class TestExports:
    """Test DataFrame layouts and CSV rendering."""

    def test_sheet_layout_follows_column_positions(self, column_rows):
        columns = list(reversed(column_rows))
        rows = [{"id": ROW_ID, "cells": {COLUMN_ID: "SITE-1"}}]

        df = ExportService.sheet_to_dataframe(columns, rows)

        assert list(df.columns) == ["Site ID", "Qty"]
        assert df.iloc[0].tolist() == ["SITE-1", ""]

    def test_reserve_labels(self):
        df = ExportService.reserve_to_dataframe([
            {"mr_number": "MR-1", "status": "none", "priority": "high"},
            {"mr_number": "MR-2", "status": "done", "due_date": "2024-07-01"},
        ])

        assert list(df.columns) == RESERVE_EXPORT_COLUMNS
        assert df["Status"].tolist() == ["Pending", "Done"]

    def test_csv_has_no_index(self):
        csv = ExportService.to_csv(pd.DataFrame([["MR-1", "Done"]], columns=["MR Number", "Status"]))

        assert csv.splitlines() == ["MR Number,Status", "MR-1,Done"]
