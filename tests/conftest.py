# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - An in-memory stand-in for the Supabase client that records every
#   chained query and answers with queued responses
# - Common row fixtures for sheets, trackers and items
# =============================================================================

import os
from typing import Any
from unittest.mock import MagicMock

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-characters")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from postgrest.exceptions import APIError


USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"
SHEET_ID = "33333333-3333-3333-3333-333333333333"
COLUMN_ID = "44444444-4444-4444-4444-444444444444"
ROW_ID = "55555555-5555-5555-5555-555555555555"
TRACKER_ID = "66666666-6666-6666-6666-666666666666"
ITEM_ID = "77777777-7777-7777-7777-777777777777"
FOLDER_ID = "88888888-8888-8888-8888-888888888888"


def api_error(code: str, message: str = "database error") -> APIError:
    """Build the error supabase-py raises for a failed PostgREST call."""
    return APIError({"code": code, "message": message, "details": None, "hint": None})


# =============================================================================
# Fake Supabase Client
# =============================================================================

WRITE_OPERATIONS = ("insert", "update", "upsert", "delete")


class FakeResponse:
    """Mimics postgrest's APIResponse (data + count)."""

    def __init__(self, data: Any = None, count: int | None = None):
        self.data = data if data is not None else []
        self.count = count


class FakeQuery:
    """
    Chainable query builder.

    Any builder method (select, eq, order, in_, ...) is recorded and
    returns the same query, so tests can assert on what was asked.
    """

    def __init__(self, client: "FakeSupabase", table: str):
        self.client = client
        self.table = table
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)

        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    def execute(self) -> FakeResponse:
        self.client.executed.append(self)
        queue = self.client.responses.get(self.table)
        if not queue:
            return FakeResponse([])
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        if isinstance(result, FakeResponse):
            return result
        return FakeResponse(result)

    # -------------------------------------------------------------------------
    # Assertion helpers
    # -------------------------------------------------------------------------

    @property
    def operation(self) -> str:
        """select / insert / update / upsert / delete."""
        for name, _, _ in self.calls:
            if name in WRITE_OPERATIONS:
                return name
        return "select"

    @property
    def payload(self) -> Any:
        """First positional argument of the write call."""
        for name, args, _ in self.calls:
            if name in WRITE_OPERATIONS and args:
                return args[0]
        return None

    def args_of(self, name: str) -> list[tuple]:
        return [args for call, args, _ in self.calls if call == name]

    def kwargs_of(self, name: str) -> list[dict]:
        return [kwargs for call, _, kwargs in self.calls if call == name]

    def filters(self) -> dict[str, Any]:
        """eq filters as column -> value."""
        return {args[0]: args[1] for args in self.args_of("eq")}


class FakeSupabase:
    """In-memory stand-in for supabase.Client."""

    def __init__(self):
        self.responses: dict[str, list[Any]] = {}
        self.executed: list[FakeQuery] = []
        self.storage = MagicMock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def queue(self, table: str, *results: Any) -> None:
        """Queue results (row lists, FakeResponse or exceptions) for a table."""
        self.responses.setdefault(table, []).extend(results)

    def queries(self, table: str, operation: str | None = None) -> list[FakeQuery]:
        return [
            q for q in self.executed
            if q.table == table and (operation is None or q.operation == operation)
        ]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase():
    """Install a FakeSupabase as the singleton client for one test."""
    from lib.supabase_client import SupabaseClient

    fake = FakeSupabase()
    SupabaseClient._instance = fake
    yield fake
    SupabaseClient.reset()


@pytest.fixture
def sheet_row():
    """An active sheet owned by USER_ID."""
    return {
        "id": SHEET_ID,
        "name": "Relocation Q3",
        "description": "North region",
        "owner_id": USER_ID,
        "is_active": True,
        "settings": {},
        "created_at": "2024-05-01T09:00:00+00:00",
        "updated_at": "2024-05-01T09:00:00+00:00",
    }


@pytest.fixture
def column_rows():
    """Two columns: a required text column and a number column."""
    return [
        {
            "id": COLUMN_ID,
            "sheet_id": SHEET_ID,
            "name": "Site ID",
            "type": "text",
            "position": 0,
            "is_required": True,
            "default_value": None,
            "validation_rules": {},
        },
        {
            "id": "44444444-4444-4444-4444-444444444445",
            "sheet_id": SHEET_ID,
            "name": "Qty",
            "type": "number",
            "position": 1,
            "is_required": False,
            "default_value": None,
            "validation_rules": {},
        },
    ]


@pytest.fixture
def tracker_row():
    """A goal tracker owned by USER_ID."""
    return {
        "id": TRACKER_ID,
        "title": "Site audits",
        "description": None,
        "type": "goal",
        "target": 40,
        "unit": "sites",
        "start_date": "2024-01-01",
        "progress": 10,
        "owner_id": USER_ID,
        "created_at": "2024-01-01T08:00:00+00:00",
    }
