# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides the small lookups shared by every service:
# - Profiles (by id or email)
# - Admin markers (admin_users table)
# - Single-row fetches that treat "no rows" as None
#
# It also knows how to read PostgREST/Postgres error codes so the API layer
# can map them to HTTP statuses.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   profile = SupabaseClient.fetch_profile(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)


# PostgREST: .single() matched zero rows
NO_ROWS_CODE = "PGRST116"
# PostgREST: table not present in the schema cache
SCHEMA_CACHE_MISS_CODE = "PGRST205"
# Postgres: undefined_table
UNDEFINED_TABLE_CODE = "42P01"
# Postgres: unique_violation
UNIQUE_VIOLATION_CODE = "23505"


def error_code(exc: Exception) -> str | None:
    """Return the PostgREST/Postgres error code carried by `exc`, if any."""
    code = getattr(exc, "code", None)
    return str(code) if code else None


def error_message(exc: Exception) -> str:
    """Return the human-readable message carried by `exc`."""
    message = getattr(exc, "message", None)
    return str(message) if message else str(exc)


def is_no_rows_error(exc: Exception) -> bool:
    """True when `exc` is the 'no rows returned' error from .single()."""
    return error_code(exc) == NO_ROWS_CODE or NO_ROWS_CODE in str(exc)


def is_missing_table_error(exc: Exception) -> bool:
    """True when `exc` reports that the queried relation doesn't exist."""
    code = error_code(exc)
    if code in (UNDEFINED_TABLE_CODE, SCHEMA_CACHE_MISS_CODE):
        return True
    message = error_message(exc).lower()
    return "relation" in message and "does not exist" in message


class SupabaseClientError(Exception):
    """
    Error during Supabase client setup.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        profile = SupabaseClient.fetch_profile_by_email("user@example.com")
        if SupabaseClient.is_admin(user_id):
            ...
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS), so
        every service checks ownership/grants itself before touching rows.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used by tests and after key rotation)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Generic Lookups
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_one(
        cls,
        table: str,
        match: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row matching every key/value in `match`.

        Args:
            table: Table name
            match: Column -> value equality filters
            columns: PostgREST select string

        Returns:
            Row dict, or None if nothing matched

        Raises:
            Exception: Any client error other than "no rows"
        """
        client = cls.get_client()
        query = client.table(table).select(columns)
        for column, value in match.items():
            query = query.eq(column, normalize_uuid(value) if isinstance(value, UUID) else value)

        try:
            response = query.limit(1).execute()
        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise

        rows = response.data or []
        return rows[0] if rows else None

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a user's profile row.

        Args:
            user_id: The auth user UUID (profiles.id)

        Returns:
            Profile dict, or None if the user has no profile yet
        """
        return cls.fetch_one("profiles", {"id": normalize_uuid(user_id)})

    @classmethod
    def fetch_profile_by_email(cls, email: str) -> dict[str, Any] | None:
        """
        Fetch a profile by email.

        Emails are compared lower-cased and trimmed, matching how
        profiles are written at signup.
        """
        return cls.fetch_one(
            "profiles",
            {"email": email.strip().lower()},
            columns="id, email, full_name",
        )

    # -------------------------------------------------------------------------
    # Admin Markers
    # -------------------------------------------------------------------------

    @classmethod
    def is_admin(cls, user_id: str | UUID, email: str | None = None) -> bool:
        """
        Check whether a user is an administrator.

        A user is an admin when an admin_users row references them, or when
        their email is listed in ADMIN_EMAILS.

        Args:
            user_id: The auth user UUID
            email: The user's email from the token (optional)

        Returns:
            True if the user is an admin
        """
        if email and email.strip().lower() in settings.admin_emails_list:
            return True

        row = cls.fetch_one(
            "admin_users",
            {"user_id": normalize_uuid(user_id)},
            columns="id",
        )
        return row is not None
