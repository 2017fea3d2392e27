# =============================================================================
# core/services/common.py - Shared Query Helpers
# =============================================================================
# Every service runs its PostgREST queries through `execute` so client errors
# surface as API exceptions (404 / 409 / 500) instead of raw payloads.
# =============================================================================

import logging
from typing import Any

from app.exceptions import DatabaseError, translate_database_error

logger = logging.getLogger(__name__)


def execute(
    query: Any,
    action: str,
    resource: str = "record",
    table: str | None = None,
) -> Any:
    """
    Run a built query and translate any client error.

    Args:
        query: A supabase-py request builder (anything with .execute())
        action: Verb phrase for error messages ("fetch sheets")
        resource: Resource name used in not-found/conflict messages
        table: Table name reported when the relation is missing

    Returns:
        The APIResponse from the client

    Raises:
        SiteOpsException: The translated error
    """
    try:
        return query.execute()
    except Exception as e:
        raise translate_database_error(e, action, resource=resource, table=table) from e


def rows_of(response: Any) -> list[dict[str, Any]]:
    """Rows carried by a response, [] when there are none."""
    return list(getattr(response, "data", None) or [])


def first_row(response: Any, action: str) -> dict[str, Any]:
    """
    First row of a write response.

    Inserts/updates return the written rows; an empty result means the
    write didn't happen.
    """
    rows = rows_of(response)
    if not rows:
        logger.error(f"Failed to {action}: no data returned")
        raise DatabaseError(action, "Write returned no data")
    return rows[0]
