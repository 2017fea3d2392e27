# =============================================================================
# lib/cells.py - Spreadsheet Cell Typing
# =============================================================================
# Sheets store every cell value as JSON; the column type only decides:
# - the value a fresh cell starts with (default_cell_value)
# - the validation_status recorded next to a written value (validate_cell_value)
#
# Values are always stored as given. Validation never rejects a write, it
# only labels the cell so the UI can highlight it.
# =============================================================================

import re
from datetime import date
from typing import Any

VALID = "valid"
INVALID = "invalid"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)


def default_cell_value(column_type: str, default_value: Any = None) -> Any:
    """
    Value a new cell gets when a row is created.

    An explicit column default wins; otherwise the type decides.

    Example:
        default_cell_value("number")          # 0
        default_cell_value("text", "N/A")     # "N/A"
    """
    if default_value not in (None, ""):
        return default_value

    if column_type == "number":
        return 0
    if column_type == "checkbox":
        return False
    if column_type == "date":
        return date.today().isoformat()
    if column_type == "select":
        return None
    return ""


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def validate_cell_value(
    column_type: str,
    value: Any,
    is_required: bool = False,
    validation_rules: dict[str, Any] | None = None,
) -> tuple[str, str | None]:
    """
    Classify a cell value against its column definition.

    Args:
        column_type: One of text/number/date/checkbox/select/email/url
        value: The value being written
        is_required: Whether the column rejects empty values
        validation_rules: Column rules; "options" restricts select values

    Returns:
        (validation_status, validation_message) where status is
        "valid" or "invalid" and the message explains an invalid value
    """
    if _is_empty(value):
        if is_required:
            return INVALID, "Value is required"
        return VALID, None

    if column_type == "number":
        if isinstance(value, bool):
            return INVALID, "Expected a number"
        try:
            float(value)
        except (TypeError, ValueError):
            return INVALID, "Expected a number"
        return VALID, None

    if column_type == "checkbox":
        if isinstance(value, bool) or str(value).lower() in ("true", "false"):
            return VALID, None
        return INVALID, "Expected true or false"

    if column_type == "date":
        try:
            date.fromisoformat(str(value)[:10])
        except ValueError:
            return INVALID, "Expected a date (YYYY-MM-DD)"
        return VALID, None

    if column_type == "email":
        if _EMAIL_PATTERN.match(str(value)):
            return VALID, None
        return INVALID, "Expected an email address"

    if column_type == "url":
        if _URL_PATTERN.match(str(value)):
            return VALID, None
        return INVALID, "Expected an http(s) URL"

    if column_type == "select":
        options = (validation_rules or {}).get("options") or []
        if options and value not in options:
            return INVALID, f"Expected one of: {', '.join(map(str, options))}"
        return VALID, None

    return VALID, None
