# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
import secrets
import time
from datetime import datetime, timezone
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        sheet_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        sheet_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (for updated_at columns)."""
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a Supabase timestamp into an aware datetime.

    Accepts the trailing "Z" form PostgREST returns. Naive values are
    assumed to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expired(expires_at: str | datetime | None) -> bool:
    """True when `expires_at` is set and already in the past."""
    parsed = parse_timestamp(expires_at)
    return parsed is not None and parsed <= datetime.now(timezone.utc)


# =============================================================================
# String Utilities
# =============================================================================

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Build a URL slug from a display name.

    Example:
        slugify("Huawei Tech (RAN)")  # "huawei-tech-ran"
    """
    return _SLUG_SEPARATORS.sub("-", name.lower()).strip("-")


def generate_access_key() -> str:
    """
    Generate a shareable access key for public sheet links.

    The key is a base-36 timestamp prefix plus a random URL-safe suffix,
    so keys sort roughly by creation time and can't be guessed.
    """
    return f"{_to_base36(int(time.time() * 1000))}-{secrets.token_urlsafe(12)}"


def _to_base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    out = []
    while number:
        number, remainder = divmod(number, 36)
        out.append(digits[remainder])
    return "".join(reversed(out))
