# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Supabase client singleton and error-code helpers
# - cells.py: Spreadsheet cell defaults and validation
# - utils.py: Shared utilities (UUIDs, timestamps, slugs, access keys)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import (
    SupabaseClient,
    SupabaseClientError,
    is_missing_table_error,
    is_no_rows_error,
)
from lib.cells import default_cell_value, validate_cell_value
from lib.utils import (
    generate_access_key,
    is_expired,
    normalize_uuid,
    slugify,
    utc_now_iso,
)

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    "is_missing_table_error",
    "is_no_rows_error",
    # Cells
    "default_cell_value",
    "validate_cell_value",
    # Utils
    "generate_access_key",
    "is_expired",
    "normalize_uuid",
    "slugify",
    "utc_now_iso",
]
