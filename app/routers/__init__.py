# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - sheets.py: Sheets, cells, columns, rows, search, stats, export
# - sheet_access.py: Sheet sharing grants and public-link management
# - public.py: Unauthenticated public sheet views
# - trackers.py: Habit/goal trackers
# - reserve.py: Personal reserve MR-number list
# - settlement.py: Shared settlement MR-number list
# - material.py: Material inventory (brands, categories, items)
# - sites.py: Site folders and folder permissions
# - admin.py: Read-only user administration
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import sheets
from . import sheet_access
from . import public
from . import trackers
from . import reserve
from . import settlement
from . import material
from . import sites
from . import admin

__all__ = [
    "health",
    "sheets",
    "sheet_access",
    "public",
    "trackers",
    "reserve",
    "settlement",
    "material",
    "sites",
    "admin",
]
