# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for request/response validation:
# - sheet.py: Sheets, columns, rows and cells
# - access.py: Sheet access grants and public links
# - tracker.py: Habit/goal trackers and their logs
# - reserve.py: Reserve and settlement MR-number items
# - material.py: Brands, categories and materials
# - folder.py: Site folders and folder permissions
# - profile.py: User profiles and admin stats
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Sheet Models - Spreadsheet data
# -----------------------------------------------------------------------------
from .sheet import (
    DEFAULT_COLUMNS,
    BulkCellUpdate,
    CellUpdate,
    ColumnCreate,
    ColumnType,
    ColumnUpdate,
    SheetCreate,
    SheetCreateResponse,
    SheetSearchRequest,
    SheetSearchResponse,
    SheetStats,
    SheetUpdate,
    ValidationStatus,
)

# -----------------------------------------------------------------------------
# Access Models - Sharing
# -----------------------------------------------------------------------------
from .access import (
    AccessGrantRequest,
    AccessLevel,
    AccessUpdateRequest,
    PublicLinkResponse,
    PublicLinkToggle,
)

# -----------------------------------------------------------------------------
# Tracker Models
# -----------------------------------------------------------------------------
from .tracker import (
    Tracker,
    TrackerCreate,
    TrackerLog,
    TrackerLogCreate,
    TrackerStats,
    TrackerType,
    TrackerUpdate,
)

# -----------------------------------------------------------------------------
# Reserve / Settlement Models
# -----------------------------------------------------------------------------
from .reserve import (
    BulkAction,
    ImportRequest,
    ItemStatus,
    Priority,
    ReserveBulkRequest,
    ReserveItemCreate,
    ReserveItemUpdate,
    SettlementBulkRequest,
    SettlementItemCreate,
    SettlementItemUpdate,
)

# -----------------------------------------------------------------------------
# Material Models
# -----------------------------------------------------------------------------
from .material import (
    BrandCreate,
    CategoryCreate,
    CategoryUpdate,
    MaterialCreate,
    MaterialStatus,
    MaterialUpdate,
)

# -----------------------------------------------------------------------------
# Folder & Profile Models
# -----------------------------------------------------------------------------
from .folder import FolderCreate, FolderPermissionCreate
from .profile import ProfileUpdate, UserActiveUpdate, UserProfile, UserStats

__all__ = [
    # Sheet
    "DEFAULT_COLUMNS",
    "BulkCellUpdate",
    "CellUpdate",
    "ColumnCreate",
    "ColumnType",
    "ColumnUpdate",
    "SheetCreate",
    "SheetCreateResponse",
    "SheetSearchRequest",
    "SheetSearchResponse",
    "SheetStats",
    "SheetUpdate",
    "ValidationStatus",
    # Access
    "AccessGrantRequest",
    "AccessLevel",
    "AccessUpdateRequest",
    "PublicLinkResponse",
    "PublicLinkToggle",
    # Tracker
    "Tracker",
    "TrackerCreate",
    "TrackerLog",
    "TrackerLogCreate",
    "TrackerStats",
    "TrackerType",
    "TrackerUpdate",
    # Reserve / Settlement
    "BulkAction",
    "ImportRequest",
    "ItemStatus",
    "Priority",
    "ReserveBulkRequest",
    "ReserveItemCreate",
    "ReserveItemUpdate",
    "SettlementBulkRequest",
    "SettlementItemCreate",
    "SettlementItemUpdate",
    # Material
    "BrandCreate",
    "CategoryCreate",
    "CategoryUpdate",
    "MaterialCreate",
    "MaterialStatus",
    "MaterialUpdate",
    # Folder & Profile
    "FolderCreate",
    "FolderPermissionCreate",
    "ProfileUpdate",
    "UserActiveUpdate",
    "UserProfile",
    "UserStats",
]
