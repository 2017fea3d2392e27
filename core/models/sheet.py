# =============================================================================
# core/models/sheet.py - Spreadsheet Schemas
# =============================================================================
# These models define the API contract for the sheet system:
# - Sheet: one spreadsheet, owned by a user
# - Column: typed column definition (text, number, date, ...)
# - Row: ordered row, soft-deleted via is_deleted
# - Cell: the value at (row, column), stored as JSON
#
# Everything maps 1:1 onto the sheets/columns/rows/cells tables; the only
# reshaping is SheetRow.cells, a column_id -> value map built on read.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class ColumnType(str, Enum):
    """
    Data type of a sheet column.

    Only affects default values and validation_status; values are stored
    as JSON regardless of type.
    """
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    CHECKBOX = "checkbox"
    SELECT = "select"
    EMAIL = "email"
    URL = "url"


class ValidationStatus(str, Enum):
    """Validation label stored next to each cell value."""
    VALID = "valid"
    INVALID = "invalid"
    WARNING = "warning"


# Columns every new sheet starts with
DEFAULT_COLUMNS: list[dict[str, Any]] = [
    {"name": "Site ID", "type": ColumnType.TEXT.value, "position": 0},
    {"name": "Scenario", "type": ColumnType.TEXT.value, "position": 1},
    {"name": "MR Number", "type": ColumnType.TEXT.value, "position": 2},
    {"name": "IQF Number", "type": ColumnType.TEXT.value, "position": 3},
    {
        "name": "Status",
        "type": ColumnType.SELECT.value,
        "position": 4,
        "validation_rules": {"options": ["Pending", "Done", "Problem"]},
    },
    {"name": "Date", "type": ColumnType.DATE.value, "position": 5},
    {"name": "Contractor", "type": ColumnType.TEXT.value, "position": 6},
    {"name": "Region", "type": ColumnType.TEXT.value, "position": 7},
    {"name": "Notes", "type": ColumnType.TEXT.value, "position": 8},
]

DEFAULT_COLUMN_WIDTH = 120


# =============================================================================
# Sheet
# =============================================================================

class SheetCreate(BaseModel):
    """
    Request body for creating a sheet.

    Example:
        {"name": "Relocation Q3", "description": "North region sites"}
    """
    # Presence is checked by SheetService so a blank name is a 400, not a 422
    name: str | None = Field(default=None, max_length=255, description="Sheet name")
    description: str | None = Field(default=None, description="Optional description")
    settings: dict[str, Any] = Field(default_factory=dict, description="Free-form UI settings")


class SheetUpdate(BaseModel):
    """Request body for renaming or re-describing a sheet."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    settings: dict[str, Any] | None = None


class SheetCreateResponse(BaseModel):
    """Response when a sheet has been created."""
    sheet_id: UUID
    name: str
    description: str | None = None
    created_at: datetime | None = None


# =============================================================================
# Columns
# =============================================================================

class ColumnCreate(BaseModel):
    """
    Request body for adding a column.

    Example:
        {"name": "Priority", "type": "select",
         "validation_rules": {"options": ["Low", "High"]}}
    """
    name: str = Field(..., min_length=1, max_length=255)
    type: ColumnType
    default_value: str | None = None
    width: int = Field(default=DEFAULT_COLUMN_WIDTH, ge=20, le=2000)
    is_required: bool = False
    is_unique: bool = False
    validation_rules: dict[str, Any] = Field(default_factory=dict)
    format_options: dict[str, Any] = Field(default_factory=dict)


class ColumnUpdate(BaseModel):
    """Request body for editing a column; only provided fields change."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: ColumnType | None = None
    position: int | None = Field(default=None, ge=0)
    width: int | None = Field(default=None, ge=20, le=2000)
    default_value: str | None = None
    is_required: bool | None = None
    validation_rules: dict[str, Any] | None = None
    format_options: dict[str, Any] | None = None


# =============================================================================
# Rows & Cells
# =============================================================================

class CellUpdate(BaseModel):
    """One cell write: the value at (row_id, column_id)."""
    row_id: UUID
    column_id: UUID
    value: Any = None
    formatted_value: str | None = None


class BulkCellUpdate(BaseModel):
    """Request body for writing many cells at once."""
    updates: list[CellUpdate] | None = Field(default=None, description="Cell writes to apply")


# =============================================================================
# Search & Stats
# =============================================================================

class SheetSearchRequest(BaseModel):
    """
    Search within a sheet.

    search_term matches any cell; column_filters maps column_id to a
    substring that column's cell must contain. Matching is case-insensitive.
    """
    search_term: str = ""
    column_filters: dict[str, str] = Field(default_factory=dict)


class SheetSearchResponse(BaseModel):
    """Ids of matching rows."""
    results: list[str] = Field(default_factory=list)
    count: int = 0


class SheetStats(BaseModel):
    """Counts describing a sheet's contents."""
    sheet_id: UUID
    column_count: int = 0
    row_count: int = 0
    deleted_row_count: int = 0
    filled_cell_count: int = 0
    invalid_cell_count: int = 0
    column_fill: dict[str, int] = Field(
        default_factory=dict,
        description="column_id -> number of non-empty cells among live rows"
    )
