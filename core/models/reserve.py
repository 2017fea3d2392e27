# =============================================================================
# core/models/reserve.py - Reserve & Settlement Schemas
# =============================================================================
# Both trackers follow MR (material request) numbers through a simple
# status lifecycle:  none -> problem | done
#
# - Reserve items are private to the user who added them and carry
#   priority, category and due date.
# - Settlement items are shared by every user and only carry status/notes.
# =============================================================================

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class ItemStatus(str, Enum):
    """
    Processing state of an MR number.

    - none: not yet handled (shown as "Pending")
    - problem: blocked, see notes
    - done: completed
    """
    NONE = "none"
    PROBLEM = "problem"
    DONE = "done"


# Labels used in exports
STATUS_LABELS = {
    ItemStatus.NONE.value: "Pending",
    ItemStatus.PROBLEM.value: "Problem",
    ItemStatus.DONE.value: "Done",
}


class Priority(str, Enum):
    """Reserve item priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BulkAction(str, Enum):
    """Operations accepted by the bulk endpoints."""
    UPDATE_STATUS = "update_status"
    UPDATE_PRIORITY = "update_priority"
    UPDATE_CATEGORY = "update_category"
    DELETE = "delete"
    IMPORT = "import"


# =============================================================================
# Reserve Items
# =============================================================================

class ReserveItemCreate(BaseModel):
    """
    Request body for adding a reserve item.

    Example:
        {"mr_number": "MR-10442", "priority": "high", "category": "RAN"}
    """
    mr_number: str | None = Field(default=None, max_length=100)
    category: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: date | None = None


class ReserveItemUpdate(BaseModel):
    """Request body for editing a reserve item; only provided fields change."""
    status: ItemStatus | None = None
    notes: str | None = None
    priority: Priority | None = None
    category: str | None = None
    due_date: date | None = None


class ImportRequest(BaseModel):
    """A list of MR numbers to import in one call."""
    mr_numbers: list[str] = Field(default_factory=list)


class ReserveBulkRequest(BaseModel):
    """
    Bulk operation over reserve items.

    `value` carries the new status, priority or category depending on action.
    The action is checked by ReserveService so an unknown one is a 400.
    """
    action: str | None = None
    ids: list[str] = Field(default_factory=list)
    value: str | None = None


# =============================================================================
# Settlement Items
# =============================================================================

class SettlementItemCreate(BaseModel):
    """Request body for adding a settlement item."""
    mr_number: str | None = Field(default=None, max_length=100)


class SettlementItemUpdate(BaseModel):
    """Request body for editing a settlement item."""
    status: ItemStatus | None = None
    notes: str | None = None


class SettlementBulkRequest(BaseModel):
    """
    Bulk operation over settlement items.

    Example:
        {"action": "import", "mr_numbers": ["MR-1", "MR-2"]}
    """
    action: str | None = None
    ids: list[str] = Field(default_factory=list)
    status: ItemStatus | None = None
    mr_numbers: list[str] = Field(default_factory=list)
