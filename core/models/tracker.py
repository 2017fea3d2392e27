# =============================================================================
# core/models/tracker.py - Tracker Schemas
# =============================================================================
# A tracker is a user-defined habit or goal with a numeric target.
# Each log entry adds `amount` to the tracker's progress.
# =============================================================================

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class TrackerType(str, Enum):
    """
    Kind of tracker.

    - habit: recurring activity counted over time
    - goal: one-off target to reach
    """
    HABIT = "habit"
    GOAL = "goal"


class TrackerCreate(BaseModel):
    """
    Request body for creating a tracker.

    Example:
        {"title": "Site audits", "type": "goal", "target": 40, "unit": "sites"}
    """
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    type: TrackerType = TrackerType.GOAL
    target: float = Field(..., gt=0)
    unit: str = Field(default="", max_length=50)
    start_date: date | None = Field(default=None, description="Defaults to today")
    progress: float = Field(default=0, ge=0)


class TrackerUpdate(BaseModel):
    """Request body for editing a tracker; only provided fields change."""
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    type: TrackerType | None = None
    target: float | None = Field(default=None, gt=0)
    unit: str | None = Field(default=None, max_length=50)
    start_date: date | None = None
    progress: float | None = Field(default=None, ge=0)


class TrackerLogCreate(BaseModel):
    """Request body for logging progress against a tracker."""
    amount: float
    note: str = ""


class TrackerLog(BaseModel):
    """A tracker_logs row as returned to clients."""
    id: str
    date: datetime | str
    amount: float
    note: str = ""

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "TrackerLog":
        return cls(
            id=str(row["id"]),
            date=row.get("date"),
            amount=row.get("amount", 0),
            note=row.get("note") or "",
        )


class Tracker(BaseModel):
    """
    A tracker with its logs, newest log first.

    Field names mirror the trackers table.
    """
    id: str
    title: str
    description: str = ""
    type: TrackerType
    target: float
    unit: str = ""
    start_date: date | str | None = None
    progress: float = 0
    created_at: datetime | str | None = None
    logs: list[TrackerLog] = Field(default_factory=list)

    @classmethod
    def from_db_row(cls, row: dict[str, Any], logs: list[TrackerLog] | None = None) -> "Tracker":
        """Build from a trackers row, defaulting nullable text to ""."""
        return cls(
            id=str(row["id"]),
            title=row["title"],
            description=row.get("description") or "",
            type=row.get("type") or TrackerType.GOAL,
            target=row.get("target") or 0,
            unit=row.get("unit") or "",
            start_date=row.get("start_date"),
            progress=row.get("progress") or 0,
            created_at=row.get("created_at"),
            logs=logs or [],
        )


class TrackerStats(BaseModel):
    """Derived progress figures for one tracker."""
    tracker_id: str
    percent_complete: float = Field(..., ge=0, le=100)
    remaining: float = Field(..., ge=0)
    total_logged: float
    log_count: int
    days_active: int
