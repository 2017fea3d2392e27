# =============================================================================
# app/routers/trackers.py - Tracker Endpoints
# =============================================================================
# Personal habit/goal trackers. Every tracker is visible only to its owner.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user, AuthUser
from core.models.tracker import Tracker, TrackerCreate, TrackerLogCreate, TrackerStats, TrackerUpdate
from core.services.tracker_service import TrackerService

router = APIRouter()

TrackerId = Annotated[UUID, Path(description="Tracker UUID")]


@router.get("")
async def list_trackers(user: AuthUser = Depends(get_current_user)):
    """The current user's trackers, newest first, with their logs."""
    trackers = TrackerService.list_trackers(user.id)
    return {"trackers": trackers, "count": len(trackers)}


@router.post("", response_model=Tracker, status_code=201)
async def create_tracker(
    request: TrackerCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Create a tracker."""
    return TrackerService.create_tracker(user.id, request)


@router.get("/{tracker_id}", response_model=Tracker)
async def get_tracker(
    tracker_id: TrackerId,
    user: AuthUser = Depends(get_current_user),
):
    """Get a tracker with its logs."""
    return TrackerService.get_tracker(tracker_id, user.id)


@router.put("/{tracker_id}", response_model=Tracker)
async def update_tracker(
    tracker_id: TrackerId,
    request: TrackerUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Update a tracker."""
    return TrackerService.update_tracker(tracker_id, user.id, request)


@router.delete("/{tracker_id}")
async def delete_tracker(
    tracker_id: TrackerId,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a tracker."""
    TrackerService.delete_tracker(tracker_id, user.id)
    return {"success": True, "tracker_id": str(tracker_id)}


@router.post("/{tracker_id}/logs", status_code=201)
async def add_tracker_log(
    tracker_id: TrackerId,
    request: TrackerLogCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Log progress; the amount is added to the tracker's progress."""
    return TrackerService.add_log(tracker_id, user.id, request)


@router.get("/{tracker_id}/stats", response_model=TrackerStats)
async def get_tracker_stats(
    tracker_id: TrackerId,
    user: AuthUser = Depends(get_current_user),
):
    """Percent complete, total logged and days active."""
    return TrackerService.get_stats(tracker_id, user.id)
