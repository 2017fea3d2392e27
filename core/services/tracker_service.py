# =============================================================================
# core/services/tracker_service.py - Tracker Business Logic
# =============================================================================
# Trackers are private to their owner. Logging progress is two writes:
# insert the tracker_logs row, then bump trackers.progress.
# =============================================================================

import logging
from datetime import date, datetime, timezone
from typing import Any
from uuid import UUID

from app.exceptions import NotFoundError, ValidationFailedError, translate_database_error
from core.models.tracker import Tracker, TrackerCreate, TrackerLog, TrackerLogCreate, TrackerUpdate
from core.services.common import execute, first_row, rows_of
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_timestamp, utc_now_iso

logger = logging.getLogger(__name__)


class TrackerService:
    """Service for trackers and their log entries."""

    @staticmethod
    def list_trackers(user_id: str | UUID) -> list[Tracker]:
        """
        List a user's trackers newest first, each with its logs.

        Logs are fetched in one query and grouped by tracker. If that
        query fails the trackers are still returned, with empty logs.
        """
        client = SupabaseClient.get_client()
        rows = rows_of(execute(
            client.table("trackers")
            .select("*")
            .eq("owner_id", normalize_uuid(user_id))
            .order("created_at", desc=True),
            "fetch trackers",
            table="trackers",
        ))
        if not rows:
            return []

        logs_by_tracker: dict[str, list[TrackerLog]] = {}
        try:
            logs = (
                client.table("tracker_logs")
                .select("*")
                .in_("tracker_id", [str(row["id"]) for row in rows])
                .order("date", desc=True)
                .execute()
            ).data or []
            for log in logs:
                logs_by_tracker.setdefault(str(log["tracker_id"]), []).append(TrackerLog.from_db_row(log))
        except Exception as e:
            logger.warning(f"Failed to fetch tracker logs, returning trackers without logs: {e}")

        return [Tracker.from_db_row(row, logs_by_tracker.get(str(row["id"]))) for row in rows]

    @staticmethod
    def get_tracker(tracker_id: str | UUID, user_id: str | UUID) -> Tracker:
        """Get one tracker with its logs (owner only)."""
        row = TrackerService._require_owned(tracker_id, user_id)
        return Tracker.from_db_row(row, TrackerService._fetch_logs(row["id"]))

    @staticmethod
    def create_tracker(user_id: str | UUID, request: TrackerCreate) -> Tracker:
        """Create a tracker; start_date defaults to today."""
        title = request.title.strip()
        if not title:
            raise ValidationFailedError("Tracker title is required")

        client = SupabaseClient.get_client()
        data = request.model_dump(mode="json")
        data["title"] = title
        data["start_date"] = data.get("start_date") or date.today().isoformat()
        data["owner_id"] = normalize_uuid(user_id)

        row = first_row(execute(
            client.table("trackers").insert(data),
            "create tracker",
            resource="tracker",
            table="trackers",
        ), "create tracker")

        logger.info(f"Created tracker: {row['id']} for user: {data['owner_id']}")
        return Tracker.from_db_row(row)

    @staticmethod
    def update_tracker(tracker_id: str | UUID, user_id: str | UUID, request: TrackerUpdate) -> Tracker:
        """Update the provided fields of a tracker (owner only)."""
        row = TrackerService._require_owned(tracker_id, user_id)

        update_data = request.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if update_data:
            client = SupabaseClient.get_client()
            row = first_row(execute(
                client.table("trackers").update(update_data).eq("id", row["id"]),
                "update tracker",
                resource="tracker",
                table="trackers",
            ), "update tracker")
            logger.info(f"Updated tracker: {row['id']}")

        return Tracker.from_db_row(row, TrackerService._fetch_logs(row["id"]))

    @staticmethod
    def delete_tracker(tracker_id: str | UUID, user_id: str | UUID) -> None:
        """Delete a tracker (owner only)."""
        row = TrackerService._require_owned(tracker_id, user_id)
        client = SupabaseClient.get_client()
        execute(
            client.table("trackers").delete().eq("id", row["id"]),
            "delete tracker",
            resource="tracker",
            table="trackers",
        )
        logger.info(f"Deleted tracker: {row['id']}")

    @staticmethod
    def add_log(tracker_id: str | UUID, user_id: str | UUID, request: TrackerLogCreate) -> dict[str, Any]:
        """
        Log progress against a tracker.

        Inserts the log dated now, then sets progress = progress + amount.

        Returns:
            {"log": TrackerLog, "progress": new progress}
        """
        row = TrackerService._require_owned(tracker_id, user_id)
        client = SupabaseClient.get_client()

        log = first_row(execute(
            client.table("tracker_logs").insert({
                "tracker_id": row["id"],
                "date": utc_now_iso(),
                "amount": request.amount,
                "note": request.note,
            }),
            "add tracker log",
            resource="tracker log",
            table="tracker_logs",
        ), "add tracker log")

        progress = (row.get("progress") or 0) + request.amount
        execute(
            client.table("trackers").update({"progress": progress}).eq("id", row["id"]),
            "update tracker progress",
            resource="tracker",
            table="trackers",
        )

        logger.info(f"Logged {request.amount} on tracker {row['id']} (progress {progress})")
        return {"log": TrackerLog.from_db_row(log), "progress": progress}

    @staticmethod
    def get_stats(tracker_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Progress figures for a tracker.

        percent_complete is capped at 100; days_active counts days since
        start_date (0 when it's today or in the future).
        """
        tracker = TrackerService.get_tracker(tracker_id, user_id)

        percent = min(100.0, (tracker.progress / tracker.target) * 100) if tracker.target else 0.0
        start = tracker.start_date
        if isinstance(start, str):
            start = date.fromisoformat(start[:10])
        elif isinstance(start, datetime):
            start = start.date()
        if start is None:
            created = parse_timestamp(tracker.created_at)
            start = created.date() if created else datetime.now(timezone.utc).date()
        days_active = max(0, (date.today() - start).days)

        return {
            "tracker_id": tracker.id,
            "percent_complete": round(max(0.0, percent), 2),
            "remaining": max(0.0, tracker.target - tracker.progress),
            "total_logged": sum(log.amount for log in tracker.logs),
            "log_count": len(tracker.logs),
            "days_active": days_active,
        }

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_owned(tracker_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        try:
            row = SupabaseClient.fetch_one("trackers", {"id": normalize_uuid(tracker_id)})
        except Exception as e:
            raise translate_database_error(e, "fetch tracker", resource="tracker", table="trackers") from e

        # Don't reveal that the tracker exists
        if not row or str(row.get("owner_id")) != str(user_id):
            raise NotFoundError("tracker", str(tracker_id))
        return row

    @staticmethod
    def _fetch_logs(tracker_id: str) -> list[TrackerLog]:
        client = SupabaseClient.get_client()
        logs = rows_of(execute(
            client.table("tracker_logs")
            .select("*")
            .eq("tracker_id", tracker_id)
            .order("date", desc=True),
            "fetch tracker logs",
            table="tracker_logs",
        ))
        return [TrackerLog.from_db_row(log) for log in logs]
