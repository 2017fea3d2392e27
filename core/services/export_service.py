# =============================================================================
# core/services/export_service.py - CSV Exports
# =============================================================================
# Builds pandas DataFrames from sheet and reserve rows and renders them as
# CSV text for download routes.
# =============================================================================

import io
import logging
from typing import Any

import pandas as pd

from core.models.reserve import STATUS_LABELS

logger = logging.getLogger(__name__)

RESERVE_EXPORT_COLUMNS = [
    "MR Number",
    "Status",
    "Priority",
    "Category",
    "Due Date",
    "Notes",
    "Created",
    "Updated",
]


class ExportService:
    """Service for turning rows into downloadable CSV."""

    @staticmethod
    def sheet_to_dataframe(columns: list[dict[str, Any]], rows: list[dict[str, Any]]) -> pd.DataFrame:
        """
        Lay out sheet rows as a DataFrame.

        Header is the column names in position order; missing cells
        become empty strings.

        Args:
            columns: Column rows, already ordered by position
            rows: Row dicts with a `cells` map of column_id -> value
        """
        ordered = sorted(columns, key=lambda column: column.get("position", 0))
        column_ids = [str(column["id"]) for column in ordered]

        records = []
        for row in rows:
            cells = row.get("cells") or {}
            records.append([
                "" if cells.get(column_id) is None else cells.get(column_id)
                for column_id in column_ids
            ])

        return pd.DataFrame(records, columns=[column.get("name", "") for column in ordered])

    @staticmethod
    def reserve_to_dataframe(items: list[dict[str, Any]]) -> pd.DataFrame:
        """Lay out reserve items with human-readable status labels."""
        records = [
            [
                item.get("mr_number") or "",
                STATUS_LABELS.get(item.get("status") or "none", item.get("status") or ""),
                item.get("priority") or "",
                item.get("category") or "",
                item.get("due_date") or "",
                item.get("notes") or "",
                item.get("created_at") or "",
                item.get("updated_at") or "",
            ]
            for item in items
        ]
        return pd.DataFrame(records, columns=RESERVE_EXPORT_COLUMNS)

    @staticmethod
    def to_csv(df: pd.DataFrame) -> str:
        """Render a DataFrame as CSV text without the index."""
        csv_buffer = io.StringIO()
        df.to_csv(csv_buffer, index=False)
        logger.debug(f"Rendered CSV export: {len(df)} rows x {len(df.columns)} columns")
        return csv_buffer.getvalue()
