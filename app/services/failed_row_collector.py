"""
app/services/failed_row_collector.py

Collects rows excluded from aggregation and renders the failed-rows export.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timezone

from app.domain.royalty_summary import FailedRowRecord

logger = logging.getLogger(__name__)

EXPORT_LEADING_COLUMNS: tuple[str, ...] = ("Row Index", "Error Message", "Timestamp")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class FailedRowCollector:
    """
    Accumulates FailedRowRecord entries for one run.

    Rows are never retried; the caller receives the list and can export it.
    """

    def __init__(
        self,
        *,
        log_failures: bool = True,
        clock: Callable[[], str] | None = None,
    ) -> None:
        self._log_failures = log_failures
        self._clock = clock or _utc_timestamp
        self._records: list[FailedRowRecord] = []

    def record(
        self,
        *,
        row_index: int,
        raw_row: Mapping[str, str | None],
        message: str,
    ) -> FailedRowRecord:
        failed = FailedRowRecord(
            row_index=row_index,
            original_data={key: "" if value is None else str(value) for key, value in raw_row.items()},
            error_message=message,
            timestamp=self._clock(),
        )
        if self._log_failures:
            logger.warning(
                "Royalty row excluded row=%s message=%s",
                row_index,
                message,
            )
        self._records.append(failed)
        return failed

    @property
    def records(self) -> list[FailedRowRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)


def render_failed_rows_csv(failed_rows: Sequence[FailedRowRecord]) -> str:
    """
    Render the failed-rows export.

    Columns are ``Row Index, Error Message, Timestamp`` followed by the
    original columns in first-seen order across all records. Every cell is
    double-quoted, lines are joined by ``\\n`` with no trailing newline, and
    the output depends only on the given records. No records -> "".
    """

    if not failed_rows:
        return ""

    original_columns = _ordered_columns(row.original_data for row in failed_rows)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([*EXPORT_LEADING_COLUMNS, *original_columns])
    for row in failed_rows:
        writer.writerow(
            [
                str(row.row_index),
                row.error_message,
                row.timestamp,
                *(row.original_data.get(column, "") for column in original_columns),
            ]
        )

    return buffer.getvalue()[: -len("\n")]


def _ordered_columns(rows: Iterable[Mapping[str, str]]) -> list[str]:
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)
