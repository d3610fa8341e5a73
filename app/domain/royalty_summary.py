"""
app/domain/royalty_summary.py

Domain models used by the royalty summary flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from app.domain.money import ZERO


@dataclass(frozen=True)
class ProcessSummaryOptions:
    """
    Input for one summary run. ``artist_id`` is assumed to be authorized.
    """

    artist_id: str
    year: int
    quarter: int
    csv_content: str
    upload_id: str | None = None


@dataclass(frozen=True)
class FailedRowRecord:
    """
    One CSV row excluded from aggregation.

    ``row_index`` is 1-based and counts the header line, so the first data
    row is 2.
    """

    row_index: int
    original_data: dict[str, str]
    error_message: str
    timestamp: str


@dataclass
class BreakdownEntry:
    """
    Running streams and net revenue for one platform, territory or month.
    """

    streams: int = 0
    revenue: Decimal = ZERO


@dataclass
class TrackAggregation:
    """
    Running totals for one track during one summary run.

    Breakdown dicts keep first-seen insertion order, which is what breaks
    ties when picking the top platform or territory.
    """

    track_id: str
    track_title: str
    total_streams: int = 0
    total_revenue: Decimal = ZERO
    total_gross: Decimal = ZERO
    total_net: Decimal = ZERO
    record_count: int = 0
    platforms: dict[str, BreakdownEntry] = field(default_factory=dict)
    territories: dict[str, BreakdownEntry] = field(default_factory=dict)
    months: dict[str, BreakdownEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class TopItem:
    """
    Winning breakdown label and its accumulated net revenue.
    """

    key: str
    revenue: Decimal


@dataclass(frozen=True)
class TrackMetrics:
    """
    Derived figures for one aggregation, ready to be persisted.
    """

    avg_per_stream: Decimal
    revenue_per_play: Decimal
    top_territory: TopItem | None
    top_platform: TopItem | None
    platform_distribution: dict[str, float]
    territory_distribution: dict[str, float]
    monthly_breakdown: dict[str, float]


@dataclass(frozen=True)
class SummaryRecord:
    """
    One persisted summary row, keyed by (artist_id, track_id, year, quarter).
    """

    artist_id: str
    track_id: str
    year: int
    quarter: int
    total_streams: int
    total_revenue: Decimal
    total_net: Decimal
    total_gross: Decimal
    avg_per_stream: Decimal
    revenue_per_play: Decimal
    top_territory: str | None
    top_platform: str | None
    highest_revenue: Decimal
    platform_distribution: dict[str, float]
    territory_distribution: dict[str, float]
    monthly_breakdown: dict[str, float]
    record_count: int
    updated_at: datetime

    @property
    def natural_key(self) -> tuple[str, str, int, int]:
        return (self.artist_id, self.track_id, self.year, self.quarter)

    def to_payload(self) -> dict[str, Any]:
        return {
            "artist_id": self.artist_id,
            "track_id": self.track_id,
            "year": self.year,
            "quarter": self.quarter,
            "total_streams": self.total_streams,
            "total_revenue": self.total_revenue,
            "total_net": self.total_net,
            "total_gross": self.total_gross,
            "avg_per_stream": self.avg_per_stream,
            "revenue_per_play": self.revenue_per_play,
            "top_territory": self.top_territory,
            "top_platform": self.top_platform,
            "highest_revenue": self.highest_revenue,
            "platform_distribution": dict(self.platform_distribution),
            "territory_distribution": dict(self.territory_distribution),
            "monthly_breakdown": dict(self.monthly_breakdown),
            "record_count": self.record_count,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class UpsertCounts:
    created: int
    updated: int

    @property
    def written(self) -> int:
        return self.created + self.updated


@dataclass(frozen=True)
class UpsertReport:
    """
    Outcome of the batched summary write.
    """

    created: int = 0
    updated: int = 0
    failed_batches: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def records_written(self) -> int:
        return self.created + self.updated


@dataclass(frozen=True)
class SummaryComputationResult:
    """
    End-of-run report returned to the caller.
    """

    success: bool
    summaries_created: int
    summaries_updated: int
    total_rows: int
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0
    failed_rows: list[FailedRowRecord] = field(default_factory=list)
    failed_batches: int = 0

    @property
    def records_written(self) -> int:
        return self.summaries_created + self.summaries_updated
