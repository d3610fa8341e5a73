"""
app/domain package marker.
"""

from app.domain.royalty_summary import (
    BreakdownEntry,
    FailedRowRecord,
    ProcessSummaryOptions,
    SummaryComputationResult,
    SummaryRecord,
    TopItem,
    TrackAggregation,
    TrackMetrics,
    UpsertCounts,
    UpsertReport,
)

__all__ = [
    "BreakdownEntry",
    "FailedRowRecord",
    "ProcessSummaryOptions",
    "SummaryComputationResult",
    "SummaryRecord",
    "TopItem",
    "TrackAggregation",
    "TrackMetrics",
    "UpsertCounts",
    "UpsertReport",
]
