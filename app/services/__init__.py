"""
app/services package marker.
"""

from app.services.aggregation_service import RoyaltyAggregationService
from app.services.distribution_service import DistributionCalculator
from app.services.failed_row_collector import FailedRowCollector, render_failed_rows_csv
from app.services.royalty_summary_service import (
    RoyaltySummaryService,
    get_royalty_summary_service,
)
from app.services.summary_writer_service import SummaryUpsertWriter
from app.services.track_resolution_service import (
    TrackCandidate,
    TrackResolution,
    TrackResolutionService,
    collect_track_candidates,
)

__all__ = [
    "DistributionCalculator",
    "FailedRowCollector",
    "RoyaltyAggregationService",
    "RoyaltySummaryService",
    "SummaryUpsertWriter",
    "TrackCandidate",
    "TrackResolution",
    "TrackResolutionService",
    "collect_track_candidates",
    "get_royalty_summary_service",
    "render_failed_rows_csv",
]
