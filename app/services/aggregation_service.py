"""
app/services/aggregation_service.py

Folds royalty rows into one TrackAggregation per resolved track.

Accumulation rules
------------------
    total_streams   += usage_count
    total_revenue   += gross
    total_gross     += gross
    total_net       += net
    record_count    += 1

Platform, territory and month breakdowns accumulate ``usage_count`` as
streams and ``net`` as revenue.

Every monetary sum runs through ``app.domain.money.add`` so totals are exact
and independent of row order. No database access happens here; track ids
come from a TrackResolution computed beforehand.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal

from app.domain.money import add
from app.domain.royalty_summary import BreakdownEntry, TrackAggregation
from app.failure_codes import MISSING_SONG_TITLE, TRACK_NOT_FOUND
from app.mappers.royalty_column_mapper import ColumnMapping
from app.services.failed_row_collector import FailedRowCollector
from app.services.track_resolution_service import TrackResolution
from app.validators.royalty_row_validator import ParsedRoyaltyRow, RoyaltyRowValidator

logger = logging.getLogger(__name__)

# Header line plus 1-based numbering.
FIRST_DATA_ROW_INDEX = 2


class RoyaltyAggregationService:
    """
    Single pass over the parsed rows, in input order.
    """

    def __init__(self, *, row_validator: RoyaltyRowValidator | None = None) -> None:
        self._row_validator = row_validator or RoyaltyRowValidator()

    def aggregate(
        self,
        *,
        rows: Sequence[Mapping[str, str | None]],
        mapping: ColumnMapping,
        resolution: TrackResolution,
        collector: FailedRowCollector,
    ) -> dict[str, TrackAggregation]:
        aggregations: dict[str, TrackAggregation] = {}

        for offset, raw_row in enumerate(rows):
            row_index = offset + FIRST_DATA_ROW_INDEX
            title = self._row_validator.song_title(raw_row, mapping)

            if not title:
                collector.record(row_index=row_index, raw_row=raw_row, message=MISSING_SONG_TITLE)
                continue

            track_id = resolution.track_id_for(title)
            if track_id is None:
                collector.record(
                    row_index=row_index,
                    raw_row=raw_row,
                    message=TRACK_NOT_FOUND.format(title=title),
                )
                continue

            parsed = self._row_validator.parse_row(raw_row, mapping)
            aggregation = aggregations.get(track_id)
            if aggregation is None:
                aggregation = TrackAggregation(track_id=track_id, track_title=title)
                aggregations[track_id] = aggregation
            self._accumulate(aggregation, parsed)

        logger.info(
            "Royalty rows aggregated rows=%s tracks=%s failed=%s",
            len(rows),
            len(aggregations),
            len(collector),
        )
        return aggregations

    def _accumulate(self, aggregation: TrackAggregation, row: ParsedRoyaltyRow) -> None:
        aggregation.total_streams += row.usage_count
        aggregation.total_revenue = add(aggregation.total_revenue, row.gross)
        aggregation.total_gross = add(aggregation.total_gross, row.gross)
        aggregation.total_net = add(aggregation.total_net, row.net)
        aggregation.record_count += 1

        _add_to_breakdown(aggregation.platforms, row.source, row.usage_count, row.net)
        _add_to_breakdown(aggregation.territories, row.territory, row.usage_count, row.net)
        _add_to_breakdown(aggregation.months, row.month, row.usage_count, row.net)


def _add_to_breakdown(
    breakdown: dict[str, BreakdownEntry],
    label: str,
    streams: int,
    revenue: Decimal,
) -> None:
    entry = breakdown.get(label)
    if entry is None:
        entry = BreakdownEntry()
        breakdown[label] = entry
    entry.streams += streams
    entry.revenue = add(entry.revenue, revenue)
