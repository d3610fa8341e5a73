"""
tests/test_aggregation_service.py

Pytest unit tests for RoyaltyAggregationService.

Track ids come from a prebuilt TrackResolution; no database is involved.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from app.mappers.royalty_column_mapper import RoyaltyColumnMapper
from app.parsers.royalty_csv_parser import parse_royalty_csv
from app.services.aggregation_service import RoyaltyAggregationService
from app.services.failed_row_collector import FailedRowCollector
from app.services.track_resolution_service import TrackResolution

HEADERS = "Song Title,Date,Territory,Source,Usage Count,Gross,Net\n"


def _aggregate(csv_text: str, title_to_id: dict[str, str]):
    parsed = parse_royalty_csv(csv_text)
    mapping = RoyaltyColumnMapper().build_mapping(parsed.headers)
    collector = FailedRowCollector(log_failures=False, clock=lambda: "2026-01-01T00:00:00+00:00")
    aggregations = RoyaltyAggregationService().aggregate(
        rows=parsed.rows,
        mapping=mapping,
        resolution=TrackResolution(title_to_id=title_to_id),
        collector=collector,
    )
    return aggregations, collector


class TestAccumulation:
    def test_totals_and_breakdowns(self) -> None:
        aggregations, collector = _aggregate(
            HEADERS
            + "Song A,2024-01-10,US,Spotify,100,12.00,10.10\n"
            + "Song A,2024-02-10,UK,Spotify,50,24.00,20.20\n"
            + "Song A,2024-02-11,US,Apple,5,0.004,0.003\n",
            {"Song A": "track-a"},
        )

        assert len(collector) == 0
        agg = aggregations["track-a"]
        assert agg.track_title == "Song A"
        assert agg.total_streams == 155
        assert agg.total_net == Decimal("30.303")
        assert agg.total_gross == Decimal("36.004")
        assert agg.total_revenue == agg.total_gross
        assert agg.record_count == 3

        assert list(agg.platforms) == ["Spotify", "Apple"]
        assert agg.platforms["Spotify"].streams == 150
        assert agg.platforms["Spotify"].revenue == Decimal("30.30")
        assert agg.territories["US"].revenue == Decimal("10.103")
        assert agg.territories["UK"].streams == 50
        assert agg.months["Feb"].revenue == Decimal("20.203")
        assert agg.months["Jan"].streams == 100

    def test_rows_for_different_tracks_are_kept_apart(self) -> None:
        aggregations, _ = _aggregate(
            HEADERS + "Song A,,US,Spotify,1,1,1\nSong B,,US,Spotify,2,2,2\n",
            {"Song A": "track-a", "Song B": "track-b"},
        )

        assert set(aggregations) == {"track-a", "track-b"}
        assert aggregations["track-b"].total_streams == 2

    def test_bad_values_degrade_without_failing_the_row(self) -> None:
        aggregations, collector = _aggregate(
            HEADERS + "Song A,not a date,,,abc,oops,5.00\n",
            {"Song A": "track-a"},
        )

        assert len(collector) == 0
        agg = aggregations["track-a"]
        assert agg.total_streams == 0
        assert agg.total_gross == Decimal("0")
        assert agg.total_net == Decimal("5.00")
        assert list(agg.months) == ["Unknown"]
        assert list(agg.territories) == ["Unknown"]
        assert list(agg.platforms) == ["Unknown"]


class TestFailedRows:
    def test_empty_title_fails_the_row(self) -> None:
        aggregations, collector = _aggregate(
            HEADERS + "Song A,,US,Spotify,1,1,1\n   ,,US,Spotify,1,1,1\n",
            {"Song A": "track-a"},
        )

        assert aggregations["track-a"].record_count == 1
        [failed] = collector.records
        assert failed.row_index == 3
        assert "song title" in failed.error_message.lower()
        assert failed.original_data["Territory"] == "US"

    def test_unresolved_title_fails_with_track_not_found(self) -> None:
        aggregations, collector = _aggregate(
            HEADERS + "Ghost,,US,Spotify,1,1,1\n",
            {},
        )

        assert aggregations == {}
        [failed] = collector.records
        assert failed.row_index == 2
        assert failed.error_message == "Track not found: Ghost"

    @pytest.mark.parametrize("order", [0, 1])
    def test_totals_do_not_depend_on_row_order(self, order: int) -> None:
        lines = ["Song A,,US,Spotify,1,0.1,0.1\n", "Song A,,US,Spotify,1,0.2,0.2\n", "Song A,,US,Spotify,1,0.7,0.7\n"]
        if order:
            lines.reverse()

        aggregations, _ = _aggregate(HEADERS + "".join(lines), {"Song A": "track-a"})

        assert aggregations["track-a"].total_net == Decimal("1.0")
