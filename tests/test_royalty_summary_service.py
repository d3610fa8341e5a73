"""
tests/test_royalty_summary_service.py

End-to-end tests for RoyaltySummaryService over in-memory stores.

Coverage
--------
- Two-territory scenario and distribution mass
- Decimal exactness through the whole pipeline
- Value-level degradation vs row-level failure
- Fatal preconditions (empty CSV, missing title column, malformed CSV)
- Blank-header usage detection
- Idempotent reruns
- Batch failure reporting
- Cancellation between stages
- Upload lifecycle tracking
- Malformed artist and upload ids
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from app.domain.royalty_summary import ProcessSummaryOptions
from app.parsers.royalty_csv_parser import CSVParseError
from app.services.royalty_summary_service import RoyaltySummaryService
from db.repositories.csv_upload_repository import CsvUploadRepository
from db.repositories.track_repository import TrackRepository
from tests.fakes import (
    ARTIST_ID,
    InMemorySummaryStore,
    InMemoryTrackStore,
    InMemoryUploadStore,
    build_service,
)

TWO_TERRITORIES = (
    "Song Title,Territory,Source,Usage Count,Net\n"
    "Midnight Drive,US,Spotify,1000,100.00\n"
    "Midnight Drive,UK,Spotify,400,50.00\n"
)


def _options(csv_content: str, **overrides) -> ProcessSummaryOptions:
    values = {"artist_id": ARTIST_ID, "year": 2024, "quarter": 1, "csv_content": csv_content}
    values.update(overrides)
    return ProcessSummaryOptions(**values)


def _only_record(summary_store: InMemorySummaryStore):
    [record] = summary_store.rows.values()
    return record


class TestScenarios:
    def test_two_territories_for_one_title(
        self,
        service: RoyaltySummaryService,
        summary_store: InMemorySummaryStore,
        db: MagicMock,
    ) -> None:
        result = service.process_royalty_summary(_options(TWO_TERRITORIES), db)

        assert result.success is True
        assert result.summaries_created == 1
        assert result.summaries_updated == 0
        assert result.records_written == 1
        assert result.total_rows == 2
        assert result.failed_rows == []

        record = _only_record(summary_store)
        assert record.total_net == Decimal("150.00")
        assert record.total_streams == 1400
        assert record.top_territory == "US"
        assert record.highest_revenue == Decimal("100.00")
        assert record.territory_distribution["US"] == pytest.approx(0.6667, abs=1e-4)
        assert record.territory_distribution["UK"] == pytest.approx(0.3333, abs=1e-4)
        assert abs(sum(record.platform_distribution.values()) - 1.0) < 0.001

    def test_decimal_exactness(self, service: RoyaltySummaryService, summary_store: InMemorySummaryStore, db) -> None:
        csv_text = "Song Title,Net\nA,10.10\nA,20.20\nA,0.003\n"

        service.process_royalty_summary(_options(csv_text), db)

        assert _only_record(summary_store).total_net == Decimal("30.303")

    def test_non_numeric_usage_degrades_without_failing_row(
        self,
        service: RoyaltySummaryService,
        summary_store: InMemorySummaryStore,
        db,
    ) -> None:
        csv_text = "Song Title,Usage Count,Net\nA,abc,1.00\nA,5,2.00\n"

        result = service.process_royalty_summary(_options(csv_text), db)

        assert result.success is True
        assert result.failed_rows == []
        record = _only_record(summary_store)
        assert record.total_streams == 5
        assert record.record_count == 2

    def test_empty_title_row_is_excluded_and_reported(
        self,
        service: RoyaltySummaryService,
        summary_store: InMemorySummaryStore,
        db,
    ) -> None:
        csv_text = "Song Title,Net\nA,1.00\n,99.00\n"

        result = service.process_royalty_summary(_options(csv_text), db)

        assert result.success is True
        [failed] = result.failed_rows
        assert "song title" in failed.error_message.lower()
        assert failed.row_index == 3
        assert _only_record(summary_store).total_net == Decimal("1.00")

    def test_blank_header_is_used_as_usage_count(
        self,
        service: RoyaltySummaryService,
        summary_store: InMemorySummaryStore,
        db,
    ) -> None:
        csv_text = "Song Title,Source,,Gross,Net\nA,Spotify,120,2.00,1.50\nA,Spotify,30,1.00,0.50\n"

        service.process_royalty_summary(_options(csv_text), db)

        assert _only_record(summary_store).total_streams == 150

    def test_new_tracks_carry_iswc_and_composer(
        self,
        service: RoyaltySummaryService,
        track_store: InMemoryTrackStore,
        db,
    ) -> None:
        csv_text = "Song Title,ISWC,Composer,Net\nA,T-345.246.800-1,Ann Lee,1.00\n"

        service.process_royalty_summary(_options(csv_text), db)

        [candidate] = track_store.created
        assert candidate.iswc == "T-345.246.800-1"
        assert candidate.composer == "Ann Lee"

    @pytest.mark.parametrize("amount", ["1e1000000", "1e70"])
    def test_exponent_amount_counts_as_zero(
        self,
        service: RoyaltySummaryService,
        summary_store: InMemorySummaryStore,
        db,
        amount: str,
    ) -> None:
        csv_text = f"Song Title,Territory,Source,Usage Count,Net\nA,US,Spotify,1,{amount}\nA,US,Spotify,1,2.50\n"

        result = service.process_royalty_summary(_options(csv_text), db)

        assert result.success is True
        assert result.errors == []
        assert _only_record(summary_store).total_net == Decimal("2.50")


class TestFatalPreconditions:
    @pytest.mark.parametrize("csv_text", ["", "Song Title,Territory,Source,Usage Count,Net\n"])
    def test_no_data_rows(self, service, summary_store: InMemorySummaryStore, db, csv_text: str) -> None:
        result = service.process_royalty_summary(_options(csv_text), db)

        assert result.success is False
        assert result.total_rows == 0
        assert result.errors == ["No data rows found in CSV"]
        assert summary_store.calls == 0

    def test_missing_title_column(self, service, summary_store: InMemorySummaryStore, db) -> None:
        result = service.process_royalty_summary(_options("Territory,Net\nUS,1.00\n"), db)

        assert result.success is False
        assert result.total_rows == 1
        assert result.errors == ["Missing required column: Song Title"]
        assert summary_store.calls == 0

    def test_malformed_csv(self, service, summary_store: InMemorySummaryStore, db, monkeypatch) -> None:
        def _raise(content: str):
            raise CSVParseError("Invalid CSV format: line contains NUL")

        monkeypatch.setattr("app.services.royalty_summary_service.parse_royalty_csv", _raise)

        result = service.process_royalty_summary(_options("whatever"), db)

        assert result.success is False
        assert result.errors == ["Invalid CSV format: line contains NUL"]

    def test_all_rows_failing_is_not_success(self, service, summary_store: InMemorySummaryStore, db) -> None:
        result = service.process_royalty_summary(_options("Song Title,Net\n,1\n , 2\n"), db)

        assert result.success is False
        assert result.errors == []
        assert result.records_written == 0
        assert len(result.failed_rows) == 2


class TestPersistence:
    def test_rerun_replaces_instead_of_doubling(self, service, summary_store: InMemorySummaryStore, db) -> None:
        first = service.process_royalty_summary(_options(TWO_TERRITORIES), db)
        before = _only_record(summary_store)

        second = service.process_royalty_summary(_options(TWO_TERRITORIES), db)
        after = _only_record(summary_store)

        assert first.summaries_created == 1
        assert second.summaries_created == 0
        assert second.summaries_updated == 1
        assert after.total_net == before.total_net == Decimal("150.00")
        assert after.total_streams == before.total_streams
        assert after.territory_distribution == before.territory_distribution

    def test_failed_batch_is_reported(self, track_store: InMemoryTrackStore, db) -> None:
        summary_store = InMemorySummaryStore(fail_on_calls={1})
        service = build_service(track_store=track_store, summary_store=summary_store, batch_size=1)
        csv_text = "Song Title,Net\nA,1\nB,2\n"

        result = service.process_royalty_summary(_options(csv_text), db)

        assert result.success is False
        assert result.failed_batches == 1
        assert result.records_written == 1
        assert result.errors[0].startswith("Batch 1 failed: ")

    def test_track_creation_failure_fails_rows(self, summary_store: InMemorySummaryStore, db) -> None:
        track_store = InMemoryTrackStore(existing={"Known": "track-known"}, fail_create=True)
        service = build_service(track_store=track_store, summary_store=summary_store)

        result = service.process_royalty_summary(_options("Song Title,Net\nKnown,1\nNew,2\n"), db)

        assert result.success is True
        assert result.records_written == 1
        assert [row.error_message for row in result.failed_rows] == ["Track not found: New"]


class TestCancellation:
    def test_cancel_before_mapping(self, service, summary_store: InMemorySummaryStore, db) -> None:
        result = service.process_royalty_summary(_options(TWO_TERRITORIES), db, should_cancel=lambda: True)

        assert result.success is False
        assert result.errors == ["Processing cancelled before column mapping"]
        assert result.total_rows == 2
        assert summary_store.calls == 0

    def test_cancel_before_upsert_keeps_failed_rows(self, service, summary_store: InMemorySummaryStore, db) -> None:
        checks = iter([False, False, False, True])

        result = service.process_royalty_summary(
            _options("Song Title,Net\nA,1\n,2\n"),
            db,
            should_cancel=lambda: next(checks),
        )

        assert result.errors == ["Processing cancelled before summary upsert"]
        assert len(result.failed_rows) == 1
        assert summary_store.calls == 0


class TestUploadTracking:
    def test_successful_run_completes_upload(
        self,
        service: RoyaltySummaryService,
        upload_store: InMemoryUploadStore,
        db,
    ) -> None:
        upload = service.register_upload(db=db, artist_id=ARTIST_ID, filename="q1.csv", year=2024, quarter=1)
        assert upload is not None
        assert upload.processing_status == "pending"

        service.process_royalty_summary(_options(TWO_TERRITORIES, upload_id=str(upload.id)), db)

        assert upload.processing_status == "completed"
        assert upload.row_count == 2
        assert upload.processing_error is None

    def test_failed_run_marks_upload_failed(
        self,
        service: RoyaltySummaryService,
        upload_store: InMemoryUploadStore,
        db,
    ) -> None:
        upload = service.register_upload(db=db, artist_id=ARTIST_ID, filename="q1.csv", year=2024, quarter=1)

        service.process_royalty_summary(_options("Territory\nUS\n", upload_id=str(upload.id)), db)

        assert upload.processing_status == "failed"
        assert upload.processing_error == "Missing required column: Song Title"

    def test_unknown_upload_does_not_break_processing(self, service: RoyaltySummaryService, db) -> None:
        result = service.process_royalty_summary(
            _options(TWO_TERRITORIES, upload_id="00000000-0000-0000-0000-000000000000"),
            db,
        )

        assert result.success is True

    def test_list_uploads_newest_first(self, service: RoyaltySummaryService, db) -> None:
        first = service.register_upload(db=db, artist_id=ARTIST_ID, filename="a.csv", year=2024, quarter=1)
        second = service.register_upload(db=db, artist_id=ARTIST_ID, filename="b.csv", year=2024, quarter=2)
        second.created_at = first.created_at.replace(year=first.created_at.year + 1)

        uploads = service.list_uploads(db=db, artist_id=ARTIST_ID, limit=10)

        assert [upload.filename for upload in uploads] == ["b.csv", "a.csv"]


class TestMalformedIdentifiers:
    def _service(self, **factories) -> RoyaltySummaryService:
        return RoyaltySummaryService(
            batch_size=100,
            distribution_places=6,
            monthly_places=2,
            amount_places=10,
            log_failed_rows=False,
            **factories,
        )

    def test_non_uuid_upload_id_only_skips_tracking(
        self,
        track_store: InMemoryTrackStore,
        summary_store: InMemorySummaryStore,
        db: MagicMock,
    ) -> None:
        service = self._service(
            track_store_factory=lambda session: track_store,
            summary_store_factory=lambda session: summary_store,
            upload_store_factory=CsvUploadRepository,
        )

        result = service.process_royalty_summary(_options(TWO_TERRITORIES, upload_id="upload-42"), db)

        assert result.success is True
        assert result.records_written == 1
        assert db.rollback.call_count == 2

    def test_non_uuid_artist_id_leaves_tracks_unresolved(
        self,
        summary_store: InMemorySummaryStore,
        db: MagicMock,
    ) -> None:
        service = self._service(
            track_store_factory=TrackRepository,
            summary_store_factory=lambda session: summary_store,
        )

        result = service.process_royalty_summary(_options("Song Title,Net\nA,1.00\n", artist_id="artist-7"), db)

        assert result.success is False
        assert result.errors == []
        assert [row.error_message for row in result.failed_rows] == ["Track not found: A"]
        assert summary_store.calls == 0
        db.execute.assert_not_called()
