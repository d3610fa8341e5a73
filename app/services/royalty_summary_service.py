"""
app/services/royalty_summary_service.py

Service layer for royalty summary orchestration.

Stage order for one run:

    1. parse        raw CSV text to headers and rows
    2. map          canonical fields to source headers (abort without a title column)
    3. resolve      distinct titles to track ids, creating missing tracks
    4. aggregate    rows into one TrackAggregation per track
    5. build        derived metrics and SummaryRecord rows
    6. upsert       batched writes keyed by (artist, track, year, quarter)

Fatal preconditions end the run with ``success=False`` and a single error.
Row-level problems are reported in ``failed_rows`` and never stop the run.
When the options carry an ``upload_id`` the CsvUpload record follows the run
through processing to completed or failed.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_royalty_summary_settings
from app.domain.royalty_summary import (
    FailedRowRecord,
    ProcessSummaryOptions,
    SummaryComputationResult,
)
from app.failure_codes import MISSING_SONG_TITLE_COLUMN, NO_DATA_ROWS, cancelled_before
from app.mappers.royalty_column_mapper import RoyaltyColumnMapper
from app.parsers.royalty_csv_parser import CSVParseError, parse_royalty_csv
from app.services.aggregation_service import RoyaltyAggregationService
from app.services.distribution_service import DistributionCalculator
from app.services.failed_row_collector import FailedRowCollector
from app.services.summary_writer_service import SummaryUpsertWriter
from app.services.track_resolution_service import (
    TrackResolutionService,
    collect_track_candidates,
)
from app.validators.mapping_validator import SchemaMappingError
from db.models.csv_upload import CsvUpload
from db.repositories.csv_upload_repository import CsvUploadRepository
from db.repositories.errors import RoyaltySummaryRepositoryError
from db.repositories.royalty_summary_repository import RoyaltySummaryRepository
from db.repositories.track_repository import TrackRepository

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]


class _RunCancelled(Exception):
    def __init__(self, stage: str) -> None:
        super().__init__(cancelled_before(stage))
        self.stage = stage


class RoyaltySummaryService:
    """
    Coordinates parsing, mapping, track resolution, aggregation and upsert.

    Store factories take the request Session and return the repository used
    for that run; tests swap them for in-memory fakes.
    """

    def __init__(
        self,
        *,
        batch_size: int,
        distribution_places: int,
        monthly_places: int,
        amount_places: int,
        log_failed_rows: bool,
        mapper: RoyaltyColumnMapper | None = None,
        track_resolver: TrackResolutionService | None = None,
        aggregator: RoyaltyAggregationService | None = None,
        track_store_factory: Callable[[Session], Any] = TrackRepository,
        summary_store_factory: Callable[[Session], Any] = RoyaltySummaryRepository,
        upload_store_factory: Callable[[Session], Any] = CsvUploadRepository,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._log_failed_rows = log_failed_rows
        self._mapper = mapper or RoyaltyColumnMapper()
        self._track_resolver = track_resolver or TrackResolutionService()
        self._aggregator = aggregator or RoyaltyAggregationService()
        self._writer = SummaryUpsertWriter(
            batch_size=batch_size,
            calculator=DistributionCalculator(
                distribution_places=distribution_places,
                monthly_places=monthly_places,
                amount_places=amount_places,
            ),
        )
        self._track_store_factory = track_store_factory
        self._summary_store_factory = summary_store_factory
        self._upload_store_factory = upload_store_factory
        self._clock = clock

    # ------------------------------------------------------------------
    # Upload history
    # ------------------------------------------------------------------

    def register_upload(
        self,
        *,
        db: Session,
        artist_id: str,
        filename: str,
        year: int,
        quarter: int,
        file_size: int | None = None,
    ) -> CsvUpload | None:
        """
        Create the pending CsvUpload record for a run.

        Processing continues without a record when it cannot be created.
        """

        store = self._upload_store_factory(db)
        try:
            upload = store.create_upload(
                artist_id=artist_id,
                filename=filename,
                year=year,
                quarter=quarter,
                file_size=file_size,
            )
            db.commit()
        except (SQLAlchemyError, RoyaltySummaryRepositoryError) as exc:
            db.rollback()
            logger.error(
                "CSV upload record creation failed artist_id=%s filename=%s: %s",
                artist_id,
                filename,
                exc,
            )
            return None
        return upload

    def list_uploads(
        self,
        *,
        db: Session,
        artist_id: str | None = None,
        status: str | None = None,
        limit: int = 20,
    ) -> list[CsvUpload]:
        store = self._upload_store_factory(db)
        return store.list_uploads(artist_id=artist_id, status=status, limit=limit)

    def list_summaries(
        self,
        *,
        db: Session,
        artist_id: str,
        year: int | None = None,
        quarter: int | None = None,
    ) -> list[tuple[Any, str]]:
        store = self._summary_store_factory(db)
        return store.list_summaries(artist_id=artist_id, year=year, quarter=quarter)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_royalty_summary(
        self,
        options: ProcessSummaryOptions,
        db: Session,
        *,
        should_cancel: CancelCheck | None = None,
    ) -> SummaryComputationResult:
        started = self._clock()
        run_id = uuid.uuid4().hex[:12]
        logger.info(
            "Royalty summary started run_id=%s artist_id=%s period=%sQ%s upload_id=%s",
            run_id,
            options.artist_id,
            options.year,
            options.quarter,
            options.upload_id,
        )

        if options.upload_id:
            self._update_upload(db, options.upload_id, "mark_processing")

        result = self._run(options, db, should_cancel=should_cancel, started=started)

        if options.upload_id:
            if result.success:
                self._update_upload(
                    db,
                    options.upload_id,
                    "mark_completed",
                    row_count=result.total_rows,
                )
            else:
                self._update_upload(
                    db,
                    options.upload_id,
                    "mark_failed",
                    error_message="; ".join(result.errors) or None,
                    row_count=result.total_rows,
                )

        logger.info(
            "Royalty summary finished run_id=%s success=%s created=%s updated=%s "
            "rows=%s failed_rows=%s failed_batches=%s duration_ms=%s",
            run_id,
            result.success,
            result.summaries_created,
            result.summaries_updated,
            result.total_rows,
            len(result.failed_rows),
            result.failed_batches,
            result.duration_ms,
        )
        return result

    def _run(
        self,
        options: ProcessSummaryOptions,
        db: Session,
        *,
        should_cancel: CancelCheck | None,
        started: float,
    ) -> SummaryComputationResult:
        try:
            parsed = parse_royalty_csv(options.csv_content)
        except CSVParseError as exc:
            return self._fatal(str(exc), total_rows=0, started=started)

        total_rows = parsed.total_rows
        if total_rows == 0:
            return self._fatal(NO_DATA_ROWS, total_rows=0, started=started)

        collector = FailedRowCollector(log_failures=self._log_failed_rows)
        try:
            self._checkpoint(should_cancel, "column mapping")
            try:
                mapping = self._mapper.build_mapping(parsed.headers)
            except SchemaMappingError as exc:
                logger.warning("Royalty CSV mapping rejected: %s", exc.to_dict())
                message = (
                    MISSING_SONG_TITLE_COLUMN if "song_title" in exc.missing_fields else str(exc)
                )
                return self._fatal(message, total_rows=total_rows, started=started)

            self._checkpoint(should_cancel, "track resolution")
            resolution = self._track_resolver.resolve(
                artist_id=options.artist_id,
                candidates=collect_track_candidates(parsed.rows, mapping),
                store=self._track_store_factory(db),
                db=db,
            )

            self._checkpoint(should_cancel, "aggregation")
            aggregations = self._aggregator.aggregate(
                rows=parsed.rows,
                mapping=mapping,
                resolution=resolution,
                collector=collector,
            )

            records, build_errors = self._writer.build_records(
                aggregations=aggregations,
                artist_id=options.artist_id,
                year=options.year,
                quarter=options.quarter,
            )

            self._checkpoint(should_cancel, "summary upsert")
            report = self._writer.write(
                records=records,
                store=self._summary_store_factory(db),
                db=db,
            )
        except _RunCancelled as cancelled:
            logger.warning("Royalty summary cancelled stage=%s", cancelled.stage)
            return self._fatal(
                str(cancelled),
                total_rows=total_rows,
                started=started,
                failed_rows=collector.records,
            )

        errors = [*build_errors, *report.errors]
        return SummaryComputationResult(
            success=report.failed_batches == 0 and report.records_written > 0,
            summaries_created=report.created,
            summaries_updated=report.updated,
            total_rows=total_rows,
            errors=errors,
            duration_ms=self._elapsed_ms(started),
            failed_rows=collector.records,
            failed_batches=report.failed_batches,
        )

    @staticmethod
    def _checkpoint(should_cancel: CancelCheck | None, stage: str) -> None:
        if should_cancel is not None and should_cancel():
            raise _RunCancelled(stage)

    def _fatal(
        self,
        message: str,
        *,
        total_rows: int,
        started: float,
        failed_rows: list[FailedRowRecord] | None = None,
    ) -> SummaryComputationResult:
        logger.warning("Royalty summary aborted: %s", message)
        return SummaryComputationResult(
            success=False,
            summaries_created=0,
            summaries_updated=0,
            total_rows=total_rows,
            errors=[message],
            duration_ms=self._elapsed_ms(started),
            failed_rows=failed_rows or [],
        )

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int((self._clock() - started) * 1000))

    def _update_upload(self, db: Session, upload_id: str, action: str, **fields: Any) -> None:
        store = self._upload_store_factory(db)
        try:
            getattr(store, action)(upload_id=upload_id, **fields)
            db.commit()
        except (SQLAlchemyError, RoyaltySummaryRepositoryError) as exc:
            db.rollback()
            logger.warning(
                "CSV upload status update failed upload_id=%s action=%s: %s",
                upload_id,
                action,
                exc,
            )


@lru_cache(maxsize=1)
def get_royalty_summary_service() -> RoyaltySummaryService:
    """
    Build and cache the summary service with env-driven settings.
    """
    settings = get_royalty_summary_settings()
    return RoyaltySummaryService(
        batch_size=settings.batch_size,
        distribution_places=settings.distribution_places,
        monthly_places=settings.monthly_places,
        amount_places=settings.amount_places,
        log_failed_rows=settings.log_failed_rows,
    )
