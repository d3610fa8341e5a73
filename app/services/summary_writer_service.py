"""
app/services/summary_writer_service.py

Builds SummaryRecord rows from aggregations and writes them in batches.

Each batch is one upsert statement followed by a commit, so a failing batch
never undoes the batches written before it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.money import ZERO, quantize
from app.domain.royalty_summary import SummaryRecord, TrackAggregation, UpsertCounts, UpsertReport
from app.failure_codes import batch_failed
from app.services.distribution_service import DistributionCalculator
from db.repositories.errors import RoyaltySummaryRepositoryError

logger = logging.getLogger(__name__)


class SummaryStore(Protocol):
    def upsert_summaries(self, records: Sequence[SummaryRecord]) -> UpsertCounts:
        ...


class SummaryUpsertWriter:
    """
    Converts aggregations into records and persists them idempotently.
    """

    def __init__(
        self,
        *,
        batch_size: int = 100,
        calculator: DistributionCalculator | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.batch_size = batch_size
        self._calculator = calculator or DistributionCalculator()

    def build_records(
        self,
        *,
        aggregations: Mapping[str, TrackAggregation],
        artist_id: str,
        year: int,
        quarter: int,
        updated_at: datetime | None = None,
    ) -> tuple[list[SummaryRecord], list[str]]:
        """
        One record per aggregation. A record that cannot be computed is
        reported as an error string and left out.
        """

        stamp = updated_at or datetime.now(timezone.utc)
        places = self._calculator.amount_places
        records: list[SummaryRecord] = []
        errors: list[str] = []

        for track_id, aggregation in aggregations.items():
            try:
                metrics = self._calculator.compute(aggregation)
                highest = metrics.top_territory.revenue if metrics.top_territory else ZERO
                records.append(
                    SummaryRecord(
                        artist_id=artist_id,
                        track_id=track_id,
                        year=year,
                        quarter=quarter,
                        total_streams=aggregation.total_streams,
                        total_revenue=quantize(aggregation.total_revenue, places),
                        total_net=quantize(aggregation.total_net, places),
                        total_gross=quantize(aggregation.total_gross, places),
                        avg_per_stream=metrics.avg_per_stream,
                        revenue_per_play=metrics.revenue_per_play,
                        top_territory=metrics.top_territory.key if metrics.top_territory else None,
                        top_platform=metrics.top_platform.key if metrics.top_platform else None,
                        highest_revenue=quantize(highest, places),
                        platform_distribution=metrics.platform_distribution,
                        territory_distribution=metrics.territory_distribution,
                        monthly_breakdown=metrics.monthly_breakdown,
                        record_count=aggregation.record_count,
                        updated_at=stamp,
                    )
                )
            except (ArithmeticError, ValueError) as exc:
                logger.warning(
                    "Summary record skipped track_id=%s title=%s: %s",
                    track_id,
                    aggregation.track_title,
                    exc,
                )
                errors.append(f"Error preparing track {aggregation.track_title}: {exc}")

        return records, errors

    def write(
        self,
        *,
        records: Sequence[SummaryRecord],
        store: SummaryStore,
        db: Session,
    ) -> UpsertReport:
        created = 0
        updated = 0
        failed_batches = 0
        errors: list[str] = []

        for start in range(0, len(records), self.batch_size):
            batch_number = start // self.batch_size + 1
            batch = records[start : start + self.batch_size]
            try:
                counts = store.upsert_summaries(batch)
                db.commit()
            except (SQLAlchemyError, RoyaltySummaryRepositoryError) as exc:
                db.rollback()
                failed_batches += 1
                errors.append(batch_failed(batch_number, str(exc)))
                logger.error(
                    "Summary batch failed batch=%s size=%s: %s",
                    batch_number,
                    len(batch),
                    exc,
                )
                continue

            created += counts.created
            updated += counts.updated
            logger.debug(
                "Summary batch written batch=%s created=%s updated=%s",
                batch_number,
                counts.created,
                counts.updated,
            )

        logger.info(
            "Summary upsert finished records=%s created=%s updated=%s failed_batches=%s",
            len(records),
            created,
            updated,
            failed_batches,
        )
        return UpsertReport(
            created=created,
            updated=updated,
            failed_batches=failed_batches,
            errors=errors,
        )
