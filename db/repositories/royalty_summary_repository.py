"""
db/repositories/royalty_summary_repository.py

Persistence layer for RoyaltySummary records.

The caller controls commit/rollback; this repository never commits on its
own.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select, tuple_
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.royalty_summary import SummaryRecord, UpsertCounts
from db.models.royalty_summary import NATURAL_KEY_CONSTRAINT, RoyaltySummary
from db.models.track import Track
from db.repositories.errors import SummaryUpsertError
from db.repositories.identifiers import to_uuid

# Every column recomputed by a summary run. A rerun replaces these in full.
_COMPUTED_COLUMNS: tuple[str, ...] = (
    "total_streams",
    "total_revenue",
    "total_net",
    "total_gross",
    "avg_per_stream",
    "revenue_per_play",
    "top_territory",
    "top_platform",
    "highest_revenue",
    "platform_distribution",
    "territory_distribution",
    "monthly_breakdown",
    "record_count",
    "updated_at",
)

NaturalKey = tuple[uuid.UUID, uuid.UUID, int, int]


class RoyaltySummaryRepository:
    """
    Upserts summary rows keyed by ``(artist_id, track_id, year, quarter)``.

    Inserting a record whose natural key already exists overwrites every
    computed column rather than raising a duplicate-key error or adding to
    the stored totals.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert_summaries(self, records: Sequence[SummaryRecord]) -> UpsertCounts:
        """
        Upsert one batch in a single statement.

        Records sharing a natural key within the batch are deduplicated,
        last one wins. Keys already present before the statement runs are
        counted as updates, the rest as creations.
        """

        if not records:
            return UpsertCounts(created=0, updated=0)

        payloads = _deduplicate([_to_row(record) for record in records])
        keys = [_natural_key(payload) for payload in payloads]

        try:
            existing = self._existing_keys(keys)
            stmt = insert(RoyaltySummary).values(payloads)
            stmt = stmt.on_conflict_do_update(
                constraint=NATURAL_KEY_CONSTRAINT,
                set_={column: stmt.excluded[column] for column in _COMPUTED_COLUMNS},
            ).returning(RoyaltySummary.id)
            written = len(self._session.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise SummaryUpsertError(str(exc)) from exc

        updated = sum(1 for key in keys if key in existing)
        return UpsertCounts(created=written - updated, updated=updated)

    def list_summaries(
        self,
        *,
        artist_id: str,
        year: int | None = None,
        quarter: int | None = None,
    ) -> list[tuple[RoyaltySummary, str]]:
        """
        Return ``(summary, track_title)`` pairs for one artist, newest period
        first and highest net within a period.

        ``year`` and ``quarter`` narrow the window when given.
        """

        stmt = (
            select(RoyaltySummary, Track.title)
            .join(Track, Track.id == RoyaltySummary.track_id)
            .where(RoyaltySummary.artist_id == to_uuid(artist_id, kind="artist"))
        )
        if year is not None:
            stmt = stmt.where(RoyaltySummary.year == year)
        if quarter is not None:
            stmt = stmt.where(RoyaltySummary.quarter == quarter)

        stmt = stmt.order_by(
            RoyaltySummary.year.desc(),
            RoyaltySummary.quarter.desc(),
            RoyaltySummary.total_net.desc(),
        )
        return [(summary, title) for summary, title in self._session.execute(stmt).all()]

    def _existing_keys(self, keys: Sequence[NaturalKey]) -> set[NaturalKey]:
        stmt = select(
            RoyaltySummary.artist_id,
            RoyaltySummary.track_id,
            RoyaltySummary.year,
            RoyaltySummary.quarter,
        ).where(
            tuple_(
                RoyaltySummary.artist_id,
                RoyaltySummary.track_id,
                RoyaltySummary.year,
                RoyaltySummary.quarter,
            ).in_(list(keys))
        )
        return {tuple(row) for row in self._session.execute(stmt).all()}


def _to_row(record: SummaryRecord) -> dict[str, Any]:
    payload = record.to_payload()
    payload["id"] = uuid.uuid4()
    payload["artist_id"] = to_uuid(record.artist_id, kind="artist")
    payload["track_id"] = to_uuid(record.track_id, kind="track")
    return payload


def _natural_key(payload: dict[str, Any]) -> NaturalKey:
    return (payload["artist_id"], payload["track_id"], payload["year"], payload["quarter"])


def _deduplicate(rows: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Last-write-wins deduplication keyed on the natural key."""
    seen: dict[NaturalKey, dict[str, Any]] = {}
    for row in rows:
        seen[_natural_key(row)] = row
    return list(seen.values())
