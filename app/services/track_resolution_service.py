"""
app/services/track_resolution_service.py

Resolves song titles from a royalty export to durable track ids.

Resolution is two-pass: the caller first gathers the distinct titles of the
whole file, then this service reads existing tracks in one query and creates
every missing title in one batch insert. Per-row lookups never hit the
database.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.mappers.royalty_column_mapper import ColumnMapping
from db.repositories.errors import RoyaltySummaryRepositoryError

logger = logging.getLogger(__name__)

DEFAULT_ARTIST_NAME = "Unknown"


@dataclass(frozen=True)
class TrackCandidate:
    """
    One distinct title seen in the file, with the first ISWC and composer
    found alongside it.
    """

    title: str
    iswc: str | None = None
    composer: str | None = None


@dataclass(frozen=True)
class TrackResolution:
    """
    Title to track id lookup for one run.
    """

    title_to_id: dict[str, str] = field(default_factory=dict)
    created: int = 0
    existing: int = 0

    def track_id_for(self, title: str) -> str | None:
        return self.title_to_id.get(title)


class TrackStore(Protocol):
    def get_artist_name(self, artist_id: str) -> str | None:
        ...

    def find_by_titles(self, artist_id: str, titles: Sequence[str]) -> dict[str, str]:
        ...

    def create_tracks(
        self,
        artist_id: str,
        artist_name: str,
        candidates: Sequence[TrackCandidate],
    ) -> dict[str, str]:
        ...


def collect_track_candidates(
    rows: Iterable[Mapping[str, str | None]],
    mapping: ColumnMapping,
) -> list[TrackCandidate]:
    """
    Distinct non-empty titles in first-seen order.
    """

    titles: dict[str, dict[str, str | None]] = {}
    for row in rows:
        title = mapping.value(row, "song_title").strip()
        if not title:
            continue
        details = titles.setdefault(title, {"iswc": None, "composer": None})
        if details["iswc"] is None:
            details["iswc"] = mapping.value(row, "iswc").strip() or None
        if details["composer"] is None:
            details["composer"] = mapping.value(row, "composer").strip() or None

    return [
        TrackCandidate(title=title, iswc=details["iswc"], composer=details["composer"])
        for title, details in titles.items()
    ]


class TrackResolutionService:
    """
    Bulk get-or-create of tracks for one artist.

    Database failures and malformed artist ids never propagate: they are logged, the session is rolled
    back, and the affected titles stay unresolved so their rows are reported
    as failed rows by the aggregation stage.
    """

    def __init__(self, *, default_artist_name: str = DEFAULT_ARTIST_NAME) -> None:
        self._default_artist_name = default_artist_name

    def resolve(
        self,
        *,
        artist_id: str,
        candidates: Sequence[TrackCandidate],
        store: TrackStore,
        db: Session,
    ) -> TrackResolution:
        if not candidates:
            return TrackResolution()

        titles = [candidate.title for candidate in candidates]
        try:
            title_to_id = dict(store.find_by_titles(artist_id, titles))
        except (SQLAlchemyError, RoyaltySummaryRepositoryError) as exc:
            db.rollback()
            logger.error(
                "Track lookup failed artist_id=%s titles=%s: %s",
                artist_id,
                len(titles),
                exc,
            )
            return TrackResolution()

        existing = len(title_to_id)
        missing = [candidate for candidate in candidates if candidate.title not in title_to_id]
        created = 0

        if missing:
            artist_name = self._artist_name(artist_id=artist_id, store=store, db=db)
            try:
                created_ids = store.create_tracks(artist_id, artist_name, missing)
                db.commit()
            except (SQLAlchemyError, RoyaltySummaryRepositoryError) as exc:
                db.rollback()
                logger.error(
                    "Track creation failed artist_id=%s missing=%s: %s",
                    artist_id,
                    len(missing),
                    exc,
                )
            else:
                title_to_id.update(created_ids)
                created = len(created_ids)

        logger.info(
            "Tracks resolved artist_id=%s titles=%s existing=%s created=%s unresolved=%s",
            artist_id,
            len(titles),
            existing,
            created,
            len(titles) - len(title_to_id),
        )
        return TrackResolution(title_to_id=title_to_id, created=created, existing=existing)

    def _artist_name(self, *, artist_id: str, store: TrackStore, db: Session) -> str:
        try:
            name = store.get_artist_name(artist_id)
        except (SQLAlchemyError, RoyaltySummaryRepositoryError) as exc:
            db.rollback()
            logger.warning("Artist name lookup failed artist_id=%s: %s", artist_id, exc)
            return self._default_artist_name
        return name or self._default_artist_name
