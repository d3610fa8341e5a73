"""
db/repositories/track_repository.py

Persistence layer for Track lookup and bulk creation.

The caller controls commit/rollback; this repository never commits.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models.artist import Artist
from db.models.track import DEFAULT_SPLIT, TITLE_CONSTRAINT, Track
from db.repositories.errors import TrackCreationError
from db.repositories.identifiers import to_uuid

if TYPE_CHECKING:
    from app.services.track_resolution_service import TrackCandidate


class TrackRepository:
    """
    Title-keyed track access scoped to one artist.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_artist_name(self, artist_id: str) -> str | None:
        stmt = select(Artist.name).where(Artist.id == to_uuid(artist_id, kind="artist"))
        return self._session.scalar(stmt)

    def find_by_titles(self, artist_id: str, titles: Sequence[str]) -> dict[str, str]:
        """
        Return ``{title: track_id}`` for titles that already exist.
        """

        if not titles:
            return {}

        stmt = select(Track.id, Track.title).where(
            Track.artist_id == to_uuid(artist_id, kind="artist"),
            Track.title.in_(list(titles)),
        )
        return {title: str(track_id) for track_id, title in self._session.execute(stmt).all()}

    def create_tracks(
        self,
        artist_id: str,
        artist_name: str,
        candidates: Sequence[TrackCandidate],
    ) -> dict[str, str]:
        """
        Insert missing tracks in one statement and return ``{title: track_id}``.

        A title inserted concurrently by another run hits the unique
        constraint, is skipped, and is read back afterwards. Insert failures are
        raised as TrackCreationError.
        """

        if not candidates:
            return {}

        artist_uuid = to_uuid(artist_id, kind="artist")
        payloads: list[dict[str, Any]] = [
            {
                "id": uuid.uuid4(),
                "artist_id": artist_uuid,
                "title": candidate.title,
                "song_title": candidate.title,
                "artist_name": artist_name,
                "split": DEFAULT_SPLIT,
                "iswc": candidate.iswc,
                "composers": candidate.composer,
            }
            for candidate in candidates
        ]
        stmt = (
            insert(Track)
            .values(payloads)
            .on_conflict_do_nothing(constraint=TITLE_CONSTRAINT)
            .returning(Track.id, Track.title)
        )
        try:
            created = {
                title: str(track_id) for track_id, title in self._session.execute(stmt).all()
            }
        except SQLAlchemyError as exc:
            raise TrackCreationError(f"Failed to create {len(payloads)} tracks: {exc}") from exc

        skipped = [candidate.title for candidate in candidates if candidate.title not in created]
        if skipped:
            created.update(self.find_by_titles(artist_id, skipped))
        return created
