"""
db/models/track.py

Canonical track entity that royalty rows are resolved against.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.artist import Artist

TITLE_CONSTRAINT = "uq_tracks_artist_title"
DEFAULT_SPLIT = Decimal("100")


class Track(Base, TimestampMixin):
    """
    One composition/recording owned by an artist.

    Titles are unique per artist: the summary engine resolves CSV rows to
    tracks by exact title, and creates any title it has not seen before.
    """

    __tablename__ = "tracks"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    artist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("artists.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    song_title: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    artist_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Display artist name at creation time",
    )
    split: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=DEFAULT_SPLIT,
        comment="Artist share of the track in percent",
    )
    iswc: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
    )
    composers: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    artist: Mapped["Artist"] = relationship("Artist", back_populates="tracks")

    __table_args__ = (
        UniqueConstraint("artist_id", "title", name=TITLE_CONSTRAINT),
        Index("ix_tracks_artist_id", "artist_id"),
    )

    def __repr__(self) -> str:
        return f"<Track id={self.id} title={self.title!r}>"
