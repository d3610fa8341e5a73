"""
db/models/artist.py

Artist model: the tenant every track and royalty summary is scoped to.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.track import Track


class Artist(Base, TimestampMixin):
    """
    Represents one recording artist.

    ``name`` is copied onto newly created tracks as their display artist.
    """

    __tablename__ = "artists"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email: Mapped[str | None] = mapped_column(
        String(320),
        nullable=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    tracks: Mapped[list["Track"]] = relationship(
        "Track",
        back_populates="artist",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_artists_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<Artist id={self.id} name={self.name!r}>"
