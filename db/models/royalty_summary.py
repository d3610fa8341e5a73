"""
db/models/royalty_summary.py

Persisted output of the royalty summary engine.
One row per artist per track per reporting quarter.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base

NATURAL_KEY_CONSTRAINT = "uq_royalties_summary_natural_key"


class RoyaltySummary(Base):
    """
    Aggregated royalty metrics for one track in one quarter.

    Distribution columns hold JSONB maps of label to share of ``total_net``,
    e.g.::

        {"Spotify": 0.612345, "Apple Music": 0.387655}

    ``monthly_breakdown`` holds net amounts per month label, e.g.
    ``{"Jan": 120.5, "Feb": 80.25}``.

    The unique constraint on ``(artist_id, track_id, year, quarter)`` drives
    upsert semantics: re-processing a quarter replaces every computed column
    instead of adding to it.
    """

    __tablename__ = "royalties_summary"

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
    track_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tracks.id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    quarter: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    total_streams: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_net: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_gross: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    avg_per_stream: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    revenue_per_play: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    highest_revenue: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    top_territory: Mapped[str | None] = mapped_column(String(255), nullable=True)
    top_platform: Mapped[str | None] = mapped_column(String(255), nullable=True)

    platform_distribution: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        comment="Platform label to share of total_net",
    )
    territory_distribution: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        comment="Territory label to share of total_net",
    )
    monthly_breakdown: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        comment="Month label to net amount",
    )
    record_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint(
            "artist_id",
            "track_id",
            "year",
            "quarter",
            name=NATURAL_KEY_CONSTRAINT,
        ),
        CheckConstraint("quarter BETWEEN 1 AND 4", name="ck_royalties_summary_quarter"),
        Index("ix_royalties_summary_artist_period", "artist_id", "year", "quarter"),
        Index("ix_royalties_summary_track_id", "track_id"),
    )
