"""
db/models/csv_upload.py

Lifecycle record for one processed royalty CSV upload.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, SmallInteger, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class CsvUploadStatus:
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class CsvUpload(Base, TimestampMixin):
    __tablename__ = "csv_uploads"

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
    filename: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    quarter: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    file_size: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Size of the CSV payload in bytes",
    )
    row_count: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    processing_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=CsvUploadStatus.PENDING,
    )
    processing_error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_csv_uploads_artist_id", "artist_id"),
        Index("ix_csv_uploads_processing_status", "processing_status"),
        Index("ix_csv_uploads_created_at", "created_at"),
    )
