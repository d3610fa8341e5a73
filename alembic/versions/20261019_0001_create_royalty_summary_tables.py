"""create artists, tracks, royalties_summary and csv_uploads tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _money(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(precision=24, scale=10),
        nullable=False,
        server_default=sa.text("0"),
    )


def upgrade() -> None:
    op.create_table(
        "artists",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_artists_email", "artists", ["email"], unique=False)

    op.create_table(
        "tracks",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("artist_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("song_title", sa.Text(), nullable=True),
        sa.Column("artist_name", sa.String(length=255), nullable=True,
                  comment="Display artist name at creation time"),
        sa.Column("split", sa.Numeric(precision=5, scale=2), nullable=False,
                  server_default=sa.text("100"),
                  comment="Artist share of the track in percent"),
        sa.Column("iswc", sa.String(length=32), nullable=True),
        sa.Column("composers", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["artist_id"], ["artists.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("artist_id", "title", name="uq_tracks_artist_title"),
    )
    op.create_index("ix_tracks_artist_id", "tracks", ["artist_id"], unique=False)

    op.create_table(
        "royalties_summary",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("artist_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("track_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.SmallInteger(), nullable=False),
        sa.Column("total_streams", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _money("total_revenue"),
        _money("total_net"),
        _money("total_gross"),
        _money("avg_per_stream"),
        _money("revenue_per_play"),
        _money("highest_revenue"),
        sa.Column("top_territory", sa.String(length=255), nullable=True),
        sa.Column("top_platform", sa.String(length=255), nullable=True),
        sa.Column(
            "platform_distribution",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
            comment="Platform label to share of total_net",
        ),
        sa.Column(
            "territory_distribution",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
            comment="Territory label to share of total_net",
        ),
        sa.Column(
            "monthly_breakdown",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
            comment="Month label to net amount",
        ),
        sa.Column("record_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["artist_id"], ["artists.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["track_id"], ["tracks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "artist_id",
            "track_id",
            "year",
            "quarter",
            name="uq_royalties_summary_natural_key",
        ),
        sa.CheckConstraint("quarter BETWEEN 1 AND 4", name="ck_royalties_summary_quarter"),
    )
    op.create_index(
        "ix_royalties_summary_artist_period",
        "royalties_summary",
        ["artist_id", "year", "quarter"],
        unique=False,
    )
    op.create_index(
        "ix_royalties_summary_track_id",
        "royalties_summary",
        ["track_id"],
        unique=False,
    )

    op.create_table(
        "csv_uploads",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("artist_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("filename", sa.String(length=512), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.SmallInteger(), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True,
                  comment="Size of the CSV payload in bytes"),
        sa.Column("row_count", sa.Integer(), nullable=True),
        sa.Column("processing_status", sa.String(length=32), nullable=False,
                  server_default=sa.text("'pending'")),
        sa.Column("processing_error", sa.Text(), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["artist_id"], ["artists.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_csv_uploads_artist_id", "csv_uploads", ["artist_id"], unique=False)
    op.create_index(
        "ix_csv_uploads_processing_status",
        "csv_uploads",
        ["processing_status"],
        unique=False,
    )
    op.create_index("ix_csv_uploads_created_at", "csv_uploads", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_csv_uploads_created_at", table_name="csv_uploads")
    op.drop_index("ix_csv_uploads_processing_status", table_name="csv_uploads")
    op.drop_index("ix_csv_uploads_artist_id", table_name="csv_uploads")
    op.drop_table("csv_uploads")
    op.drop_index("ix_royalties_summary_track_id", table_name="royalties_summary")
    op.drop_index("ix_royalties_summary_artist_period", table_name="royalties_summary")
    op.drop_table("royalties_summary")
    op.drop_index("ix_tracks_artist_id", table_name="tracks")
    op.drop_table("tracks")
    op.drop_index("ix_artists_email", table_name="artists")
    op.drop_table("artists")
