"""
app/schemas/royalty_summary.py

Request and response schemas for royalty summary endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProcessRoyaltySummaryRequest(BaseModel):
    """
    API request model for one summary run over inline CSV text.
    """

    model_config = ConfigDict(extra="forbid")

    artist_id: UUID
    year: int = Field(..., ge=1900, le=2100)
    quarter: int = Field(..., ge=1, le=4)
    csv_content: str
    filename: str = Field(default="royalties.csv", min_length=1, max_length=512)


class FailedRowResponse(BaseModel):
    row_index: int = Field(..., ge=2)
    original_data: dict[str, str] = Field(default_factory=dict)
    error_message: str
    timestamp: str


class SummaryComputationResponse(BaseModel):
    """
    API response model for the computation report.
    """

    success: bool
    summaries_created: int = Field(..., ge=0)
    summaries_updated: int = Field(..., ge=0)
    records_written: int = Field(..., ge=0)
    total_rows: int = Field(..., ge=0)
    failed_batches: int = Field(default=0, ge=0)
    errors: list[str] = Field(default_factory=list)
    duration_ms: int = Field(..., ge=0)
    failed_rows: list[FailedRowResponse] = Field(default_factory=list)


class ProcessRoyaltySummaryResponse(BaseModel):
    success: bool
    upload_id: UUID | None = None
    computation: SummaryComputationResponse
    failed_rows_csv: str = ""


class CsvUploadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    artist_id: UUID
    filename: str
    year: int
    quarter: int
    file_size: int | None = None
    row_count: int | None = None
    processing_status: str
    processing_error: str | None = None
    processed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CsvUploadListResponse(BaseModel):
    uploads: list[CsvUploadResponse] = Field(default_factory=list)


class RoyaltySummaryResponse(BaseModel):
    """
    API response model for one persisted summary row.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    artist_id: UUID
    track_id: UUID
    track_title: str
    year: int
    quarter: int
    total_streams: int
    total_revenue: float
    total_net: float
    total_gross: float
    avg_per_stream: float
    revenue_per_play: float
    top_territory: str | None = None
    top_platform: str | None = None
    highest_revenue: float
    platform_distribution: dict[str, Any] = Field(default_factory=dict)
    territory_distribution: dict[str, Any] = Field(default_factory=dict)
    monthly_breakdown: dict[str, Any] = Field(default_factory=dict)
    record_count: int
    updated_at: datetime


class RoyaltySummaryListResponse(BaseModel):
    summaries: list[RoyaltySummaryResponse] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    service: str
