"""
app/api/routers/royalty_summary_router.py

Royalty summary HTTP endpoints.
"""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.config import get_api_settings
from app.domain.royalty_summary import ProcessSummaryOptions, SummaryComputationResult
from app.schemas.royalty_summary import (
    CsvUploadListResponse,
    CsvUploadResponse,
    FailedRowResponse,
    ProcessRoyaltySummaryRequest,
    ProcessRoyaltySummaryResponse,
    RoyaltySummaryListResponse,
    RoyaltySummaryResponse,
    SummaryComputationResponse,
)
from app.services.failed_row_collector import render_failed_rows_csv
from app.services.royalty_summary_service import (
    RoyaltySummaryService,
    get_royalty_summary_service,
)
from db.models.royalty_summary import RoyaltySummary
from db.session import get_db

UploadStatus = Literal["pending", "processing", "completed", "failed"]

router = APIRouter(tags=["royalty-summary"])


@router.post(
    "/process-royalties-summary",
    response_model=ProcessRoyaltySummaryResponse,
    responses={
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ProcessRoyaltySummaryResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ProcessRoyaltySummaryResponse},
    },
)
def process_royalties_summary(
    payload: ProcessRoyaltySummaryRequest,
    db: Session = Depends(get_db),
    summary_service: RoyaltySummaryService = Depends(get_royalty_summary_service),
) -> JSONResponse:
    """
    Register an upload record, compute summaries for one artist quarter and
    return the run report with the failed-rows export.

    Status is 200 on success, 500 when any upsert batch failed and 422 for
    every other unsuccessful run. The body shape is the same in all cases.
    """

    artist_id = str(payload.artist_id)
    upload = summary_service.register_upload(
        db=db,
        artist_id=artist_id,
        filename=payload.filename,
        year=payload.year,
        quarter=payload.quarter,
        file_size=len(payload.csv_content.encode("utf-8")),
    )
    upload_id = str(upload.id) if upload is not None else None

    result = summary_service.process_royalty_summary(
        ProcessSummaryOptions(
            artist_id=artist_id,
            year=payload.year,
            quarter=payload.quarter,
            csv_content=payload.csv_content,
            upload_id=upload_id,
        ),
        db,
    )

    response = ProcessRoyaltySummaryResponse(
        success=result.success,
        upload_id=upload_id,
        computation=_computation_response(result),
        failed_rows_csv=render_failed_rows_csv(result.failed_rows),
    )
    return JSONResponse(
        status_code=_status_for(result),
        content=response.model_dump(mode="json"),
    )


@router.get("/csv-uploads", response_model=CsvUploadListResponse)
def list_csv_uploads(
    artist_id: UUID | None = Query(default=None, description="Optional artist filter"),
    upload_status: UploadStatus | None = Query(
        default=None,
        alias="status",
        description="Optional lifecycle filter",
    ),
    limit: int | None = Query(default=None, ge=1, le=500),
    db: Session = Depends(get_db),
    summary_service: RoyaltySummaryService = Depends(get_royalty_summary_service),
) -> CsvUploadListResponse:
    """
    Upload history, newest first.
    """

    uploads = summary_service.list_uploads(
        db=db,
        artist_id=str(artist_id) if artist_id else None,
        status=upload_status,
        limit=limit or get_api_settings().upload_history_limit,
    )
    return CsvUploadListResponse(
        uploads=[CsvUploadResponse.model_validate(upload) for upload in uploads],
    )


@router.get("/royalties-summary", response_model=RoyaltySummaryListResponse)
def list_royalties_summary(
    artist_id: UUID = Query(..., description="Artist whose summaries are listed"),
    year: int | None = Query(default=None, ge=1900, le=2100),
    quarter: int | None = Query(default=None, ge=1, le=4),
    db: Session = Depends(get_db),
    summary_service: RoyaltySummaryService = Depends(get_royalty_summary_service),
) -> RoyaltySummaryListResponse:
    rows = summary_service.list_summaries(
        db=db,
        artist_id=str(artist_id),
        year=year,
        quarter=quarter,
    )
    return RoyaltySummaryListResponse(
        summaries=[_summary_response(summary, title) for summary, title in rows],
    )


def _status_for(result: SummaryComputationResult) -> int:
    if result.success:
        return status.HTTP_200_OK
    if result.failed_batches > 0:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def _computation_response(result: SummaryComputationResult) -> SummaryComputationResponse:
    return SummaryComputationResponse(
        success=result.success,
        summaries_created=result.summaries_created,
        summaries_updated=result.summaries_updated,
        records_written=result.records_written,
        total_rows=result.total_rows,
        failed_batches=result.failed_batches,
        errors=list(result.errors),
        duration_ms=result.duration_ms,
        failed_rows=[
            FailedRowResponse(
                row_index=row.row_index,
                original_data=row.original_data,
                error_message=row.error_message,
                timestamp=row.timestamp,
            )
            for row in result.failed_rows
        ],
    )


def _summary_response(summary: RoyaltySummary, track_title: str) -> RoyaltySummaryResponse:
    return RoyaltySummaryResponse(
        id=summary.id,
        artist_id=summary.artist_id,
        track_id=summary.track_id,
        track_title=track_title,
        year=summary.year,
        quarter=summary.quarter,
        total_streams=summary.total_streams,
        total_revenue=summary.total_revenue,
        total_net=summary.total_net,
        total_gross=summary.total_gross,
        avg_per_stream=summary.avg_per_stream,
        revenue_per_play=summary.revenue_per_play,
        top_territory=summary.top_territory,
        top_platform=summary.top_platform,
        highest_revenue=summary.highest_revenue,
        platform_distribution=summary.platform_distribution,
        territory_distribution=summary.territory_distribution,
        monthly_breakdown=summary.monthly_breakdown,
        record_count=summary.record_count,
        updated_at=summary.updated_at,
    )
