"""
app/schemas package marker.
"""

from app.schemas.royalty_summary import (
    CsvUploadListResponse,
    CsvUploadResponse,
    FailedRowResponse,
    HealthResponse,
    ProcessRoyaltySummaryRequest,
    ProcessRoyaltySummaryResponse,
    RoyaltySummaryListResponse,
    RoyaltySummaryResponse,
    SummaryComputationResponse,
)

__all__ = [
    "CsvUploadListResponse",
    "CsvUploadResponse",
    "FailedRowResponse",
    "HealthResponse",
    "ProcessRoyaltySummaryRequest",
    "ProcessRoyaltySummaryResponse",
    "RoyaltySummaryListResponse",
    "RoyaltySummaryResponse",
    "SummaryComputationResponse",
]
