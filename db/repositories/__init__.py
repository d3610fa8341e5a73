"""
Repository layer exports.
"""

from db.repositories.csv_upload_repository import CsvUploadRepository
from db.repositories.errors import (
    InvalidIdentifierError,
    RoyaltySummaryRepositoryError,
    SummaryUpsertError,
    TrackCreationError,
    UploadNotFoundError,
)
from db.repositories.royalty_summary_repository import RoyaltySummaryRepository
from db.repositories.track_repository import TrackRepository

__all__ = [
    "InvalidIdentifierError",
    "CsvUploadRepository",
    "RoyaltySummaryRepository",
    "TrackRepository",
    "RoyaltySummaryRepositoryError",
    "SummaryUpsertError",
    "TrackCreationError",
    "UploadNotFoundError",
]
