"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.artist import Artist
from db.models.csv_upload import CsvUpload, CsvUploadStatus
from db.models.royalty_summary import RoyaltySummary
from db.models.track import Track

__all__ = [
    "Artist",
    "CsvUpload",
    "CsvUploadStatus",
    "RoyaltySummary",
    "Track",
]
