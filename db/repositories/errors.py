"""
Repository-layer exceptions for royalty summary persistence.
"""

from __future__ import annotations


class RoyaltySummaryRepositoryError(Exception):
    """Base exception for royalty summary repository failures."""


class TrackCreationError(RoyaltySummaryRepositoryError):
    """Raised when missing tracks cannot be inserted."""


class SummaryUpsertError(RoyaltySummaryRepositoryError):
    """Raised when a batch of summary rows cannot be upserted."""


class UploadNotFoundError(RoyaltySummaryRepositoryError):
    """Raised when a referenced CSV upload does not exist."""


class InvalidIdentifierError(RoyaltySummaryRepositoryError):
    """Raised when an artist, track or upload id is not a UUID."""
