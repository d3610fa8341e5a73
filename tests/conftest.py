"""
tests/conftest.py

Shared fixtures wiring the in-memory stores into RoyaltySummaryService.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from app.services.royalty_summary_service import RoyaltySummaryService
from tests.fakes import (
    InMemorySummaryStore,
    InMemoryTrackStore,
    InMemoryUploadStore,
    build_service,
)


@pytest.fixture()
def db() -> MagicMock:
    return MagicMock(name="session")


@pytest.fixture()
def track_store() -> InMemoryTrackStore:
    return InMemoryTrackStore()


@pytest.fixture()
def summary_store() -> InMemorySummaryStore:
    return InMemorySummaryStore()


@pytest.fixture()
def upload_store() -> InMemoryUploadStore:
    return InMemoryUploadStore()


@pytest.fixture()
def service(
    track_store: InMemoryTrackStore,
    summary_store: InMemorySummaryStore,
    upload_store: InMemoryUploadStore,
) -> RoyaltySummaryService:
    return build_service(
        track_store=track_store,
        summary_store=summary_store,
        upload_store=upload_store,
    )
