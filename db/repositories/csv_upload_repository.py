"""
Repository for CSV upload lifecycle persistence and history lookup.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.csv_upload import CsvUpload, CsvUploadStatus
from db.repositories.errors import UploadNotFoundError
from db.repositories.identifiers import to_uuid


class CsvUploadRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_upload(
        self,
        *,
        artist_id: str,
        filename: str,
        year: int,
        quarter: int,
        file_size: int | None = None,
    ) -> CsvUpload:
        upload = CsvUpload(
            artist_id=to_uuid(artist_id, kind="artist"),
            filename=filename,
            year=year,
            quarter=quarter,
            file_size=file_size,
            processing_status=CsvUploadStatus.PENDING,
        )
        self._session.add(upload)
        self._session.flush()
        self._session.refresh(upload)
        return upload

    def get_upload(self, upload_id: str) -> CsvUpload | None:
        return self._session.get(CsvUpload, to_uuid(upload_id, kind="upload"))

    def list_uploads(
        self,
        *,
        artist_id: str | None = None,
        status: str | None = None,
        limit: int = 20,
    ) -> list[CsvUpload]:
        stmt: Select[tuple[CsvUpload]] = select(CsvUpload)

        if artist_id:
            stmt = stmt.where(CsvUpload.artist_id == to_uuid(artist_id, kind="artist"))
        if status:
            stmt = stmt.where(CsvUpload.processing_status == status)

        stmt = stmt.order_by(CsvUpload.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def mark_processing(self, *, upload_id: str) -> CsvUpload:
        upload = self._require(upload_id)
        upload.processing_status = CsvUploadStatus.PROCESSING
        upload.processing_error = None
        upload.processed_at = None
        return upload

    def mark_completed(self, *, upload_id: str, row_count: int) -> CsvUpload:
        upload = self._require(upload_id)
        upload.processing_status = CsvUploadStatus.COMPLETED
        upload.row_count = row_count
        upload.processing_error = None
        upload.processed_at = datetime.now(timezone.utc)
        return upload

    def mark_failed(
        self,
        *,
        upload_id: str,
        error_message: str | None,
        row_count: int | None = None,
    ) -> CsvUpload:
        upload = self._require(upload_id)
        upload.processing_status = CsvUploadStatus.FAILED
        upload.processing_error = error_message
        if row_count is not None:
            upload.row_count = row_count
        upload.processed_at = datetime.now(timezone.utc)
        return upload

    def _require(self, upload_id: str) -> CsvUpload:
        upload = self.get_upload(upload_id)
        if upload is None:
            raise UploadNotFoundError(f"CSV upload not found: {upload_id}")
        return upload
