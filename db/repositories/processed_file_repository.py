"""
Repository for processed-file audit records.
"""

from __future__ import annotations

from sqlalchemy import Select, case, func, select
from sqlalchemy.orm import Session

from app.domain.inspection import ProcessedFileStatus
from db.models.processed_file import ProcessedFile
from db.repositories.types import ProcessedFileInput, ProcessedFileTotals


class ProcessedFileRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_completed_by_hash(self, file_hash: str) -> ProcessedFile | None:
        stmt = (
            select(ProcessedFile)
            .where(
                ProcessedFile.file_hash == file_hash,
                ProcessedFile.status == ProcessedFileStatus.COMPLETED,
            )
            .order_by(ProcessedFile.created_at.asc())
            .limit(1)
        )
        return self._session.scalars(stmt).first()

    def add(self, fields: ProcessedFileInput) -> ProcessedFile:
        """
        Stage a new record and flush it; the caller commits.
        """

        record = ProcessedFile(
            filename=fields.filename,
            file_hash=fields.file_hash,
            status=fields.status,
            is_reprocess=fields.is_reprocess,
            detected_year=fields.detected_year,
            detected_months=fields.detected_months,
            total_records=fields.total_records,
            new_records=fields.new_records,
            duplicate_records=fields.duplicate_records,
            error_records=fields.error_records,
            processing_seconds=fields.processing_seconds,
            validation_errors=list(fields.validation_errors),
            warnings=list(fields.warnings),
            error_code=fields.error_code,
            error_message=fields.error_message,
        )
        self._session.add(record)
        self._session.flush()
        self._session.refresh(record)
        return record

    def list_recent(
        self,
        *,
        limit: int = 50,
        year: int | None = None,
        status: str | None = None,
    ) -> list[ProcessedFile]:
        stmt: Select[tuple[ProcessedFile]] = select(ProcessedFile)

        if year is not None:
            stmt = stmt.where(ProcessedFile.detected_year == year)
        if status:
            stmt = stmt.where(ProcessedFile.status == status)

        stmt = stmt.order_by(ProcessedFile.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def totals(self, *, year: int | None = None) -> ProcessedFileTotals:
        completed = ProcessedFile.status == ProcessedFileStatus.COMPLETED
        stmt = select(
            func.count(ProcessedFile.id),
            func.coalesce(func.sum(case((completed, 1), else_=0)), 0),
            func.coalesce(func.sum(ProcessedFile.total_records), 0),
            func.coalesce(func.sum(ProcessedFile.new_records), 0),
            func.coalesce(func.sum(ProcessedFile.duplicate_records), 0),
            func.coalesce(func.sum(ProcessedFile.error_records), 0),
        )
        if year is not None:
            stmt = stmt.where(ProcessedFile.detected_year == year)

        files, completed_files, total, new, duplicate, errors = self._session.execute(stmt).one()
        return ProcessedFileTotals(
            files=int(files),
            completed_files=int(completed_files),
            failed_files=int(files) - int(completed_files),
            total_records=int(total),
            new_records=int(new),
            duplicate_records=int(duplicate),
            error_records=int(errors),
        )
