"""
app/repositories/inspection_store.py

Storage contract consumed by the ingestion pipeline and its PostgreSQL
implementation.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any, Protocol

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.inspection import (
    COMPONENT_FIELDS,
    VEHICLE_CHECK_FIELDS,
    BatchInsertResult,
    InspectionRecord,
)
from db.models.inspection import NATURAL_KEY_CONSTRAINT, Inspection
from db.models.processed_file import ProcessedFile
from db.repositories.errors import (
    DuplicateProcessedFileError,
    InspectionPersistenceError,
    InspectionQueryError,
)
from db.repositories.processed_file_repository import ProcessedFileRepository
from db.repositories.types import InspectionCriteria, ProcessedFileInput, ProcessedFileTotals

logger = logging.getLogger(__name__)

_COPIED_FIELDS: tuple[str, ...] = (
    "year",
    "month",
    "shift",
    "driver_name",
    "driver_id",
    "vehicle_plate",
    "contract",
    "field_or_site",
    "mileage",
    "has_used_medication",
    "had_sufficient_sleep",
    "is_free_of_fatigue_symptoms",
    "is_fit_to_drive",
    *VEHICLE_CHECK_FIELDS,
    *COMPONENT_FIELDS,
    "notes",
    "risk_level",
    "inspection_score",
    "has_critical_alert",
    "has_warning",
    "inspection_status",
    "source_file_hash",
    "processed_at",
)


class InspectionStore(Protocol):
    """
    Transactional sink for inspection records and processed-file audits.
    """

    def count_existing(self, criteria: InspectionCriteria) -> int: ...

    def insert_batch_skipping_duplicates(
        self,
        records: Sequence[InspectionRecord],
    ) -> BatchInsertResult: ...

    def find_processed_file_by_hash(self, file_hash: str) -> ProcessedFile | None: ...

    def create_processed_file_record(self, fields: ProcessedFileInput) -> ProcessedFile: ...

    def list_processed_files(
        self,
        *,
        limit: int = 50,
        year: int | None = None,
        status: str | None = None,
    ) -> list[ProcessedFile]: ...

    def processed_file_totals(self, *, year: int | None = None) -> ProcessedFileTotals: ...


def to_row_payload(record: InspectionRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {name: getattr(record, name) for name in _COPIED_FIELDS}
    payload["id"] = uuid.UUID(record.id)
    payload["inspection_date"] = record.date
    payload["source_row_number"] = record.row_number
    return payload


class SQLAlchemyInspectionStore:
    """
    PostgreSQL-backed store. Every write commits its own transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._processed_files = ProcessedFileRepository(session)

    def count_existing(self, criteria: InspectionCriteria) -> int:
        stmt = select(func.count(Inspection.id))
        if criteria.year is not None:
            stmt = stmt.where(Inspection.year == criteria.year)
        if criteria.months:
            stmt = stmt.where(Inspection.month.in_(criteria.months))
        try:
            return int(self._session.scalar(stmt) or 0)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise InspectionQueryError("Failed to count persisted inspections.") from exc

    def insert_batch_skipping_duplicates(
        self,
        records: Sequence[InspectionRecord],
    ) -> BatchInsertResult:
        """
        Insert one batch; rows colliding on the natural key are skipped.
        """

        if not records:
            return BatchInsertResult(inserted_count=0)

        stmt = (
            insert(Inspection)
            .values([to_row_payload(record) for record in records])
            .on_conflict_do_nothing(constraint=NATURAL_KEY_CONSTRAINT)
            .returning(Inspection.id)
        )
        try:
            inserted = len(self._session.scalars(stmt).all())
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise InspectionPersistenceError(
                f"Failed to insert batch of {len(records)} inspections."
            ) from exc
        return BatchInsertResult(inserted_count=inserted)

    def find_processed_file_by_hash(self, file_hash: str) -> ProcessedFile | None:
        try:
            return self._processed_files.find_completed_by_hash(file_hash)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise InspectionQueryError("Failed to look up processed file by hash.") from exc

    def create_processed_file_record(self, fields: ProcessedFileInput) -> ProcessedFile:
        try:
            record = self._processed_files.add(fields)
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            logger.warning(
                "Processed-file uniqueness violation file_hash=%s filename=%s",
                fields.file_hash,
                fields.filename,
            )
            raise DuplicateProcessedFileError(fields.file_hash) from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise InspectionPersistenceError("Failed to record processed file.") from exc
        return record

    def list_processed_files(
        self,
        *,
        limit: int = 50,
        year: int | None = None,
        status: str | None = None,
    ) -> list[ProcessedFile]:
        try:
            return self._processed_files.list_recent(limit=limit, year=year, status=status)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise InspectionQueryError("Failed to list processed files.") from exc

    def processed_file_totals(self, *, year: int | None = None) -> ProcessedFileTotals:
        try:
            return self._processed_files.totals(year=year)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise InspectionQueryError("Failed to total processed files.") from exc
