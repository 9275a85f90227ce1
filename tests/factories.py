"""
tests/factories.py

Test doubles and builders: an in-memory inspection store, a fixed clock,
an openpyxl workbook builder keyed by canonical field names and a record
factory.
"""

from __future__ import annotations

import io
import uuid
from collections.abc import Sequence
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Any

import openpyxl

from app.domain.inspection import (
    VEHICLE_CHECK_FIELDS,
    BatchInsertResult,
    InspectionRecord,
    ProcessedFileStatus,
)
from app.mappers.column_mapping import load_column_mapping_table
from db.models.processed_file import ProcessedFile
from db.repositories.errors import DuplicateProcessedFileError, InspectionPersistenceError
from db.repositories.types import InspectionCriteria, ProcessedFileInput, ProcessedFileTotals
from risk.derived_fields import DerivedFieldCalculator

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryInspectionStore:
    """
    Dict-backed store honouring the natural-key and completed-hash rules.
    """

    def __init__(self, *, failing_batches: Sequence[int] = ()) -> None:
        self.inspections: dict[tuple[str, str, str], InspectionRecord] = {}
        self.processed_files: list[ProcessedFile] = []
        self.batch_sizes: list[int] = []
        self._failing_batches = set(failing_batches)

    def count_existing(self, criteria: InspectionCriteria) -> int:
        count = 0
        for record in self.inspections.values():
            if criteria.year is not None and record.year != criteria.year:
                continue
            if criteria.months and record.month not in criteria.months:
                continue
            count += 1
        return count

    def insert_batch_skipping_duplicates(
        self,
        records: Sequence[InspectionRecord],
    ) -> BatchInsertResult:
        self.batch_sizes.append(len(records))
        if len(self.batch_sizes) in self._failing_batches:
            raise InspectionPersistenceError(f"Batch {len(self.batch_sizes)} rejected.")

        inserted = 0
        for record in records:
            key = record.natural_key()
            if key in self.inspections:
                continue
            self.inspections[key] = record
            inserted += 1
        return BatchInsertResult(inserted_count=inserted)

    def find_processed_file_by_hash(self, file_hash: str) -> ProcessedFile | None:
        for item in self.processed_files:
            if item.file_hash == file_hash and item.status == ProcessedFileStatus.COMPLETED:
                return item
        return None

    def create_processed_file_record(self, fields: ProcessedFileInput) -> ProcessedFile:
        if fields.status == ProcessedFileStatus.COMPLETED and not fields.is_reprocess:
            for item in self.processed_files:
                if (
                    item.file_hash == fields.file_hash
                    and item.status == ProcessedFileStatus.COMPLETED
                    and not item.is_reprocess
                ):
                    raise DuplicateProcessedFileError(fields.file_hash)

        record = ProcessedFile(
            id=uuid.uuid4(),
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
        record.created_at = FIXED_NOW + timedelta(seconds=len(self.processed_files))
        self.processed_files.append(record)
        return record

    def list_processed_files(
        self,
        *,
        limit: int = 50,
        year: int | None = None,
        status: str | None = None,
    ) -> list[ProcessedFile]:
        items = [
            item
            for item in self.processed_files
            if (year is None or item.detected_year == year)
            and (status is None or item.status == status)
        ]
        items.sort(key=lambda item: item.created_at, reverse=True)
        return items[:limit]

    def processed_file_totals(self, *, year: int | None = None) -> ProcessedFileTotals:
        items = [item for item in self.processed_files if year is None or item.detected_year == year]
        completed = sum(1 for item in items if item.status == ProcessedFileStatus.COMPLETED)
        return ProcessedFileTotals(
            files=len(items),
            completed_files=completed,
            failed_files=len(items) - completed,
            total_records=sum(item.total_records for item in items),
            new_records=sum(item.new_records for item in items),
            duplicate_records=sum(item.duplicate_records for item in items),
            error_records=sum(item.error_records for item in items),
        )


# ---------------------------------------------------------------------------
# Workbook builder
# ---------------------------------------------------------------------------


def inspection_row(**overrides: Any) -> dict[str, Any]:
    """
    A clean, approvable inspection keyed by canonical field name.
    """

    table = load_column_mapping_table()
    row: dict[str, Any] = {}
    for name, spec in table.fields.items():
        if spec.type == "boolean":
            row[name] = "Sí"
        elif spec.type == "component":
            row[name] = "BUENO"
    row.update(
        {
            "date": datetime(2024, 3, 1, 7, 30),
            "driver_name": "Juan Pérez",
            "driver_id": "10203040",
            "vehicle_plate": "KLM456",
            "contract": "CT-100",
            "field_or_site": "Campo Rubiales",
            "shift": "DIURNO",
            "mileage": 85000,
            "has_used_medication": "No",
            "notes": "",
        }
    )
    row.update(overrides)
    return row


def build_workbook(
    rows: Sequence[dict[str, Any]],
    *,
    fields: Sequence[str] | None = None,
    extra_headers: Sequence[str] = (),
    sheet_title: str = "Respuestas",
    blank_rows_after: Sequence[int] = (),
) -> bytes:
    """
    Serialize rows to .xlsx bytes using each field's first listed header.
    """

    table = load_column_mapping_table()
    names = list(fields) if fields is not None else list(table.fields)

    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_title
    worksheet.append([table.fields[name].headers[0] for name in names] + list(extra_headers))
    for position, row in enumerate(rows):
        worksheet.append([row.get(name) for name in names] + [None] * len(extra_headers))
        if position in blank_rows_after:
            worksheet.append([None] * (len(names) + len(extra_headers)))

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def make_record(**overrides: Any) -> InspectionRecord:
    """
    A fully-passing record run through the default derived-field calculator.
    """

    base = InspectionRecord(
        id=str(uuid.uuid4()),
        row_number=2,
        processed_at=FIXED_NOW,
        date=date(2024, 3, 1),
        year=2024,
        month=3,
        shift="DAY",
        driver_name="Juan Pérez",
        driver_id="10203040",
        vehicle_plate="KLM456",
        contract="CT-100",
        field_or_site="Campo Rubiales",
        mileage=85000,
        has_used_medication=False,
        had_sufficient_sleep=True,
        is_free_of_fatigue_symptoms=True,
        is_fit_to_drive=True,
        tire_condition="GOOD",
        mirror_condition="GOOD",
        completeness=1.0,
        **{name: True for name in VEHICLE_CHECK_FIELDS},
    )
    return DerivedFieldCalculator().apply(replace(base, **overrides))


