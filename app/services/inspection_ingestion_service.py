"""
app/services/inspection_ingestion_service.py

Service layer for workbook ingestion: analyze, duplicate gate, map and
validate, intra-file deduplication, batched persistence and the
processed-file audit record.

Row-level problems are accumulated into the result. Only file-level
failures (see `app.services.ingestion_errors`) are raised, and every raised
failure is first recorded as an ERROR processed-file entry.
"""

from __future__ import annotations

import hashlib
import logging
import math
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any

from app.config import InspectionIngestionSettings, get_inspection_ingestion_settings
from app.domain.inspection import (
    AlertDescriptor,
    FileAnalysis,
    InspectionRecord,
    PeriodInfo,
    ProcessedFileStatus,
    ProcessingResult,
    RowValidationFailure,
    ValidationIssue,
)
from app.mappers.column_mapping import (
    ColumnMappingTable,
    ColumnResolution,
    load_column_mapping_table,
)
from app.mappers.inspection_mapper import InspectionRecordMapper, RowStructureError
from app.repositories.inspection_store import InspectionStore
from app.services.ingestion_errors import DuplicateFileError, InspectionIngestionError
from app.services.period_detection import detect_period, locate_date_column
from app.services.workbook_reader import WorkbookContent, WorksheetRow, read_workbook
from app.validators.inspection_validator import InspectionRecordValidator
from db.models.processed_file import ProcessedFile
from db.repositories.errors import DuplicateProcessedFileError, InspectionStoreError
from db.repositories.types import InspectionCriteria, ProcessedFileInput, ProcessedFileTotals
from risk.alerts import AlertDetector

logger = logging.getLogger(__name__)

SAMPLE_ROW_COUNT = 3
ROWS_PER_ESTIMATE_STEP = 1000
SECONDS_PER_ESTIMATE_STEP = 2
HIGH_ERROR_RATE = 0.10
HIGH_DUPLICATE_RATE = 0.50
STALE_DATA_YEARS = 2
UNEXPECTED_ERROR_CODE = "UNEXPECTED_ERROR"


def compute_file_hash(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def deduplicate_records(
    records: Sequence[InspectionRecord],
) -> tuple[list[InspectionRecord], int]:
    """
    Keep the first record per natural key, in input order.

    Returns the surviving records and the number dropped.
    """

    seen: set[tuple[str, str, str]] = set()
    survivors: list[InspectionRecord] = []
    for record in records:
        key = record.natural_key()
        if key in seen:
            continue
        seen.add(key)
        survivors.append(record)
    return survivors, len(records) - len(survivors)


def _json_cell(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


@dataclass(frozen=True)
class PreparedWorkbook:
    file_hash: str
    workbook: WorkbookContent
    resolution: ColumnResolution
    period: PeriodInfo


@dataclass
class _RunStats:
    total_records: int = 0
    error_records: int = 0
    intra_file_duplicates: int = 0
    already_persisted: int = 0
    new_records: int = 0
    warning_count: int = 0
    alert_count: int = 0
    period: PeriodInfo | None = None
    errors_sample: list[RowValidationFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    alerts: list[AlertDescriptor] = field(default_factory=list)


@dataclass(frozen=True)
class UploadHistory:
    files: list[ProcessedFile]
    totals: ProcessedFileTotals


class InspectionIngestionService:
    """
    Coordinates workbook reading, mapping, validation and persistence.
    """

    def __init__(
        self,
        *,
        store: InspectionStore,
        settings: InspectionIngestionSettings | None = None,
        table: ColumnMappingTable | None = None,
        mapper: InspectionRecordMapper | None = None,
        validator: InspectionRecordValidator | None = None,
        alert_detector: AlertDetector | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or InspectionIngestionSettings()
        self._table = table or load_column_mapping_table(self._settings.column_map_path)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._mapper = mapper or InspectionRecordMapper(clock=self._clock)
        self._validator = validator or InspectionRecordValidator(clock=self._clock)
        self._alert_detector = alert_detector or AlertDetector()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def analyze_file(
        self,
        content: bytes,
        filename: str,
        *,
        sheet_name: str | None = None,
    ) -> FileAnalysis:
        """
        Preview headers, period and sample rows without persisting anything.
        """

        prepared = self.prepare_workbook(content, sheet_name=sheet_name)
        workbook = prepared.workbook
        resolution = prepared.resolution
        already_processed = self._store.find_processed_file_by_hash(prepared.file_hash) is not None
        missing_required = resolution.missing_fields()

        warnings: list[str] = []
        if already_processed:
            warnings.append("This file was already processed; uploading it again requires force_reprocess.")
        for name in missing_required:
            warnings.append(f"No column found for required field '{name}'.")
        if prepared.period.is_annual:
            warnings.append(
                f"Annual file detected covering {len(prepared.period.months)} months."
            )
        if len(prepared.period.years) > 1:
            warnings.append(f"File spans several years: {prepared.period.years}.")

        sample_rows = [
            {
                header or f"column_{index + 1}": _json_cell(value)
                for index, (header, value) in enumerate(zip(workbook.headers, row.values))
            }
            for row in workbook.rows[:SAMPLE_ROW_COUNT]
        ]

        logger.info(
            "Workbook analyzed filename=%s file_hash=%s rows=%s mapped_fields=%s",
            filename,
            prepared.file_hash,
            len(workbook.rows),
            len(resolution.field_to_index),
        )
        return FileAnalysis(
            filename=filename,
            file_hash=prepared.file_hash,
            sheet_name=workbook.sheet_name,
            total_rows=len(workbook.rows),
            total_columns=workbook.total_columns,
            headers=list(workbook.headers),
            period=prepared.period,
            column_mapping=dict(resolution.field_to_header),
            unmapped_headers=resolution.unmapped_headers,
            missing_required_fields=missing_required,
            sample_rows=sample_rows,
            estimated_processing_seconds=(
                math.ceil(len(workbook.rows) / ROWS_PER_ESTIMATE_STEP) * SECONDS_PER_ESTIMATE_STEP
            ),
            already_processed=already_processed,
            existing_period_records=self.count_period_records(prepared.period),
            warnings=warnings,
        )

    def process_file(
        self,
        content: bytes,
        filename: str,
        *,
        force_reprocess: bool = False,
        sheet_name: str | None = None,
    ) -> ProcessingResult:
        """
        Run the full ingestion pipeline for one workbook.
        """

        started = time.perf_counter()
        file_hash = compute_file_hash(content)
        stats = _RunStats()
        is_reprocess = False

        logger.info(
            "Workbook ingestion started filename=%s file_hash=%s force_reprocess=%s",
            filename,
            file_hash,
            force_reprocess,
        )
        try:
            prepared = self.prepare_workbook(content, sheet_name=sheet_name, file_hash=file_hash)
            stats.period = prepared.period

            existing = self._store.find_processed_file_by_hash(file_hash)
            if existing is not None:
                if not force_reprocess:
                    raise DuplicateFileError(
                        f"File '{filename}' was already processed.",
                        details={
                            "file_hash": file_hash,
                            "processed_file_id": str(existing.id),
                            "processed_at": (
                                existing.created_at.isoformat()
                                if existing.created_at is not None
                                else None
                            ),
                        },
                    )
                is_reprocess = True
                logger.info("Reprocessing previously ingested file file_hash=%s", file_hash)

            valid_records = self._map_and_validate(prepared, stats)
            survivors, stats.intra_file_duplicates = deduplicate_records(valid_records)
            self._persist(survivors, stats)

            elapsed = round(time.perf_counter() - started, 3)
            stats.warnings = self._processing_alerts(stats) + stats.warnings
            try:
                processed = self._store.create_processed_file_record(
                    self._processed_file_fields(
                        filename=filename,
                        file_hash=file_hash,
                        status=ProcessedFileStatus.COMPLETED,
                        is_reprocess=is_reprocess,
                        stats=stats,
                        elapsed=elapsed,
                    )
                )
            except DuplicateProcessedFileError as exc:
                raise DuplicateFileError(
                    f"File '{filename}' was processed concurrently by another request.",
                    details={"file_hash": file_hash},
                ) from exc
        except Exception as exc:
            self._record_failure(
                exc,
                filename=filename,
                file_hash=file_hash,
                is_reprocess=is_reprocess,
                stats=stats,
                elapsed=round(time.perf_counter() - started, 3),
            )
            raise

        logger.info(
            "Workbook ingestion completed filename=%s total=%s new=%s duplicates=%s errors=%s seconds=%s",
            filename,
            stats.total_records,
            stats.new_records,
            stats.intra_file_duplicates + stats.already_persisted,
            stats.error_records,
            elapsed,
        )
        return ProcessingResult(
            success=True,
            filename=filename,
            file_hash=file_hash,
            total_records=stats.total_records,
            new_records=stats.new_records,
            duplicate_records=stats.intra_file_duplicates + stats.already_persisted,
            error_records=stats.error_records,
            processing_time_seconds=elapsed,
            period=prepared.period,
            validation_errors_sample=list(stats.errors_sample),
            warnings=list(stats.warnings),
            intra_file_duplicates=stats.intra_file_duplicates,
            already_persisted_records=stats.already_persisted,
            critical_alerts=list(stats.alerts),
            critical_alert_count=stats.alert_count,
            processed_file_id=str(processed.id) if processed.id is not None else None,
            is_reprocess=is_reprocess,
        )

    def list_history(
        self,
        *,
        limit: int = 50,
        year: int | None = None,
        status: str | None = None,
    ) -> UploadHistory:
        return UploadHistory(
            files=self._store.list_processed_files(limit=limit, year=year, status=status),
            totals=self._store.processed_file_totals(year=year),
        )

    def count_period_records(self, period: PeriodInfo) -> int:
        """
        Persisted inspections falling in the detected year and months.
        """

        return self._store.count_existing(
            InspectionCriteria(year=period.detected_year, months=tuple(period.months))
        )

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    def prepare_workbook(
        self,
        content: bytes,
        *,
        sheet_name: str | None = None,
        file_hash: str | None = None,
    ) -> PreparedWorkbook:
        """
        Read the workbook, resolve columns once and detect the reporting period.
        """

        workbook = read_workbook(content, sheet_name=sheet_name)
        resolution = self._table.resolve(workbook.headers)
        date_index, date_header = locate_date_column(workbook.headers, resolution)
        period = detect_period(
            workbook.rows,
            date_column_index=date_index,
            date_column=date_header,
            max_dated_rows=self._settings.period_scan_rows,
        )
        return PreparedWorkbook(
            file_hash=file_hash or compute_file_hash(content),
            workbook=workbook,
            resolution=resolution,
            period=period,
        )

    def _map_and_validate(
        self,
        prepared: PreparedWorkbook,
        stats: _RunStats,
    ) -> list[InspectionRecord]:
        rows = prepared.workbook.rows
        processed_at = self._clock()
        interval = self._settings.progress_interval
        valid: list[InspectionRecord] = []

        for position, row in enumerate(rows, start=1):
            record = self._map_and_validate_row(prepared, row, stats, processed_at)
            if record is not None:
                valid.append(record)

            if position % interval == 0:
                logger.info(
                    "Workbook ingestion progress rows=%s/%s valid=%s errors=%s",
                    position,
                    len(rows),
                    len(valid),
                    stats.error_records,
                )

        if stats.alert_count:
            logger.warning(
                "Critical inspection alerts detected count=%s file_hash=%s",
                stats.alert_count,
                prepared.file_hash,
            )
        return valid

    def _map_and_validate_row(
        self,
        prepared: PreparedWorkbook,
        row: WorksheetRow,
        stats: _RunStats,
        processed_at: datetime,
    ) -> InspectionRecord | None:
        """
        Map, validate and alert-check one row; ``None`` when the row is rejected.
        """

        stats.total_records += 1
        try:
            record = self._mapper.map_row(
                row.values,
                prepared.resolution,
                row.row_number,
                processed_at=processed_at,
            )
        except RowStructureError as exc:
            stats.error_records += 1
            self._record_error(
                stats,
                RowValidationFailure(
                    row_number=row.row_number,
                    issues=[ValidationIssue(field="row", type="STRUCTURAL", message=str(exc))],
                ),
            )
            return None

        outcome = self._validator.validate(record)
        for warning in outcome.warnings:
            stats.warning_count += 1
            if len(stats.warnings) < self._settings.error_sample_size:
                stats.warnings.append(
                    f"Row {record.row_number}: {warning.field}: {warning.message}"
                )

        if not outcome.is_valid:
            stats.error_records += 1
            self._record_error(
                stats,
                RowValidationFailure(
                    row_number=record.row_number,
                    issues=list(outcome.errors),
                    driver_name=record.driver_name or None,
                    vehicle_plate=record.vehicle_plate or None,
                ),
            )
            return None

        alert = self._alert_detector.detect(record)
        if alert is not None:
            stats.alert_count += 1
            if len(stats.alerts) < self._settings.alert_sample_size:
                stats.alerts.append(alert)

        return replace(record, source_file_hash=prepared.file_hash)

    def _persist(self, records: Sequence[InspectionRecord], stats: _RunStats) -> None:
        batch_size = self._settings.batch_size
        for start in range(0, len(records), batch_size):
            batch = records[start : start + batch_size]
            try:
                result = self._store.insert_batch_skipping_duplicates(batch)
            except InspectionStoreError:
                logger.exception(
                    "Inspection batch failed start=%s size=%s; counting rows as errors",
                    start,
                    len(batch),
                )
                stats.error_records += len(batch)
                continue
            stats.new_records += result.inserted_count
            stats.already_persisted += len(batch) - result.inserted_count

    # ------------------------------------------------------------------
    # Reporting helpers
    # ------------------------------------------------------------------

    def _record_error(self, stats: _RunStats, failure: RowValidationFailure) -> None:
        if self._settings.log_validation_errors:
            logger.warning(
                "Inspection validation error row=%s fields=%s",
                failure.row_number,
                ",".join(issue.field for issue in failure.issues),
            )
        if len(stats.errors_sample) < self._settings.error_sample_size:
            stats.errors_sample.append(failure)

    def _processing_alerts(self, stats: _RunStats) -> list[str]:
        alerts: list[str] = []
        total = stats.total_records
        if total:
            error_rate = stats.error_records / total
            if error_rate > HIGH_ERROR_RATE:
                alerts.append(f"High error rate: {error_rate:.0%} of rows were rejected.")
            duplicate_rate = (stats.intra_file_duplicates + stats.already_persisted) / total
            if duplicate_rate > HIGH_DUPLICATE_RATE:
                alerts.append(
                    f"High duplicate rate: {duplicate_rate:.0%} of rows were already known."
                )
        if stats.period is not None:
            current_year = self._clock().year
            if stats.period.detected_year < current_year - STALE_DATA_YEARS:
                alerts.append(
                    f"Data is from {stats.period.detected_year}, more than "
                    f"{STALE_DATA_YEARS} years old."
                )
        if stats.warning_count > len(stats.warnings):
            alerts.append(
                f"{stats.warning_count} row warnings in total; the first {len(stats.warnings)} are listed."
            )
        return alerts

    def _processed_file_fields(
        self,
        *,
        filename: str,
        file_hash: str,
        status: str,
        is_reprocess: bool,
        stats: _RunStats,
        elapsed: float,
        error: Exception | None = None,
    ) -> ProcessedFileInput:
        period = stats.period
        return ProcessedFileInput(
            filename=filename,
            file_hash=file_hash,
            status=status,
            is_reprocess=is_reprocess,
            detected_year=period.detected_year if period is not None else None,
            detected_months=list(period.months) if period is not None else None,
            total_records=stats.total_records,
            new_records=stats.new_records,
            duplicate_records=stats.intra_file_duplicates + stats.already_persisted,
            error_records=stats.error_records,
            processing_seconds=elapsed,
            validation_errors=[failure.to_dict() for failure in stats.errors_sample],
            warnings=list(stats.warnings),
            error_code=(
                getattr(error, "code", UNEXPECTED_ERROR_CODE) if error is not None else None
            ),
            error_message=str(error) if error is not None else None,
        )

    def _record_failure(
        self,
        exc: Exception,
        *,
        filename: str,
        file_hash: str,
        is_reprocess: bool,
        stats: _RunStats,
        elapsed: float,
    ) -> None:
        if isinstance(exc, InspectionIngestionError):
            logger.warning(
                "Workbook ingestion rejected filename=%s code=%s message=%s",
                filename,
                exc.code,
                exc.message,
            )
        else:
            logger.error(
                "Workbook ingestion failed filename=%s error=%s",
                filename,
                exc,
            )
        try:
            self._store.create_processed_file_record(
                self._processed_file_fields(
                    filename=filename,
                    file_hash=file_hash,
                    status=ProcessedFileStatus.ERROR,
                    is_reprocess=is_reprocess,
                    stats=stats,
                    elapsed=elapsed,
                    error=exc,
                )
            )
        except InspectionStoreError:
            logger.exception(
                "Could not record failed ingestion filename=%s file_hash=%s",
                filename,
                file_hash,
            )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_inspection_ingestion_service(store: InspectionStore) -> InspectionIngestionService:
    """
    Build the ingestion service around an injected store with env-driven settings.
    """

    settings = get_inspection_ingestion_settings()
    return InspectionIngestionService(
        store=store,
        settings=settings,
        table=load_column_mapping_table(settings.column_map_path),
    )
