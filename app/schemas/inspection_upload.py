"""
app/schemas/inspection_upload.py

Response schemas for workbook upload endpoints.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


class PeriodInfoResponse(BaseModel):
    date_column: str
    date_column_index: int = Field(..., ge=0)
    min_date: date
    max_date: date
    years: list[int]
    months: list[int]
    detected_year: int
    scanned_rows: int = Field(..., ge=0)
    is_annual: bool
    is_monthly: bool
    period_type: str


class ValidationIssueResponse(BaseModel):
    field: str
    type: str
    message: str
    severity: str


class RowValidationFailureResponse(BaseModel):
    """
    API response model for one rejected row.
    """

    row_number: int = Field(..., ge=1)
    driver_name: str | None = None
    vehicle_plate: str | None = None
    issues: list[ValidationIssueResponse] = Field(default_factory=list)


class AlertResponse(BaseModel):
    alert_type: str
    level: str
    message: str
    required_action: str
    driver_name: str
    vehicle_plate: str
    row_number: int
    inspection_date: date | None = None


class FileAnalysisResponse(BaseModel):
    """
    API response model for a workbook preview.
    """

    filename: str
    file_hash: str
    sheet_name: str
    total_rows: int = Field(..., ge=0)
    total_columns: int = Field(..., ge=0)
    headers: list[str]
    period: PeriodInfoResponse
    column_mapping: dict[str, str]
    unmapped_headers: list[str]
    missing_required_fields: list[str]
    sample_rows: list[dict[str, Any]]
    estimated_processing_seconds: int = Field(..., ge=0)
    already_processed: bool
    existing_period_records: int = Field(..., ge=0)
    warnings: list[str] = Field(default_factory=list)


class ProcessingResultResponse(BaseModel):
    """
    API response model for a completed workbook ingestion.
    """

    success: bool
    filename: str
    file_hash: str
    total_records: int = Field(..., ge=0)
    new_records: int = Field(..., ge=0)
    duplicate_records: int = Field(..., ge=0)
    error_records: int = Field(..., ge=0)
    processing_time_seconds: float = Field(..., ge=0)
    period: PeriodInfoResponse
    validation_errors_sample: list[RowValidationFailureResponse] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    intra_file_duplicates: int = Field(0, ge=0)
    already_persisted_records: int = Field(0, ge=0)
    critical_alerts: list[AlertResponse] = Field(default_factory=list)
    critical_alert_count: int = Field(0, ge=0)
    processed_file_id: str | None = None
    is_reprocess: bool = False


class ProcessedFileResponse(BaseModel):
    id: str
    filename: str
    file_hash: str
    status: str
    is_reprocess: bool
    detected_year: int | None = None
    detected_months: list[int] | None = None
    total_records: int
    new_records: int
    duplicate_records: int
    error_records: int
    processing_seconds: float
    error_code: str | None = None
    error_message: str | None = None
    created_at: datetime | None = None


class UploadHistoryTotalsResponse(BaseModel):
    files: int = Field(..., ge=0)
    completed_files: int = Field(..., ge=0)
    failed_files: int = Field(..., ge=0)
    total_records: int = Field(..., ge=0)
    new_records: int = Field(..., ge=0)
    duplicate_records: int = Field(..., ge=0)
    error_records: int = Field(..., ge=0)


class UploadHistoryResponse(BaseModel):
    files: list[ProcessedFileResponse] = Field(default_factory=list)
    totals: UploadHistoryTotalsResponse
