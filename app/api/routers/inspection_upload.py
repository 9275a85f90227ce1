"""
app/api/routers/inspection_upload.py

Workbook upload HTTP endpoints: preview, ingest and history.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import (
    get_excel_upload,
    get_inspection_ingestion_service,
    read_upload_bytes,
)
from app.domain.inspection import PeriodInfo
from app.schemas.inspection_upload import (
    AlertResponse,
    FileAnalysisResponse,
    PeriodInfoResponse,
    ProcessedFileResponse,
    ProcessingResultResponse,
    RowValidationFailureResponse,
    UploadHistoryResponse,
    UploadHistoryTotalsResponse,
)
from app.services.ingestion_errors import DuplicateFileError, InspectionIngestionError
from app.services.inspection_ingestion_service import InspectionIngestionService
from db.repositories.errors import InspectionStoreError

router = APIRouter(prefix="/upload", tags=["upload"])


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, DuplicateFileError):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=exc.to_dict(),
        ) from exc
    if isinstance(exc, InspectionIngestionError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Inspection store is unavailable.",
    ) from exc


def _period_response(period: PeriodInfo) -> PeriodInfoResponse:
    return PeriodInfoResponse(**period.to_dict())


@router.post("/validate", response_model=FileAnalysisResponse)
def validate_workbook(
    file: UploadFile = Depends(get_excel_upload),
    sheet_name: str | None = Query(default=None, description="Worksheet to read; defaults to the first"),
    service: InspectionIngestionService = Depends(get_inspection_ingestion_service),
) -> FileAnalysisResponse:
    """
    Preview a workbook: headers, detected period, column mapping and sample rows.
    """

    try:
        content = read_upload_bytes(file)
        analysis = service.analyze_file(content, file.filename or "upload.xlsx", sheet_name=sheet_name)
    except (InspectionIngestionError, InspectionStoreError) as exc:
        _raise_http(exc)
    finally:
        file.file.close()

    return FileAnalysisResponse(
        filename=analysis.filename,
        file_hash=analysis.file_hash,
        sheet_name=analysis.sheet_name,
        total_rows=analysis.total_rows,
        total_columns=analysis.total_columns,
        headers=analysis.headers,
        period=_period_response(analysis.period),
        column_mapping=analysis.column_mapping,
        unmapped_headers=analysis.unmapped_headers,
        missing_required_fields=analysis.missing_required_fields,
        sample_rows=analysis.sample_rows,
        estimated_processing_seconds=analysis.estimated_processing_seconds,
        already_processed=analysis.already_processed,
        existing_period_records=analysis.existing_period_records,
        warnings=analysis.warnings,
    )


@router.post("/excel", response_model=ProcessingResultResponse)
def upload_workbook(
    file: UploadFile = Depends(get_excel_upload),
    force_reprocess: bool = Query(default=False, description="Ingest even if identical bytes were processed"),
    sheet_name: str | None = Query(default=None, description="Worksheet to read; defaults to the first"),
    service: InspectionIngestionService = Depends(get_inspection_ingestion_service),
) -> ProcessingResultResponse:
    """
    Ingest one inspection workbook.
    """

    try:
        content = read_upload_bytes(file)
        result = service.process_file(
            content,
            file.filename or "upload.xlsx",
            force_reprocess=force_reprocess,
            sheet_name=sheet_name,
        )
    except (InspectionIngestionError, InspectionStoreError) as exc:
        _raise_http(exc)
    finally:
        file.file.close()

    return ProcessingResultResponse(
        success=result.success,
        filename=result.filename,
        file_hash=result.file_hash,
        total_records=result.total_records,
        new_records=result.new_records,
        duplicate_records=result.duplicate_records,
        error_records=result.error_records,
        processing_time_seconds=result.processing_time_seconds,
        period=_period_response(result.period),
        validation_errors_sample=[
            RowValidationFailureResponse(**failure.to_dict())
            for failure in result.validation_errors_sample
        ],
        warnings=result.warnings,
        intra_file_duplicates=result.intra_file_duplicates,
        already_persisted_records=result.already_persisted_records,
        critical_alerts=[AlertResponse(**asdict(alert)) for alert in result.critical_alerts],
        critical_alert_count=result.critical_alert_count,
        processed_file_id=result.processed_file_id,
        is_reprocess=result.is_reprocess,
    )


@router.get("/history", response_model=UploadHistoryResponse)
def upload_history(
    limit: int = Query(default=50, ge=1, le=500),
    year: int | None = Query(default=None, ge=2000, le=2100),
    status_filter: str | None = Query(default=None, alias="status"),
    service: InspectionIngestionService = Depends(get_inspection_ingestion_service),
) -> UploadHistoryResponse:
    """
    Recent ingestion attempts with aggregate counts.
    """

    try:
        history = service.list_history(
            limit=limit,
            year=year,
            status=status_filter.upper() if status_filter else None,
        )
    except InspectionStoreError as exc:
        _raise_http(exc)

    return UploadHistoryResponse(
        files=[
            ProcessedFileResponse(
                id=str(item.id),
                filename=item.filename,
                file_hash=item.file_hash,
                status=item.status,
                is_reprocess=bool(item.is_reprocess),
                detected_year=item.detected_year,
                detected_months=item.detected_months,
                total_records=item.total_records,
                new_records=item.new_records,
                duplicate_records=item.duplicate_records,
                error_records=item.error_records,
                processing_seconds=item.processing_seconds,
                error_code=item.error_code,
                error_message=item.error_message,
                created_at=item.created_at,
            )
            for item in history.files
        ],
        totals=UploadHistoryTotalsResponse(**asdict(history.totals)),
    )
