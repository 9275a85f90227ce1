"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and service wiring.
"""

from __future__ import annotations

from pathlib import PurePath

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_upload_settings
from app.repositories.inspection_store import SQLAlchemyInspectionStore
from app.services.inspection_ingestion_service import (
    InspectionIngestionService,
    build_inspection_ingestion_service,
)
from db.session import get_db


def get_excel_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file has a supported workbook extension.
    """

    settings = get_upload_settings()
    suffix = PurePath((file.filename or "").strip().lower()).suffix
    if suffix not in settings.allowed_extensions:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Only {', '.join(settings.allowed_extensions)} workbooks are allowed.",
        )
    return file


def read_upload_bytes(file: UploadFile) -> bytes:
    """
    Read the upload into memory, enforcing the configured size limit.
    """

    limit = get_upload_settings().max_upload_bytes
    content = file.file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Workbook exceeds the {limit} byte upload limit.",
        )
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )
    return content


def get_inspection_ingestion_service(
    db: Session = Depends(get_db),
) -> InspectionIngestionService:
    return build_inspection_ingestion_service(SQLAlchemyInspectionStore(db))
