"""
app/services/ingestion_errors.py

File-level failures raised by the workbook ingestion pipeline.

Row-level problems are never raised; they are accumulated in the
processing result. Only the conditions below abort a whole file.
"""

from __future__ import annotations

from typing import Any


class IngestionErrorCode:
    DUPLICATE_FILE = "DUPLICATE_FILE"
    NO_DATE_COLUMN = "NO_DATE_COLUMN"
    EMPTY_FILE = "EMPTY_FILE"
    STRUCTURAL_ERROR = "STRUCTURAL_ERROR"


class InspectionIngestionError(Exception):
    """
    Base class for failures that abort ingestion of a whole workbook.
    """

    code: str = IngestionErrorCode.STRUCTURAL_ERROR

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class DuplicateFileError(InspectionIngestionError):
    code = IngestionErrorCode.DUPLICATE_FILE


class NoDateColumnError(InspectionIngestionError):
    code = IngestionErrorCode.NO_DATE_COLUMN


class EmptyFileError(InspectionIngestionError):
    code = IngestionErrorCode.EMPTY_FILE


class WorkbookStructureError(InspectionIngestionError):
    code = IngestionErrorCode.STRUCTURAL_ERROR
