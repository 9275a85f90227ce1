"""
Typed DTOs used by the inspection storage layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProcessedFileInput:
    """
    Fields for one processed-file audit record.
    """

    filename: str
    file_hash: str
    status: str
    is_reprocess: bool = False
    detected_year: int | None = None
    detected_months: list[int] | None = None
    total_records: int = 0
    new_records: int = 0
    duplicate_records: int = 0
    error_records: int = 0
    processing_seconds: float = 0.0
    validation_errors: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_code: str | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class InspectionCriteria:
    """
    Filter for counting persisted inspections; unset fields do not filter.
    """

    year: int | None = None
    months: tuple[int, ...] | None = None


@dataclass(frozen=True)
class ProcessedFileTotals:
    files: int = 0
    completed_files: int = 0
    failed_files: int = 0
    total_records: int = 0
    new_records: int = 0
    duplicate_records: int = 0
    error_records: int = 0
