"""
Repository layer exports.
"""

from db.repositories.errors import (
    DuplicateProcessedFileError,
    InspectionPersistenceError,
    InspectionQueryError,
    InspectionStoreError,
)
from db.repositories.processed_file_repository import ProcessedFileRepository
from db.repositories.types import InspectionCriteria, ProcessedFileInput, ProcessedFileTotals

__all__ = [
    "DuplicateProcessedFileError",
    "InspectionCriteria",
    "InspectionPersistenceError",
    "InspectionQueryError",
    "InspectionStoreError",
    "ProcessedFileInput",
    "ProcessedFileRepository",
    "ProcessedFileTotals",
]
