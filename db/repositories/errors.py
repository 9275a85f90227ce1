"""
Repository-layer exceptions for inspection storage.
"""

from __future__ import annotations


class InspectionStoreError(RuntimeError):
    """Base exception for inspection store failures."""


class InspectionPersistenceError(InspectionStoreError):
    """Raised when a write to the store fails and was rolled back."""


class InspectionQueryError(InspectionStoreError):
    """Raised when a read from the store fails."""


class DuplicateProcessedFileError(InspectionStoreError):
    """Raised when a completed processed-file record already exists for a hash."""

    def __init__(self, file_hash: str) -> None:
        super().__init__(f"A completed ingestion already exists for file hash {file_hash}.")
        self.file_hash = file_hash
