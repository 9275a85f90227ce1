"""
app/services package marker.
"""

from app.services.ingestion_errors import (
    DuplicateFileError,
    EmptyFileError,
    InspectionIngestionError,
    NoDateColumnError,
    WorkbookStructureError,
)
from app.services.inspection_ingestion_service import (
    InspectionIngestionService,
    build_inspection_ingestion_service,
)

__all__ = [
    "DuplicateFileError",
    "EmptyFileError",
    "InspectionIngestionError",
    "InspectionIngestionService",
    "NoDateColumnError",
    "WorkbookStructureError",
    "build_inspection_ingestion_service",
]
