"""
app/schemas package marker.
"""

from app.schemas.inspection_upload import (
    FileAnalysisResponse,
    ProcessingResultResponse,
    UploadHistoryResponse,
)

__all__ = [
    "FileAnalysisResponse",
    "ProcessingResultResponse",
    "UploadHistoryResponse",
]
