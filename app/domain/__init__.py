"""
app/domain package marker.
"""

from app.domain.inspection import (
    AlertDescriptor,
    FileAnalysis,
    InspectionRecord,
    PeriodInfo,
    ProcessingResult,
    RowValidationFailure,
    ValidationIssue,
    ValidationOutcome,
)

__all__ = [
    "AlertDescriptor",
    "FileAnalysis",
    "InspectionRecord",
    "PeriodInfo",
    "ProcessingResult",
    "RowValidationFailure",
    "ValidationIssue",
    "ValidationOutcome",
]
