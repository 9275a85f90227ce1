"""
app/validators package marker.
"""

from app.validators.inspection_validator import InspectionRecordValidator, IssueType

__all__ = [
    "InspectionRecordValidator",
    "IssueType",
]
