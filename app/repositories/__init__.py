"""
app/repositories package marker.
"""

from app.repositories.inspection_store import InspectionStore, SQLAlchemyInspectionStore

__all__ = [
    "InspectionStore",
    "SQLAlchemyInspectionStore",
]
