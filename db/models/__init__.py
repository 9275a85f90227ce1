"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.inspection import Inspection
from db.models.processed_file import ProcessedFile

__all__ = [
    "Inspection",
    "ProcessedFile",
]
