"""
app/mappers package marker.
"""

from app.mappers.column_mapping import (
    REQUIRED_FIELDS,
    ColumnMappingTable,
    ColumnMappingTableError,
    ColumnResolution,
    load_column_mapping_table,
)
from app.mappers.inspection_mapper import InspectionRecordMapper, RowStructureError

__all__ = [
    "REQUIRED_FIELDS",
    "ColumnMappingTable",
    "ColumnMappingTableError",
    "ColumnResolution",
    "InspectionRecordMapper",
    "RowStructureError",
    "load_column_mapping_table",
]
