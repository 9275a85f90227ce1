"""
app/mappers/column_mapping.py

Loader and per-file resolver for the inspection column mapping table.

The table itself lives in `inspection_columns.json`; supporting a new form
template only requires adding header literals there.
"""

from __future__ import annotations

import json
import unicodedata
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Sequence

FIELD_TYPES = frozenset(
    {"date", "text", "optional_text", "plate", "shift", "integer", "boolean", "component"}
)

REQUIRED_FIELDS: tuple[str, ...] = (
    "date",
    "driver_name",
    "vehicle_plate",
    "contract",
    "shift",
)

_DEFAULT_TABLE_PATH = Path(__file__).resolve().with_name("inspection_columns.json")


class ColumnMappingTableError(ValueError):
    """
    Raised when the mapping table file is malformed.
    """


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: str
    headers: tuple[str, ...]
    default: bool = False


@dataclass(frozen=True)
class ColumnResolution:
    """
    Canonical field accessors fixed against one workbook's header row.
    """

    headers: tuple[str, ...]
    field_to_index: dict[str, int]
    field_to_header: dict[str, str]
    specs: dict[str, FieldSpec]

    def value(self, raw_row: Sequence[Any] | Mapping[str, Any], field_name: str) -> Any:
        index = self.field_to_index.get(field_name)
        if index is None:
            return None
        if isinstance(raw_row, Mapping):
            return raw_row.get(self.headers[index])
        if index >= len(raw_row):
            return None
        return raw_row[index]

    def is_mapped(self, field_name: str) -> bool:
        return field_name in self.field_to_index

    @property
    def unmapped_headers(self) -> list[str]:
        used = set(self.field_to_index.values())
        return [
            header
            for index, header in enumerate(self.headers)
            if header and index not in used
        ]

    def missing_fields(self, field_names: Sequence[str] = REQUIRED_FIELDS) -> list[str]:
        return [name for name in field_names if name not in self.field_to_index]


@dataclass(frozen=True)
class ColumnMappingTable:
    version: int
    fields: dict[str, FieldSpec]

    def resolve(self, headers: Sequence[Any]) -> ColumnResolution:
        """
        Pick, per canonical field, the first listed header present in the file.
        """

        normalized = tuple(_header_text(header) for header in headers)
        first_index: dict[str, int] = {}
        for index, header in enumerate(normalized):
            if header and header not in first_index:
                first_index[header] = index

        field_to_index: dict[str, int] = {}
        field_to_header: dict[str, str] = {}
        for name, spec in self.fields.items():
            for candidate in spec.headers:
                index = first_index.get(candidate)
                if index is not None:
                    field_to_index[name] = index
                    field_to_header[name] = normalized[index]
                    break

        return ColumnResolution(
            headers=normalized,
            field_to_index=field_to_index,
            field_to_header=field_to_header,
            specs=dict(self.fields),
        )


def _header_text(header: Any) -> str:
    if header is None:
        return ""
    # Composed form, so decomposed accents still match the table.
    return unicodedata.normalize("NFC", str(header)).strip()


def parse_column_mapping_table(raw_data: Mapping[str, Any]) -> ColumnMappingTable:
    version = raw_data.get("version")
    if not isinstance(version, int):
        raise ColumnMappingTableError("Column mapping table requires an integer 'version'.")

    raw_fields = raw_data.get("fields")
    if not isinstance(raw_fields, dict) or not raw_fields:
        raise ColumnMappingTableError("Column mapping table requires a non-empty 'fields' object.")

    fields: dict[str, FieldSpec] = {}
    for name, entry in raw_fields.items():
        if not isinstance(entry, dict):
            raise ColumnMappingTableError(f"Field '{name}' must be an object.")
        field_type = entry.get("type")
        if field_type not in FIELD_TYPES:
            raise ColumnMappingTableError(f"Field '{name}' has unsupported type '{field_type}'.")
        headers = entry.get("headers")
        if not isinstance(headers, list) or not all(isinstance(item, str) for item in headers):
            raise ColumnMappingTableError(f"Field '{name}' headers must be a list of strings.")
        fields[name] = FieldSpec(
            name=name,
            type=field_type,
            headers=tuple(filter(None, (_header_text(item) for item in headers))),
            default=bool(entry.get("default", False)),
        )

    missing_required = [name for name in REQUIRED_FIELDS if name not in fields]
    if missing_required:
        raise ColumnMappingTableError(
            f"Column mapping table is missing required fields: {missing_required}"
        )
    return ColumnMappingTable(version=version, fields=fields)


@lru_cache(maxsize=4)
def load_column_mapping_table(path: str | None = None) -> ColumnMappingTable:
    """
    Load and cache the column mapping table from JSON.
    """

    table_path = Path(path) if path else _DEFAULT_TABLE_PATH
    if not table_path.exists():
        raise FileNotFoundError(f"Column mapping table not found: {table_path}")
    return parse_column_mapping_table(json.loads(table_path.read_text(encoding="utf-8")))
