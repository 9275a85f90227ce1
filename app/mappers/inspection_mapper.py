"""
app/mappers/inspection_mapper.py

Maps one raw worksheet row into a fully-derived InspectionRecord.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import fields
from datetime import datetime, timezone
from typing import Any

from app.domain.inspection import InspectionRecord, Shift
from app.mappers.column_mapping import ColumnResolution, FieldSpec
from app.mappers.value_coercion import (
    clean_text,
    coerce_boolean,
    coerce_date,
    coerce_mileage,
    is_blank,
    normalize_component_state,
    normalize_plate,
    normalize_shift,
    optional_text,
)
from risk.derived_fields import DerivedFieldCalculator

_RECORD_ID_NAMESPACE = uuid.UUID("5f1c8c4e-8e0a-4a53-9a55-0f3b7c2d9e61")

_RECORD_FIELDS = frozenset(item.name for item in fields(InspectionRecord))

_COERCERS: dict[str, Callable[[Any], Any]] = {
    "date": coerce_date,
    "text": clean_text,
    "optional_text": optional_text,
    "plate": normalize_plate,
    "shift": normalize_shift,
    "integer": coerce_mileage,
    "component": normalize_component_state,
}


class RowStructureError(ValueError):
    """
    Raised when a row is not a sequence or mapping of cells.
    """

    def __init__(self, row_number: int, row_type: str) -> None:
        super().__init__(f"Row {row_number} is not readable as a list of cells ({row_type}).")
        self.row_number = row_number
        self.row_type = row_type


def _coerce(spec: FieldSpec, raw_value: Any) -> Any:
    if spec.type == "boolean":
        return coerce_boolean(raw_value, default=spec.default)
    return _COERCERS[spec.type](raw_value)


class InspectionRecordMapper:
    """
    Converts worksheet rows into canonical inspection records.
    """

    def __init__(
        self,
        *,
        calculator: DerivedFieldCalculator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._calculator = calculator or DerivedFieldCalculator()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def map_row(
        self,
        raw_row: Sequence[Any] | Mapping[str, Any],
        resolution: ColumnResolution,
        row_number: int,
        *,
        processed_at: datetime | None = None,
    ) -> InspectionRecord:
        if isinstance(raw_row, (str, bytes)) or not isinstance(raw_row, (Sequence, Mapping)):
            raise RowStructureError(row_number, type(raw_row).__name__)

        values: dict[str, Any] = {
            "date": None,
            "shift": Shift.UNSPECIFIED,
            "driver_name": "",
            "driver_id": None,
            "vehicle_plate": "",
            "contract": "",
            "field_or_site": "",
            "mileage": 0,
        }
        tracked = 0
        filled = 0
        for name, spec in resolution.specs.items():
            if name not in _RECORD_FIELDS:
                continue
            raw_value = resolution.value(raw_row, name)
            tracked += 1
            if not is_blank(raw_value):
                filled += 1
            values[name] = _coerce(spec, raw_value)

        inspection_date = values["date"]
        stamp = processed_at or self._clock()
        record = InspectionRecord(
            id=self._record_id(row_number, values),
            row_number=row_number,
            processed_at=stamp,
            year=inspection_date.year if inspection_date is not None else None,
            month=inspection_date.month if inspection_date is not None else None,
            completeness=filled / tracked if tracked else 0.0,
            **values,
        )
        return self._calculator.apply(record)

    @staticmethod
    def _record_id(row_number: int, values: Mapping[str, Any]) -> str:
        day = values["date"].isoformat() if values["date"] is not None else ""
        content = "|".join(
            (
                str(row_number),
                day,
                values["driver_name"],
                values["vehicle_plate"],
                str(time.time_ns()),
            )
        )
        return str(uuid.uuid5(_RECORD_ID_NAMESPACE, content))
