"""
tests/test_inspection_mapper.py

Row-to-record mapping: coercion per field type, explicit boolean
defaults, completeness and derived fields.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from app.domain.inspection import (
    ComponentState,
    InspectionStatus,
    RiskLevel,
    Shift,
)
from app.mappers.column_mapping import ColumnResolution, load_column_mapping_table
from app.mappers.inspection_mapper import InspectionRecordMapper, RowStructureError
from tests.factories import FIXED_NOW, fixed_clock, inspection_row


def _resolve(fields: list[str]) -> tuple[ColumnResolution, list[str]]:
    table = load_column_mapping_table()
    headers = [table.fields[name].headers[0] for name in fields]
    return table.resolve(headers), headers


def _as_cells(row: dict[str, Any], fields: list[str]) -> tuple[Any, ...]:
    return tuple(row.get(name) for name in fields)


@pytest.fixture()
def mapper() -> InspectionRecordMapper:
    return InspectionRecordMapper(clock=fixed_clock)


@pytest.fixture()
def all_fields() -> list[str]:
    return list(load_column_mapping_table().fields)


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestMapRow:
    def test_clean_row_is_approved(self, mapper: InspectionRecordMapper, all_fields: list[str]) -> None:
        resolution, _ = _resolve(all_fields)
        record = mapper.map_row(_as_cells(inspection_row(), all_fields), resolution, 2)

        assert record.row_number == 2
        assert record.date == date(2024, 3, 1)
        assert (record.year, record.month) == (2024, 3)
        assert record.shift == Shift.DAY
        assert record.vehicle_plate == "KLM456"
        assert record.driver_id == "10203040"
        assert record.mileage == 85000
        assert record.tire_condition == ComponentState.GOOD
        assert record.processed_at == FIXED_NOW
        assert record.risk_level == RiskLevel.LOW
        assert record.inspection_status == InspectionStatus.APPROVED
        assert record.inspection_score == 100
        assert record.has_critical_alert is False
        assert record.has_warning is False

    def test_mapping_rows_accept_header_keys(self, mapper: InspectionRecordMapper, all_fields: list[str]) -> None:
        resolution, headers = _resolve(all_fields)
        row = inspection_row(vehicle_plate="xyz-789")
        by_header = {header: row.get(name) for name, header in zip(all_fields, headers)}

        record = mapper.map_row(by_header, resolution, 5)

        assert record.vehicle_plate == "XYZ789"
        assert record.row_number == 5

    def test_medication_makes_record_critical(self, mapper: InspectionRecordMapper, all_fields: list[str]) -> None:
        resolution, _ = _resolve(all_fields)
        row = inspection_row(has_used_medication="Sí")

        record = mapper.map_row(_as_cells(row, all_fields), resolution, 3)

        assert record.risk_level == RiskLevel.CRITICAL
        assert record.has_critical_alert is True
        assert record.inspection_status == InspectionStatus.CRITICAL_ALERT

    def test_record_ids_are_unique_per_call(self, mapper: InspectionRecordMapper, all_fields: list[str]) -> None:
        resolution, _ = _resolve(all_fields)
        cells = _as_cells(inspection_row(), all_fields)

        first = mapper.map_row(cells, resolution, 2)
        second = mapper.map_row(cells, resolution, 2)

        assert first.id != second.id
        assert first.natural_key() == second.natural_key()


# ---------------------------------------------------------------------------
# Defaults and completeness
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_unmapped_booleans_take_declared_defaults(self, mapper: InspectionRecordMapper) -> None:
        fields = ["date", "driver_name", "vehicle_plate", "contract", "shift"]
        resolution, _ = _resolve(fields)
        row = inspection_row()

        record = mapper.map_row(_as_cells(row, fields), resolution, 2)

        assert record.fire_extinguisher is True
        assert record.first_aid_kit is True
        assert record.road_kit is True
        assert record.brakes is False
        assert record.is_fit_to_drive is False
        assert record.has_used_medication is False
        assert record.tire_condition == ComponentState.NOT_INSPECTED
        assert record.mileage == 0

    def test_unreadable_boolean_cell_falls_back_to_default(
        self,
        mapper: InspectionRecordMapper,
        all_fields: list[str],
    ) -> None:
        resolution, _ = _resolve(all_fields)
        row = inspection_row(fire_extinguisher="no sé", brakes="no sé")

        record = mapper.map_row(_as_cells(row, all_fields), resolution, 2)

        assert record.fire_extinguisher is True
        assert record.brakes is False

    def test_completeness_counts_filled_cells(self, mapper: InspectionRecordMapper) -> None:
        fields = ["date", "driver_name", "vehicle_plate", "contract", "shift"]
        resolution, _ = _resolve(fields)
        row = inspection_row(contract="", shift=None)

        record = mapper.map_row(_as_cells(row, fields), resolution, 2)

        tracked = len(load_column_mapping_table().fields)
        assert record.completeness == pytest.approx(3 / tracked)
        assert record.shift == Shift.UNSPECIFIED

    def test_short_row_reads_missing_cells_as_blank(self, mapper: InspectionRecordMapper, all_fields: list[str]) -> None:
        resolution, _ = _resolve(all_fields)
        cells = _as_cells(inspection_row(), all_fields)[:3]

        record = mapper.map_row(cells, resolution, 2)

        assert record.contract == ""
        assert record.date == date(2024, 3, 1)


# ---------------------------------------------------------------------------
# Structural failures
# ---------------------------------------------------------------------------


class TestStructuralFailures:
    @pytest.mark.parametrize("raw_row", ["a,b,c", b"bytes", 42, None])
    def test_non_row_values_raise(self, mapper: InspectionRecordMapper, raw_row: Any) -> None:
        resolution, _ = _resolve(["date", "driver_name", "vehicle_plate", "contract", "shift"])

        with pytest.raises(RowStructureError) as exc_info:
            mapper.map_row(raw_row, resolution, 9)

        assert exc_info.value.row_number == 9
