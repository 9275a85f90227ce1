"""
tests/test_value_coercion.py

Unit and property tests for the raw-cell converters.

Every converter must be total: arbitrary input produces a value of the
documented type and never raises.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from app.domain.inspection import ComponentState, Shift
from app.mappers.value_coercion import (
    clean_text,
    coerce_boolean,
    coerce_date,
    coerce_mileage,
    coerce_number,
    normalize_component_state,
    normalize_plate,
    normalize_shift,
    optional_text,
)

_ANY_CELL = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(),
    st.floats(allow_nan=True, allow_infinity=True),
    st.text(),
    st.dates(),
    st.datetimes(),
)


# ---------------------------------------------------------------------------
# Booleans
# ---------------------------------------------------------------------------


class TestCoerceBoolean:
    @pytest.mark.parametrize("raw", ["Sí", "si", " SI ", "yes", "TRUE", "1", "ok", "Cumple", "bueno"])
    def test_affirmative_tokens(self, raw: str) -> None:
        assert coerce_boolean(raw) is True

    @pytest.mark.parametrize("raw", ["No", "no", "FALSE", "0", "malo", "No cumple", "negativo"])
    def test_negative_tokens(self, raw: str) -> None:
        assert coerce_boolean(raw, default=True) is False

    def test_numbers_one_and_zero(self) -> None:
        assert coerce_boolean(1) is True
        assert coerce_boolean(1.0) is True
        assert coerce_boolean(0, default=True) is False

    def test_native_bool_passes_through(self) -> None:
        assert coerce_boolean(True) is True
        assert coerce_boolean(False, default=True) is False

    def test_decomposed_accent_is_recognised(self) -> None:
        assert coerce_boolean("Si\u0301") is True

    @pytest.mark.parametrize("raw", [None, "", "quizás", 7, "N/A"])
    def test_unrecognised_values_use_default(self, raw: object) -> None:
        assert coerce_boolean(raw) is False
        assert coerce_boolean(raw, default=True) is True

    @given(_ANY_CELL, st.booleans())
    def test_total(self, raw: object, default: bool) -> None:
        assert isinstance(coerce_boolean(raw, default=default), bool)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


class TestCoerceDate:
    def test_datetime_truncates_to_day(self) -> None:
        assert coerce_date(datetime(2024, 3, 15, 18, 45)) == date(2024, 3, 15)

    def test_date_passes_through(self) -> None:
        assert coerce_date(date(2024, 1, 2)) == date(2024, 1, 2)

    def test_day_first_with_slashes(self) -> None:
        assert coerce_date("05/03/2024") == date(2024, 3, 5)

    def test_day_first_with_dashes_and_time(self) -> None:
        assert coerce_date("05-03-2024 07:15:00") == date(2024, 3, 5)

    def test_two_digit_year_is_this_century(self) -> None:
        assert coerce_date("31/12/23") == date(2023, 12, 31)

    def test_iso_format(self) -> None:
        assert coerce_date("2024-03-15") == date(2024, 3, 15)

    def test_excel_serial(self) -> None:
        assert coerce_date(45366) == date(2024, 3, 15)

    def test_excel_serial_with_time_fraction(self) -> None:
        assert coerce_date(45366.75) == date(2024, 3, 15)

    @pytest.mark.parametrize("raw", [None, "", "sin fecha", "31/02/2024", "2024-13-01", 0, -5, True])
    def test_unreadable_values_are_none(self, raw: object) -> None:
        assert coerce_date(raw) is None

    @pytest.mark.parametrize("raw", ["2024", "3", "1.5", "March 2024", "Turno 2"])
    def test_incomplete_dates_are_not_filled_in(self, raw: str) -> None:
        assert coerce_date(raw) is None

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("March 5, 2024", date(2024, 3, 5)),
            ("15.03.2024", date(2024, 3, 15)),
            ("2024/03/15 08:00", date(2024, 3, 15)),
        ],
    )
    def test_free_text_dates(self, raw: str, expected: date) -> None:
        assert coerce_date(raw) == expected

    @given(st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 31)))
    def test_day_first_text_round_trips(self, value: date) -> None:
        assert coerce_date(value.strftime("%d/%m/%Y")) == value

    @given(_ANY_CELL)
    def test_total(self, raw: object) -> None:
        result = coerce_date(raw)
        assert result is None or isinstance(result, date)


# ---------------------------------------------------------------------------
# Numbers and text
# ---------------------------------------------------------------------------


class TestNumbersAndText:
    def test_noisy_number(self) -> None:
        assert coerce_number("85,000 km") == 85000.0

    def test_unparseable_number_is_zero(self) -> None:
        assert coerce_number("n/a") == 0.0
        assert coerce_number(None) == 0.0
        assert coerce_number(float("inf")) == 0.0

    def test_mileage_is_non_negative_integer(self) -> None:
        assert coerce_mileage("123456.7") == 123456
        assert coerce_mileage(-40) == 0

    def test_clean_text_collapses_whitespace(self) -> None:
        assert clean_text("  Juan   Pérez \n") == "Juan Pérez"

    def test_clean_text_drops_integral_float_suffix(self) -> None:
        assert clean_text(1020304.0) == "1020304"

    def test_optional_text(self) -> None:
        assert optional_text("   ") is None
        assert optional_text(" 123 ") == "123"

    @given(_ANY_CELL)
    def test_number_total(self, raw: object) -> None:
        assert isinstance(coerce_number(raw), float)
        assert coerce_mileage(raw) >= 0


# ---------------------------------------------------------------------------
# Plates, shifts, components
# ---------------------------------------------------------------------------


class TestNormalizers:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("abc-123", "ABC123"), (" klm 456 ", "KLM456"), ("Xy-12 3z", "XY123Z"), (None, "")],
    )
    def test_plate(self, raw: object, expected: str) -> None:
        assert normalize_plate(raw) == expected

    @given(st.text())
    def test_plate_is_idempotent(self, raw: str) -> None:
        once = normalize_plate(raw)
        assert normalize_plate(once) == once

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Diurno", Shift.DAY),
            ("DIURNA", Shift.DAY),
            ("man\u0303ana", Shift.DAY),
            ("mañana", Shift.DAY),
            ("Nocturno", Shift.NIGHT),
            ("noche", Shift.NIGHT),
            ("", Shift.UNSPECIFIED),
            (None, Shift.UNSPECIFIED),
        ],
    )
    def test_shift_synonyms(self, raw: object, expected: str) -> None:
        assert normalize_shift(raw) == expected

    def test_unknown_shift_passes_through_uppercased(self) -> None:
        assert normalize_shift("rotativo") == "ROTATIVO"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Bueno", ComponentState.GOOD),
            ("CUMPLE", ComponentState.GOOD),
            ("regular", ComponentState.FAIR),
            ("No cumple", ComponentState.POOR),
            ("dañado", ComponentState.POOR),
            ("", ComponentState.NOT_INSPECTED),
            ("???", ComponentState.NOT_INSPECTED),
        ],
    )
    def test_component_state(self, raw: str, expected: str) -> None:
        assert normalize_component_state(raw) == expected
