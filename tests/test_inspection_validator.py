"""
tests/test_inspection_validator.py

Required-field short-circuit, format rules and business warnings.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.domain.inspection import IssueSeverity, Shift
from app.validators.inspection_validator import InspectionRecordValidator, IssueType
from tests.factories import fixed_clock, make_record


@pytest.fixture()
def validator() -> InspectionRecordValidator:
    return InspectionRecordValidator(clock=fixed_clock)


def _types(issues: list) -> list[str]:
    return [issue.type for issue in issues]


# ---------------------------------------------------------------------------
# Required fields
# ---------------------------------------------------------------------------


class TestRequiredFields:
    def test_clean_record_is_valid(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record())

        assert outcome.is_valid
        assert outcome.errors == []
        assert outcome.warnings == []

    def test_missing_fields_short_circuit_other_checks(self, validator: InspectionRecordValidator) -> None:
        record = make_record(vehicle_plate="", contract="  ", driver_name="1")

        outcome = validator.validate(record)

        assert [issue.field for issue in outcome.errors] == ["vehicle_plate", "contract"]
        assert set(_types(outcome.errors)) == {IssueType.REQUIRED}
        assert outcome.warnings == []

    def test_missing_date(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(date=None, year=None, month=None))

        assert [issue.field for issue in outcome.errors] == ["date"]

    def test_unspecified_shift_counts_as_missing(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(shift=Shift.UNSPECIFIED))

        assert [issue.field for issue in outcome.errors] == ["shift"]


# ---------------------------------------------------------------------------
# Plates
# ---------------------------------------------------------------------------


class TestPlates:
    @pytest.mark.parametrize("plate", ["KLM456", "AB1234", "XYZ12A", "ABCD12"])
    def test_supported_formats(self, validator: InspectionRecordValidator, plate: str) -> None:
        assert validator.validate(make_record(vehicle_plate=plate)).is_valid

    def test_unknown_format(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(vehicle_plate="K1"))

        assert _types(outcome.errors) == [IssueType.INVALID_FORMAT]

    def test_placeholder_plate(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(vehicle_plate="ABC123"))

        assert _types(outcome.errors) == [IssueType.PLACEHOLDER_VALUE]

    def test_repeated_characters(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(vehicle_plate="AAAA12"))

        assert _types(outcome.errors) == [IssueType.REPEATED_CHARACTERS]


# ---------------------------------------------------------------------------
# Dates and names
# ---------------------------------------------------------------------------


class TestDatesAndNames:
    def test_date_older_than_one_year(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(date=date(2023, 3, 14)))

        assert _types(outcome.errors) == [IssueType.OUT_OF_RANGE]

    def test_date_exactly_one_year_back_is_accepted(self, validator: InspectionRecordValidator) -> None:
        assert validator.validate(make_record(date=date(2023, 3, 15))).is_valid

    def test_date_more_than_one_month_ahead(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(date=date(2024, 4, 16)))

        assert _types(outcome.errors) == [IssueType.OUT_OF_RANGE]

    def test_near_future_date_is_only_a_warning(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(date=date(2024, 3, 20)))

        assert outcome.is_valid
        assert _types(outcome.warnings) == [IssueType.FUTURE_DATE]

    @pytest.mark.parametrize("name", ["Al", "12345", "Juan <script>", "Ana\x07"])
    def test_invalid_driver_names(self, validator: InspectionRecordValidator, name: str) -> None:
        outcome = validator.validate(make_record(driver_name=name))

        assert IssueType.INVALID_NAME in _types(outcome.errors)
        assert {issue.field for issue in outcome.errors} == {"driver_name"}


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------


class TestWarnings:
    def test_non_standard_shift(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(shift="ROTATIVO"))

        assert outcome.is_valid
        assert _types(outcome.warnings) == [IssueType.NON_STANDARD_VALUE]
        assert outcome.warnings[0].severity == IssueSeverity.WARNING

    def test_driver_id_format(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(driver_id="CC-12"))

        assert outcome.is_valid
        assert [issue.field for issue in outcome.warnings] == ["driver_id"]

    def test_medication_with_fitness_declaration(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(has_used_medication=True))

        assert outcome.is_valid
        assert _types(outcome.warnings) == [IssueType.INCONSISTENCY]

    def test_multiple_fatigue_failures(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(
            make_record(is_free_of_fatigue_symptoms=False, is_fit_to_drive=False)
        )

        assert _types(outcome.warnings) == [IssueType.ELEVATED_RISK]

    def test_insufficient_sleep_without_symptoms(self, validator: InspectionRecordValidator) -> None:
        outcome = validator.validate(make_record(had_sufficient_sleep=False))

        assert _types(outcome.warnings) == [IssueType.INCONSISTENCY]
        assert outcome.warnings[0].field == "had_sufficient_sleep"
