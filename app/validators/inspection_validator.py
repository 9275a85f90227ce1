"""
app/validators/inspection_validator.py

Required-field, format and business-logic validation for inspection records.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime, timezone

from dateutil.relativedelta import relativedelta

from app.domain.inspection import (
    InspectionRecord,
    IssueSeverity,
    Shift,
    ValidationIssue,
    ValidationOutcome,
)
from app.mappers.column_mapping import REQUIRED_FIELDS

PLATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^[A-Z]{3}\d{3}$"),
    re.compile(r"^[A-Z]{2}\d{4}$"),
    re.compile(r"^[A-Z]{3}\d{2}[A-Z]$"),
    re.compile(r"^[A-Z]{4}\d{2}$"),
)

PLACEHOLDER_PLATES = frozenset(
    {
        "ABC123",
        "AAA000",
        "XXX000",
        "XXX999",
        "ZZZ999",
        "ABC000",
        "AA0000",
        "XX0000",
        "NA",
        "N/A",
        "ND",
        "N/D",
        "SINPLACA",
        "NOAPLICA",
    }
)

_REPEATED_RUN = re.compile(r"(.)\1{3,}")
_CONTROL_OR_MARKUP = re.compile(r"[\x00-\x1f\x7f<>{}]")
_DRIVER_ID = re.compile(r"^\d{6,12}$")

MIN_DRIVER_NAME_LENGTH = 3


class IssueType:
    REQUIRED = "REQUIRED"
    INVALID_FORMAT = "INVALID_FORMAT"
    PLACEHOLDER_VALUE = "PLACEHOLDER_VALUE"
    REPEATED_CHARACTERS = "REPEATED_CHARACTERS"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    INVALID_NAME = "INVALID_NAME"
    NON_STANDARD_VALUE = "NON_STANDARD_VALUE"
    INCONSISTENCY = "INCONSISTENCY"
    ELEVATED_RISK = "ELEVATED_RISK"
    FUTURE_DATE = "FUTURE_DATE"


def _error(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, type=issue_type, message=message, severity=IssueSeverity.ERROR)


def _warning(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, type=issue_type, message=message, severity=IssueSeverity.WARNING)


class InspectionRecordValidator:
    """
    Produces structured errors and warnings for one record; never raises.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def validate(self, record: InspectionRecord) -> ValidationOutcome:
        missing = self.missing_required_fields(record)
        if missing:
            return ValidationOutcome(
                errors=[
                    _error(name, IssueType.REQUIRED, f"Required field '{name}' is missing.")
                    for name in missing
                ]
            )

        today = self._clock().date()
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        errors.extend(self._check_plate(record.vehicle_plate))
        errors.extend(self._check_date(record.date, today))
        errors.extend(self._check_driver_name(record.driver_name))

        if record.shift not in Shift.KNOWN:
            warnings.append(
                _warning(
                    "shift",
                    IssueType.NON_STANDARD_VALUE,
                    f"Shift '{record.shift}' is not a recognised day/night value.",
                )
            )
        if record.driver_id is not None and not _DRIVER_ID.match(record.driver_id):
            warnings.append(
                _warning(
                    "driver_id",
                    IssueType.INVALID_FORMAT,
                    "Driver id should contain 6 to 12 digits.",
                )
            )

        warnings.extend(self._business_warnings(record, today))
        return ValidationOutcome(errors=errors, warnings=warnings)

    @staticmethod
    def missing_required_fields(record: InspectionRecord) -> list[str]:
        missing: list[str] = []
        for name in REQUIRED_FIELDS:
            value = getattr(record, name)
            if value is None:
                missing.append(name)
            elif isinstance(value, str) and not value.strip():
                missing.append(name)
            elif name == "shift" and value == Shift.UNSPECIFIED:
                missing.append(name)
        return missing

    @staticmethod
    def _check_plate(plate: str) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if not any(pattern.match(plate) for pattern in PLATE_PATTERNS):
            issues.append(
                _error(
                    "vehicle_plate",
                    IssueType.INVALID_FORMAT,
                    f"Plate '{plate}' does not match any supported plate format.",
                )
            )
        if plate in PLACEHOLDER_PLATES:
            issues.append(
                _error(
                    "vehicle_plate",
                    IssueType.PLACEHOLDER_VALUE,
                    f"Plate '{plate}' is a placeholder value.",
                )
            )
        if _REPEATED_RUN.search(plate):
            issues.append(
                _error(
                    "vehicle_plate",
                    IssueType.REPEATED_CHARACTERS,
                    f"Plate '{plate}' repeats one character four or more times.",
                )
            )
        return issues

    @staticmethod
    def _check_date(value: date, today: date) -> list[ValidationIssue]:
        earliest = today - relativedelta(years=1)
        latest = today + relativedelta(months=1)
        if value < earliest or value > latest:
            return [
                _error(
                    "date",
                    IssueType.OUT_OF_RANGE,
                    f"Date {value.isoformat()} is outside {earliest.isoformat()}..{latest.isoformat()}.",
                )
            ]
        return []

    @staticmethod
    def _check_driver_name(name: str) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if len(name) < MIN_DRIVER_NAME_LENGTH:
            issues.append(
                _error(
                    "driver_name",
                    IssueType.INVALID_NAME,
                    f"Driver name must have at least {MIN_DRIVER_NAME_LENGTH} characters.",
                )
            )
        if name.replace(" ", "").isdigit():
            issues.append(
                _error("driver_name", IssueType.INVALID_NAME, "Driver name cannot be only digits.")
            )
        if _CONTROL_OR_MARKUP.search(name):
            issues.append(
                _error(
                    "driver_name",
                    IssueType.INVALID_NAME,
                    "Driver name contains control or markup characters.",
                )
            )
        return issues

    @staticmethod
    def _business_warnings(record: InspectionRecord, today: date) -> list[ValidationIssue]:
        warnings: list[ValidationIssue] = []
        if record.has_used_medication and record.is_fit_to_drive:
            warnings.append(
                _warning(
                    "has_used_medication",
                    IssueType.INCONSISTENCY,
                    "Medication use reported together with a declaration of fitness to drive.",
                )
            )
        failures = record.fatigue_failures()
        if failures >= 2:
            warnings.append(
                _warning(
                    "fatigue",
                    IssueType.ELEVATED_RISK,
                    f"{failures} fatigue checks failed at once.",
                )
            )
        if not record.had_sufficient_sleep and record.is_free_of_fatigue_symptoms:
            warnings.append(
                _warning(
                    "had_sufficient_sleep",
                    IssueType.INCONSISTENCY,
                    "Insufficient sleep reported without any fatigue symptoms.",
                )
            )
        if record.date is not None and record.date > today:
            warnings.append(
                _warning(
                    "date",
                    IssueType.FUTURE_DATE,
                    f"Inspection date {record.date.isoformat()} is in the future.",
                )
            )
        return warnings
