"""
app/domain/inspection.py

Domain models for the vehicle-inspection ingestion flow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any


class RiskLevel:
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Shift:
    DAY = "DAY"
    NIGHT = "NIGHT"
    UNSPECIFIED = "UNSPECIFIED"

    KNOWN = frozenset({DAY, NIGHT})


class ComponentState:
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    NOT_INSPECTED = "NOT_INSPECTED"


class InspectionStatus:
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    WARNING = "WARNING"
    CRITICAL_ALERT = "CRITICAL_ALERT"


class ProcessedFileStatus:
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class IssueSeverity:
    ERROR = "error"
    WARNING = "warning"


# Fatigue booleans where ``False`` is the failing answer.
FATIGUE_FITNESS_FIELDS: tuple[str, ...] = (
    "had_sufficient_sleep",
    "is_free_of_fatigue_symptoms",
    "is_fit_to_drive",
)

VEHICLE_CHECK_FIELDS: tuple[str, ...] = (
    "headlights",
    "turn_signals",
    "parking_lights",
    "brake_lights",
    "reverse_lights_alarm",
    "windshield",
    "horn",
    "brakes",
    "emergency_brake",
    "seatbelts",
    "doors",
    "windows",
    "wipers",
    "fire_extinguisher",
    "first_aid_kit",
    "dashboard_indicators",
    "engine_oil",
    "brake_fluid",
    "steering_fluid",
    "coolant",
    "washer_fluid",
    "drive_belts",
    "battery",
    "tire_tread",
    "tire_sidewalls",
    "spare_tire",
    "suspension",
    "steering_terminals",
    "road_kit",
    "documentation",
)

COMPONENT_FIELDS: tuple[str, ...] = ("tire_condition", "mirror_condition")


@dataclass(frozen=True)
class InspectionRecord:
    """
    Canonical, fully-derived representation of one inspection row.

    Derived fields carry neutral defaults until the derived-field
    calculator replaces them; the mapper never returns a record in that
    intermediate state.
    """

    id: str
    row_number: int
    processed_at: datetime
    date: date | None
    year: int | None
    month: int | None
    shift: str
    driver_name: str
    driver_id: str | None
    vehicle_plate: str
    contract: str
    field_or_site: str
    mileage: int

    has_used_medication: bool = False
    had_sufficient_sleep: bool = False
    is_free_of_fatigue_symptoms: bool = False
    is_fit_to_drive: bool = False

    headlights: bool = False
    turn_signals: bool = False
    parking_lights: bool = False
    brake_lights: bool = False
    reverse_lights_alarm: bool = False
    windshield: bool = False
    horn: bool = False
    brakes: bool = False
    emergency_brake: bool = False
    seatbelts: bool = False
    doors: bool = False
    windows: bool = False
    wipers: bool = False
    fire_extinguisher: bool = False
    first_aid_kit: bool = False
    dashboard_indicators: bool = False
    engine_oil: bool = False
    brake_fluid: bool = False
    steering_fluid: bool = False
    coolant: bool = False
    washer_fluid: bool = False
    drive_belts: bool = False
    battery: bool = False
    tire_tread: bool = False
    tire_sidewalls: bool = False
    spare_tire: bool = False
    suspension: bool = False
    steering_terminals: bool = False
    road_kit: bool = False
    documentation: bool = False

    tire_condition: str = ComponentState.NOT_INSPECTED
    mirror_condition: str = ComponentState.NOT_INSPECTED

    notes: str = ""
    completeness: float = 0.0
    source_file_hash: str = ""

    risk_level: str = RiskLevel.LOW
    inspection_score: int = 0
    has_critical_alert: bool = False
    has_warning: bool = False
    inspection_status: str = InspectionStatus.PENDING

    def natural_key(self) -> tuple[str, str, str]:
        """
        Composite key used to drop repeated rows within one file.
        """

        day = self.date.isoformat() if self.date is not None else ""
        return (day, self.driver_name, self.vehicle_plate)

    def fatigue_failures(self) -> int:
        return sum(1 for name in FATIGUE_FITNESS_FIELDS if not getattr(self, name))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ValidationIssue:
    """
    One structured validation finding for a record field.
    """

    field: str
    type: str
    message: str
    severity: str = IssueSeverity.ERROR


@dataclass(frozen=True)
class ValidationOutcome:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class RowValidationFailure:
    """
    Row-level failure captured for the processing report.
    """

    row_number: int
    issues: list[ValidationIssue]
    driver_name: str | None = None
    vehicle_plate: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_number": self.row_number,
            "driver_name": self.driver_name,
            "vehicle_plate": self.vehicle_plate,
            "issues": [asdict(issue) for issue in self.issues],
        }


@dataclass(frozen=True)
class AlertDescriptor:
    """
    Single highest-priority alert raised for one inspection record.
    """

    alert_type: str
    level: str
    message: str
    required_action: str
    driver_name: str
    vehicle_plate: str
    row_number: int
    inspection_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["inspection_date"] = (
            self.inspection_date.isoformat() if self.inspection_date is not None else None
        )
        return payload


@dataclass(frozen=True)
class PeriodInfo:
    """
    Reporting period detected from the dated rows of a workbook.
    """

    date_column: str
    date_column_index: int
    min_date: date
    max_date: date
    years: list[int]
    months: list[int]
    detected_year: int
    scanned_rows: int

    @property
    def is_annual(self) -> bool:
        return len(self.months) > 3

    @property
    def is_monthly(self) -> bool:
        return len(self.months) == 1

    @property
    def period_type(self) -> str:
        if self.is_annual:
            return "ANNUAL"
        if self.is_monthly:
            return "MONTHLY"
        return "MULTI_MONTH"

    def to_dict(self) -> dict[str, Any]:
        return {
            "date_column": self.date_column,
            "date_column_index": self.date_column_index,
            "min_date": self.min_date.isoformat(),
            "max_date": self.max_date.isoformat(),
            "years": list(self.years),
            "months": list(self.months),
            "detected_year": self.detected_year,
            "scanned_rows": self.scanned_rows,
            "is_annual": self.is_annual,
            "is_monthly": self.is_monthly,
            "period_type": self.period_type,
        }


@dataclass(frozen=True)
class FileAnalysis:
    """
    Preview of a workbook produced without persisting anything.
    """

    filename: str
    file_hash: str
    sheet_name: str
    total_rows: int
    total_columns: int
    headers: list[str]
    period: PeriodInfo
    column_mapping: dict[str, str]
    unmapped_headers: list[str]
    missing_required_fields: list[str]
    sample_rows: list[dict[str, Any]]
    estimated_processing_seconds: int
    already_processed: bool
    existing_period_records: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BatchInsertResult:
    inserted_count: int


@dataclass(frozen=True)
class ProcessingResult:
    """
    End-of-run statistics for one ingested workbook.
    """

    success: bool
    filename: str
    file_hash: str
    total_records: int
    new_records: int
    duplicate_records: int
    error_records: int
    processing_time_seconds: float
    period: PeriodInfo
    validation_errors_sample: list[RowValidationFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    intra_file_duplicates: int = 0
    already_persisted_records: int = 0
    critical_alerts: list[AlertDescriptor] = field(default_factory=list)
    critical_alert_count: int = 0
    processed_file_id: str | None = None
    is_reprocess: bool = False
