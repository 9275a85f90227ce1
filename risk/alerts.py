"""
risk/alerts.py

Single highest-priority alert per inspection record.
"""

from __future__ import annotations

from app.domain.inspection import AlertDescriptor, InspectionRecord, RiskLevel


class AlertType:
    MEDICATION = "MEDICATION"
    MULTIPLE_FATIGUE = "MULTIPLE_FATIGUE"
    UNSAFE_VEHICLE = "UNSAFE_VEHICLE"


class AlertAction:
    SUSPEND_IMMEDIATELY = "SUSPEND_IMMEDIATELY"
    MEDICAL_EVALUATION = "MEDICAL_EVALUATION"
    REPAIR_BEFORE_USE = "REPAIR_BEFORE_USE"


_UNSAFE_VEHICLE_CHECKS: tuple[tuple[str, str], ...] = (
    ("brakes", "brakes"),
    ("seatbelts", "seatbelts"),
    ("headlights", "lights"),
)


class AlertDetector:
    """
    Evaluates alert conditions in priority order; the first match wins.
    """

    FATIGUE_FAILURE_THRESHOLD: int = 2

    def detect(self, record: InspectionRecord) -> AlertDescriptor | None:
        if record.has_used_medication:
            return self._alert(
                record,
                alert_type=AlertType.MEDICATION,
                level=RiskLevel.CRITICAL,
                message=(
                    f"Driver {record.driver_name} reported medication or substance use "
                    "affecting alertness."
                ),
                action=AlertAction.SUSPEND_IMMEDIATELY,
            )

        failures = record.fatigue_failures()
        if failures >= self.FATIGUE_FAILURE_THRESHOLD:
            return self._alert(
                record,
                alert_type=AlertType.MULTIPLE_FATIGUE,
                level=RiskLevel.HIGH,
                message=f"Driver {record.driver_name} failed {failures} fatigue checks.",
                action=AlertAction.MEDICAL_EVALUATION,
            )

        failed = [label for name, label in _UNSAFE_VEHICLE_CHECKS if not getattr(record, name)]
        if failed:
            return self._alert(
                record,
                alert_type=AlertType.UNSAFE_VEHICLE,
                level=RiskLevel.MEDIUM,
                message=f"Vehicle {record.vehicle_plate} failed: {', '.join(failed)}.",
                action=AlertAction.REPAIR_BEFORE_USE,
            )
        return None

    @staticmethod
    def _alert(
        record: InspectionRecord,
        *,
        alert_type: str,
        level: str,
        message: str,
        action: str,
    ) -> AlertDescriptor:
        return AlertDescriptor(
            alert_type=alert_type,
            level=level,
            message=message,
            required_action=action,
            driver_name=record.driver_name,
            vehicle_plate=record.vehicle_plate,
            row_number=record.row_number,
            inspection_date=record.date,
        )
