"""
risk/scoring.py

Fixed-weight scoring models for inspection records.

`WeightedRiskModel` accumulates risk points for failed checks and drives
the risk level. `InspectionScoreModel` deducts penalties from a perfect
100 and drives the inspection score.
"""

from __future__ import annotations

from app.domain.inspection import (
    VEHICLE_CHECK_FIELDS,
    ComponentState,
    InspectionRecord,
)
from risk.base import BaseRiskModel

# Checks whose failure makes a vehicle unsafe to operate.
SAFETY_CRITICAL_CHECKS: frozenset[str] = frozenset(
    {
        "brakes",
        "emergency_brake",
        "seatbelts",
        "headlights",
        "brake_lights",
        "turn_signals",
        "tire_tread",
        "tire_sidewalls",
        "steering_terminals",
        "suspension",
        "windshield",
        "wipers",
    }
)


def failed_vehicle_checks(record: InspectionRecord) -> list[str]:
    return [name for name in VEHICLE_CHECK_FIELDS if not getattr(record, name)]


def safety_defect_count(record: InspectionRecord) -> int:
    """Failed safety-critical checks plus components inspected as POOR."""
    failed = sum(1 for name in SAFETY_CRITICAL_CHECKS if not getattr(record, name))
    poor = sum(
        1
        for state in (record.tire_condition, record.mirror_condition)
        if state == ComponentState.POOR
    )
    return failed + poor


class WeightedRiskModel(BaseRiskModel):
    """Sums risk points for each failed check.

    Medication use is not weighted here: it overrides the risk level to
    CRITICAL before this model is consulted.
    """

    FATIGUE_POINTS: dict[str, float] = {
        "had_sufficient_sleep": 20.0,
        "is_free_of_fatigue_symptoms": 20.0,
        "is_fit_to_drive": 25.0,
    }

    VEHICLE_POINTS: dict[str, float] = {
        "brakes": 15.0,
        "seatbelts": 15.0,
        "emergency_brake": 10.0,
        "headlights": 8.0,
        "brake_lights": 8.0,
        "steering_terminals": 8.0,
        "tire_tread": 8.0,
        "tire_sidewalls": 6.0,
        "suspension": 6.0,
        "turn_signals": 5.0,
        "windshield": 4.0,
        "wipers": 4.0,
        "fire_extinguisher": 3.0,
        "first_aid_kit": 3.0,
        "road_kit": 3.0,
    }
    MINOR_VEHICLE_POINTS: float = 2.0

    COMPONENT_POINTS: dict[str, dict[str, float]] = {
        "tire_condition": {ComponentState.POOR: 10.0, ComponentState.FAIR: 4.0},
        "mirror_condition": {ComponentState.POOR: 5.0, ComponentState.FAIR: 2.0},
    }

    def compute(self, record: InspectionRecord) -> float:
        points = sum(
            weight
            for name, weight in self.FATIGUE_POINTS.items()
            if not getattr(record, name)
        )
        points += sum(
            self.VEHICLE_POINTS.get(name, self.MINOR_VEHICLE_POINTS)
            for name in failed_vehicle_checks(record)
        )
        for name, graded in self.COMPONENT_POINTS.items():
            points += graded.get(getattr(record, name), 0.0)
        return points


class InspectionScoreModel(BaseRiskModel):
    """Quality score on a 0-100 scale, higher is better.

    Starts from 100, subtracts a fixed penalty per failed check and a
    graded penalty per degraded component, then adds a completeness bonus
    proportional to the share of tracked fields that carried a value.
    """

    BASE_SCORE: float = 100.0
    MEDICATION_PENALTY: float = 50.0

    FATIGUE_PENALTIES: dict[str, float] = {
        "had_sufficient_sleep": 15.0,
        "is_free_of_fatigue_symptoms": 15.0,
        "is_fit_to_drive": 20.0,
    }

    VEHICLE_PENALTIES: dict[str, float] = {
        "brakes": 15.0,
        "seatbelts": 15.0,
        "headlights": 10.0,
        "emergency_brake": 10.0,
        "brake_lights": 8.0,
        "steering_terminals": 8.0,
        "tire_tread": 8.0,
        "tire_sidewalls": 6.0,
        "suspension": 6.0,
        "turn_signals": 5.0,
        "fire_extinguisher": 5.0,
        "first_aid_kit": 5.0,
        "road_kit": 5.0,
        "windshield": 4.0,
        "wipers": 4.0,
    }
    MINOR_VEHICLE_PENALTY: float = 2.0

    COMPONENT_PENALTIES: dict[str, dict[str, float]] = {
        "tire_condition": {ComponentState.POOR: 10.0, ComponentState.FAIR: 5.0},
        "mirror_condition": {ComponentState.POOR: 8.0, ComponentState.FAIR: 4.0},
    }

    COMPLETENESS_BONUS: float = 5.0

    def compute(self, record: InspectionRecord) -> float:
        score = self.BASE_SCORE
        if record.has_used_medication:
            score -= self.MEDICATION_PENALTY
        score -= sum(
            penalty
            for name, penalty in self.FATIGUE_PENALTIES.items()
            if not getattr(record, name)
        )
        score -= sum(
            self.VEHICLE_PENALTIES.get(name, self.MINOR_VEHICLE_PENALTY)
            for name in failed_vehicle_checks(record)
        )
        for name, graded in self.COMPONENT_PENALTIES.items():
            score -= graded.get(getattr(record, name), 0.0)

        completeness = self.clamp(record.completeness, 0.0, 1.0)
        score += self.COMPLETENESS_BONUS * completeness

        return float(round(self.clamp(score, 0.0, 100.0)))

