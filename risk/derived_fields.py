"""
risk/derived_fields.py

Computes the derived classification fields of an inspection record.
"""

from __future__ import annotations

from dataclasses import replace

from app.domain.inspection import InspectionRecord, InspectionStatus, RiskLevel
from risk.scoring import InspectionScoreModel, WeightedRiskModel, safety_defect_count


class DerivedFieldCalculator:
    """
    Fills risk level, score, alert flags and status on a mapped record.

    Thresholds are class constants so alternative policies can subclass.
    """

    HIGH_RISK_POINTS: float = 50.0
    MEDIUM_RISK_POINTS: float = 20.0
    HIGH_RISK_FATIGUE_FAILURES: int = 2
    MEDIUM_RISK_SAFETY_DEFECTS: int = 2
    CRITICAL_ALERT_FATIGUE_FAILURES: int = 2

    def __init__(
        self,
        *,
        risk_model: WeightedRiskModel | None = None,
        score_model: InspectionScoreModel | None = None,
    ) -> None:
        self._risk_model = risk_model or WeightedRiskModel()
        self._score_model = score_model or InspectionScoreModel()

    def risk_level(self, record: InspectionRecord) -> str:
        if record.has_used_medication:
            return RiskLevel.CRITICAL

        points = self._risk_model.compute(record)
        if (
            record.fatigue_failures() >= self.HIGH_RISK_FATIGUE_FAILURES
            or points >= self.HIGH_RISK_POINTS
        ):
            return RiskLevel.HIGH
        if (
            safety_defect_count(record) >= self.MEDIUM_RISK_SAFETY_DEFECTS
            or points >= self.MEDIUM_RISK_POINTS
        ):
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def inspection_score(self, record: InspectionRecord) -> int:
        return int(self._score_model.compute(record))

    def has_critical_alert(self, record: InspectionRecord) -> bool:
        return (
            record.has_used_medication
            or record.fatigue_failures() >= self.CRITICAL_ALERT_FATIGUE_FAILURES
        )

    @staticmethod
    def has_warning(record: InspectionRecord) -> bool:
        return record.fatigue_failures() > 0

    def apply(self, record: InspectionRecord) -> InspectionRecord:
        risk_level = self.risk_level(record)
        critical = self.has_critical_alert(record)
        warning = self.has_warning(record)

        if risk_level == RiskLevel.CRITICAL:
            status = InspectionStatus.CRITICAL_ALERT
        elif critical or warning:
            status = InspectionStatus.WARNING
        else:
            status = InspectionStatus.APPROVED

        return replace(
            record,
            risk_level=risk_level,
            inspection_score=self.inspection_score(record),
            has_critical_alert=critical,
            has_warning=warning,
            inspection_status=status,
        )
