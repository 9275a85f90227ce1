"""
risk/base.py

Abstract base interface for inspection scoring models.
All scoring model implementations must inherit from BaseRiskModel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.inspection import InspectionRecord


class BaseRiskModel(ABC):
    """Abstract base class for inspection scoring models.

    Every model reads the boolean and component fields of a canonical
    record and returns a number. Models never mutate the record.
    """

    @abstractmethod
    def compute(self, record: InspectionRecord) -> float:
        """Compute a score for one inspection record.

        Args:
            record: A mapped inspection record. Derived fields on it are
                    ignored.

        Returns:
            A float whose range is defined by the implementing subclass.
        """
        raise NotImplementedError("Subclasses must implement compute()")

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        return max(min_value, min(value, max_value))
