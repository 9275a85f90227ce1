"""
db/models/inspection.py

Persisted vehicle inspection, one row per unique (date, driver, plate).
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, Index, Integer, SmallInteger, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

NATURAL_KEY_CONSTRAINT = "uq_inspections_natural_key"


class Inspection(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "inspections"

    inspection_date: Mapped[date] = mapped_column(Date, nullable=False)
    year: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    month: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    shift: Mapped[str] = mapped_column(String(32), nullable=False)
    driver_name: Mapped[str] = mapped_column(String(255), nullable=False)
    driver_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    vehicle_plate: Mapped[str] = mapped_column(String(16), nullable=False)
    contract: Mapped[str] = mapped_column(String(255), nullable=False)
    field_or_site: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    mileage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    has_used_medication: Mapped[bool] = mapped_column(Boolean, nullable=False)
    had_sufficient_sleep: Mapped[bool] = mapped_column(Boolean, nullable=False)
    is_free_of_fatigue_symptoms: Mapped[bool] = mapped_column(Boolean, nullable=False)
    is_fit_to_drive: Mapped[bool] = mapped_column(Boolean, nullable=False)

    headlights: Mapped[bool] = mapped_column(Boolean, nullable=False)
    turn_signals: Mapped[bool] = mapped_column(Boolean, nullable=False)
    parking_lights: Mapped[bool] = mapped_column(Boolean, nullable=False)
    brake_lights: Mapped[bool] = mapped_column(Boolean, nullable=False)
    reverse_lights_alarm: Mapped[bool] = mapped_column(Boolean, nullable=False)
    windshield: Mapped[bool] = mapped_column(Boolean, nullable=False)
    horn: Mapped[bool] = mapped_column(Boolean, nullable=False)
    brakes: Mapped[bool] = mapped_column(Boolean, nullable=False)
    emergency_brake: Mapped[bool] = mapped_column(Boolean, nullable=False)
    seatbelts: Mapped[bool] = mapped_column(Boolean, nullable=False)
    doors: Mapped[bool] = mapped_column(Boolean, nullable=False)
    windows: Mapped[bool] = mapped_column(Boolean, nullable=False)
    wipers: Mapped[bool] = mapped_column(Boolean, nullable=False)
    fire_extinguisher: Mapped[bool] = mapped_column(Boolean, nullable=False)
    first_aid_kit: Mapped[bool] = mapped_column(Boolean, nullable=False)
    dashboard_indicators: Mapped[bool] = mapped_column(Boolean, nullable=False)
    engine_oil: Mapped[bool] = mapped_column(Boolean, nullable=False)
    brake_fluid: Mapped[bool] = mapped_column(Boolean, nullable=False)
    steering_fluid: Mapped[bool] = mapped_column(Boolean, nullable=False)
    coolant: Mapped[bool] = mapped_column(Boolean, nullable=False)
    washer_fluid: Mapped[bool] = mapped_column(Boolean, nullable=False)
    drive_belts: Mapped[bool] = mapped_column(Boolean, nullable=False)
    battery: Mapped[bool] = mapped_column(Boolean, nullable=False)
    tire_tread: Mapped[bool] = mapped_column(Boolean, nullable=False)
    tire_sidewalls: Mapped[bool] = mapped_column(Boolean, nullable=False)
    spare_tire: Mapped[bool] = mapped_column(Boolean, nullable=False)
    suspension: Mapped[bool] = mapped_column(Boolean, nullable=False)
    steering_terminals: Mapped[bool] = mapped_column(Boolean, nullable=False)
    road_kit: Mapped[bool] = mapped_column(Boolean, nullable=False)
    documentation: Mapped[bool] = mapped_column(Boolean, nullable=False)

    tire_condition: Mapped[str] = mapped_column(String(16), nullable=False)
    mirror_condition: Mapped[str] = mapped_column(String(16), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    risk_level: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="LOW, MEDIUM, HIGH, CRITICAL",
    )
    inspection_score: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    has_critical_alert: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_warning: Mapped[bool] = mapped_column(Boolean, nullable=False)
    inspection_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="PENDING, APPROVED, WARNING, CRITICAL_ALERT",
    )

    source_row_number: Mapped[int] = mapped_column(Integer, nullable=False)
    source_file_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Hash of the workbook that produced the row",
    )
    processed_at: Mapped[datetime] = mapped_column(nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "inspection_date",
            "driver_name",
            "vehicle_plate",
            name=NATURAL_KEY_CONSTRAINT,
        ),
        Index("ix_inspections_year_month", "year", "month"),
        Index("ix_inspections_vehicle_plate", "vehicle_plate"),
        Index("ix_inspections_risk_level", "risk_level"),
        Index("ix_inspections_source_file_hash", "source_file_hash"),
        Index(
            "ix_inspections_critical_alert",
            "has_critical_alert",
            "inspection_date",
        ),
    )
