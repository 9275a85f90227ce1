"""create inspections and processed_files tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

_CHECK_COLUMNS: tuple[str, ...] = (
    "has_used_medication",
    "had_sufficient_sleep",
    "is_free_of_fatigue_symptoms",
    "is_fit_to_drive",
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


def upgrade() -> None:
    op.create_table(
        "inspections",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("inspection_date", sa.Date(), nullable=False),
        sa.Column("year", sa.SmallInteger(), nullable=False),
        sa.Column("month", sa.SmallInteger(), nullable=False),
        sa.Column("shift", sa.String(length=32), nullable=False),
        sa.Column("driver_name", sa.String(length=255), nullable=False),
        sa.Column("driver_id", sa.String(length=32), nullable=True),
        sa.Column("vehicle_plate", sa.String(length=16), nullable=False),
        sa.Column("contract", sa.String(length=255), nullable=False),
        sa.Column("field_or_site", sa.String(length=255), nullable=False),
        sa.Column("mileage", sa.Integer(), nullable=False),
        *(sa.Column(name, sa.Boolean(), nullable=False) for name in _CHECK_COLUMNS),
        sa.Column("tire_condition", sa.String(length=16), nullable=False),
        sa.Column("mirror_condition", sa.String(length=16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("risk_level", sa.String(length=16), nullable=False, comment="LOW, MEDIUM, HIGH, CRITICAL"),
        sa.Column("inspection_score", sa.SmallInteger(), nullable=False),
        sa.Column("has_critical_alert", sa.Boolean(), nullable=False),
        sa.Column("has_warning", sa.Boolean(), nullable=False),
        sa.Column(
            "inspection_status",
            sa.String(length=32),
            nullable=False,
            comment="PENDING, APPROVED, WARNING, CRITICAL_ALERT",
        ),
        sa.Column("source_row_number", sa.Integer(), nullable=False),
        sa.Column(
            "source_file_hash",
            sa.String(length=64),
            nullable=False,
            comment="Hash of the workbook that produced the row",
        ),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "inspection_date",
            "driver_name",
            "vehicle_plate",
            name="uq_inspections_natural_key",
        ),
    )
    op.create_index("ix_inspections_year_month", "inspections", ["year", "month"], unique=False)
    op.create_index("ix_inspections_vehicle_plate", "inspections", ["vehicle_plate"], unique=False)
    op.create_index("ix_inspections_risk_level", "inspections", ["risk_level"], unique=False)
    op.create_index("ix_inspections_source_file_hash", "inspections", ["source_file_hash"], unique=False)
    op.create_index(
        "ix_inspections_critical_alert",
        "inspections",
        ["has_critical_alert", "inspection_date"],
        unique=False,
    )

    op.create_table(
        "processed_files",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column(
            "file_hash",
            sa.String(length=64),
            nullable=False,
            comment="SHA-256 hex digest of the uploaded bytes",
        ),
        sa.Column("status", sa.String(length=16), nullable=False, comment="COMPLETED or ERROR"),
        sa.Column("is_reprocess", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("detected_year", sa.Integer(), nullable=True),
        sa.Column("detected_months", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("total_records", sa.Integer(), nullable=False),
        sa.Column("new_records", sa.Integer(), nullable=False),
        sa.Column("duplicate_records", sa.Integer(), nullable=False),
        sa.Column("error_records", sa.Integer(), nullable=False),
        sa.Column("processing_seconds", sa.Float(), nullable=False),
        sa.Column(
            "validation_errors",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment="Bounded sample of row validation failures",
        ),
        sa.Column("warnings", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error_code", sa.String(length=32), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_processed_files_file_hash", "processed_files", ["file_hash"], unique=False)
    op.create_index("ix_processed_files_created_at", "processed_files", ["created_at"], unique=False)
    op.create_index("ix_processed_files_detected_year", "processed_files", ["detected_year"], unique=False)
    op.create_index(
        "uq_processed_files_completed_hash",
        "processed_files",
        ["file_hash"],
        unique=True,
        postgresql_where=sa.text("status = 'COMPLETED' AND NOT is_reprocess"),
    )


def downgrade() -> None:
    op.drop_index("uq_processed_files_completed_hash", table_name="processed_files")
    op.drop_index("ix_processed_files_detected_year", table_name="processed_files")
    op.drop_index("ix_processed_files_created_at", table_name="processed_files")
    op.drop_index("ix_processed_files_file_hash", table_name="processed_files")
    op.drop_table("processed_files")

    op.drop_index("ix_inspections_critical_alert", table_name="inspections")
    op.drop_index("ix_inspections_source_file_hash", table_name="inspections")
    op.drop_index("ix_inspections_risk_level", table_name="inspections")
    op.drop_index("ix_inspections_vehicle_plate", table_name="inspections")
    op.drop_index("ix_inspections_year_month", table_name="inspections")
    op.drop_table("inspections")
