"""
db/models/processed_file.py

Audit record written once per workbook ingestion attempt.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, Float, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class ProcessedFile(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "processed_files"

    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 hex digest of the uploaded bytes",
    )
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="COMPLETED or ERROR",
    )
    is_reprocess: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    detected_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    detected_months: Mapped[list[int] | None] = mapped_column(JSONB, nullable=True)
    total_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    new_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duplicate_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processing_seconds: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    validation_errors: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Bounded sample of row validation failures",
    )
    warnings: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    error_code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_processed_files_file_hash", "file_hash"),
        Index("ix_processed_files_created_at", "created_at"),
        Index("ix_processed_files_detected_year", "detected_year"),
        Index(
            "uq_processed_files_completed_hash",
            "file_hash",
            unique=True,
            postgresql_where=text("status = 'COMPLETED' AND NOT is_reprocess"),
        ),
    )
