"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class InspectionIngestionSettings:
    """
    Runtime settings for workbook ingestion.
    """

    batch_size: int = 500
    error_sample_size: int = 10
    alert_sample_size: int = 20
    progress_interval: int = 1000
    period_scan_rows: int = 100
    log_validation_errors: bool = True
    column_map_path: str | None = None


@dataclass(frozen=True)
class UploadSettings:
    """
    Limits applied to uploaded workbooks before they reach the pipeline.
    """

    max_upload_bytes: int = 50 * 1024 * 1024
    allowed_extensions: tuple[str, ...] = (".xlsx", ".xlsm")


@lru_cache(maxsize=1)
def get_inspection_ingestion_settings() -> InspectionIngestionSettings:
    """
    Return cached ingestion settings from environment variables.
    """

    return InspectionIngestionSettings(
        batch_size=max(1, _get_int_env("INSPECTION_BATCH_SIZE", 500)),
        error_sample_size=max(1, _get_int_env("INSPECTION_ERROR_SAMPLE_SIZE", 10)),
        alert_sample_size=max(1, _get_int_env("INSPECTION_ALERT_SAMPLE_SIZE", 20)),
        progress_interval=max(1, _get_int_env("INSPECTION_PROGRESS_INTERVAL", 1000)),
        period_scan_rows=max(1, _get_int_env("INSPECTION_PERIOD_SCAN_ROWS", 100)),
        log_validation_errors=_get_bool_env("INSPECTION_LOG_VALIDATION_ERRORS", True),
        column_map_path=_get_optional_str_env("INSPECTION_COLUMN_MAP_PATH"),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload limits from environment variables.
    """

    return UploadSettings(
        max_upload_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", 50 * 1024 * 1024)),
    )
