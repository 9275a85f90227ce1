"""
app/mappers/value_coercion.py

Pure converters from raw spreadsheet cells to canonical typed values.

Every function here is total: malformed input degrades to a documented
fallback instead of raising, so a single bad cell never aborts a row.
"""

from __future__ import annotations

import math
import re
import unicodedata
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser
from openpyxl.utils.datetime import from_excel

from app.domain.inspection import ComponentState, Shift

AFFIRMATIVE_TOKENS = frozenset(
    {"si", "sí", "yes", "true", "1", "ok", "cumple", "bueno", "correcto"}
)
NEGATIVE_TOKENS = frozenset(
    {"no", "false", "0", "malo", "incorrecto", "negativo", "no cumple"}
)

SHIFT_SYNONYMS: dict[str, str] = {
    "DIURNA": Shift.DAY,
    "DIURNO": Shift.DAY,
    "DÍA": Shift.DAY,
    "DIA": Shift.DAY,
    "DAY": Shift.DAY,
    "MAÑANA": Shift.DAY,
    "TARDE": Shift.DAY,
    "NOCTURNA": Shift.NIGHT,
    "NOCTURNO": Shift.NIGHT,
    "NOCHE": Shift.NIGHT,
    "NIGHT": Shift.NIGHT,
    "MADRUGADA": Shift.NIGHT,
}

COMPONENT_STATE_SYNONYMS: dict[str, str] = {
    "CUMPLE": ComponentState.GOOD,
    "BUENO": ComponentState.GOOD,
    "BUENA": ComponentState.GOOD,
    "EXCELENTE": ComponentState.GOOD,
    "OK": ComponentState.GOOD,
    "GOOD": ComponentState.GOOD,
    "REGULAR": ComponentState.FAIR,
    "ACEPTABLE": ComponentState.FAIR,
    "FAIR": ComponentState.FAIR,
    "NO CUMPLE": ComponentState.POOR,
    "MALO": ComponentState.POOR,
    "MALA": ComponentState.POOR,
    "DEFICIENTE": ComponentState.POOR,
    "DAÑADO": ComponentState.POOR,
    "POOR": ComponentState.POOR,
}

_WHITESPACE_RUN = re.compile(r"\s+")
_PLATE_SEPARATORS = re.compile(r"[\s\-]+")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_DAY_FIRST = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2}|\d{4})(?:[ T].*)?$")
_ISO_DAY = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[ T].*)?$")
_HAS_DIGIT = re.compile(r"\d")

# Two fallbacks differing in year, month and day expose any part dateutil filled in.
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

# Excel's serial range: 1 -> 1900-01-01, 2958465 -> 9999-12-31.
_MAX_EXCEL_SERIAL = 2958465


def clean_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    text = unicodedata.normalize("NFC", str(raw))
    return _WHITESPACE_RUN.sub(" ", text).strip()


def _token(raw: Any) -> str:
    return clean_text(raw).lower()


def coerce_boolean(raw: Any, default: bool = False) -> bool:
    """
    Map locale yes/no tokens to a bool, falling back to ``default``.
    """

    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        if raw == 1:
            return True
        if raw == 0:
            return False
        return default

    token = _token(raw)
    if token in AFFIRMATIVE_TOKENS:
        return True
    if token in NEGATIVE_TOKENS:
        return False
    return default


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _from_excel_serial(serial: float) -> date | None:
    if isinstance(serial, float) and not math.isfinite(serial):
        return None
    if serial < 1 or serial > _MAX_EXCEL_SERIAL:
        return None
    try:
        converted = from_excel(serial)
    except (OverflowError, ValueError):
        # Fractions that round up past 9999-12-31.
        return None
    if isinstance(converted, datetime):
        return converted.date()
    if isinstance(converted, date):
        return converted
    return None


def _parse_complete_date(text: str) -> date | None:
    try:
        first, second = (
            date_parser.parse(text, dayfirst=True, default=default).date()
            for default in _PARSE_DEFAULTS
        )
    except (ValueError, OverflowError):
        return None
    # Bare numbers like "2024" or "3" leave parts unfilled.
    return first if first == second else None


def coerce_date(raw: Any) -> date | None:
    """
    Convert a cell to a calendar date, or ``None`` when it cannot be read.

    Day-first ordering is assumed for ``dd/mm/yyyy`` and ``dd-mm-yyyy``.
    Two-digit years are read as 20xx.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, (int, float)):
        return _from_excel_serial(raw)

    text = clean_text(raw)
    if not text:
        return None

    match = _DAY_FIRST.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        if year < 100:
            year += 2000
        return _safe_date(year, month, day)

    match = _ISO_DAY.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    if not _HAS_DIGIT.search(text):
        return None
    return _parse_complete_date(text)


def coerce_number(raw: Any) -> float:
    """
    Parse a noisy numeric cell such as ``"85,000 km"``; returns 0 on failure.
    """

    if isinstance(raw, bool) or raw is None:
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0

    stripped = _NON_NUMERIC.sub("", str(raw))
    try:
        value = float(stripped)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def coerce_mileage(raw: Any) -> int:
    """
    Non-negative integer odometer reading.
    """

    return max(0, int(coerce_number(raw)))


def normalize_plate(raw: Any) -> str:
    if raw is None:
        return ""
    return _PLATE_SEPARATORS.sub("", str(raw).upper())


def normalize_shift(raw: Any) -> str:
    text = clean_text(raw).upper()
    if not text:
        return Shift.UNSPECIFIED
    return SHIFT_SYNONYMS.get(text, text)


def normalize_component_state(raw: Any) -> str:
    text = clean_text(raw).upper()
    return COMPONENT_STATE_SYNONYMS.get(text, ComponentState.NOT_INSPECTED)


def optional_text(raw: Any) -> str | None:
    text = clean_text(raw)
    return text or None


def is_blank(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, str):
        return not raw.strip()
    return False
