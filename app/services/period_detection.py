"""
app/services/period_detection.py

Locates the date column of a workbook and detects its reporting period.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from app.domain.inspection import PeriodInfo
from app.mappers.column_mapping import ColumnResolution
from app.mappers.value_coercion import coerce_date
from app.services.ingestion_errors import NoDateColumnError
from app.services.workbook_reader import WorksheetRow

DATE_HEADER_KEYWORDS: tuple[str, ...] = ("marca temporal", "fecha", "date", "día", "dia")


def locate_date_column(headers: Sequence[str], resolution: ColumnResolution) -> tuple[int, str]:
    """
    Return ``(index, header)`` of the date column.

    The mapping table wins; otherwise the first header containing a date
    keyword is used.
    """

    index = resolution.field_to_index.get("date")
    if index is not None:
        return index, headers[index]

    for position, header in enumerate(headers):
        lowered = header.lower()
        if any(keyword in lowered for keyword in DATE_HEADER_KEYWORDS):
            return position, header

    raise NoDateColumnError(
        "No date column could be identified in the header row.",
        details={"headers": list(headers)},
    )


def detect_period(
    rows: Sequence[WorksheetRow],
    *,
    date_column_index: int,
    date_column: str,
    max_dated_rows: int = 100,
) -> PeriodInfo:
    """
    Scan rows until ``max_dated_rows`` parseable dates are found.

    Rows whose date cannot be read are skipped. The most recent year seen
    becomes the detected year.
    """

    dates: list[date] = []
    scanned = 0
    for row in rows:
        if len(dates) >= max_dated_rows:
            break
        scanned += 1
        if date_column_index >= len(row.values):
            continue
        parsed = coerce_date(row.values[date_column_index])
        if parsed is not None:
            dates.append(parsed)

    if not dates:
        raise NoDateColumnError(
            f"Date column '{date_column}' has no readable dates.",
            details={"date_column": date_column, "scanned_rows": scanned},
        )

    years = sorted({value.year for value in dates})
    months = sorted({value.month for value in dates})
    return PeriodInfo(
        date_column=date_column,
        date_column_index=date_column_index,
        min_date=min(dates),
        max_date=max(dates),
        years=years,
        months=months,
        detected_year=years[-1],
        scanned_rows=scanned,
    )
