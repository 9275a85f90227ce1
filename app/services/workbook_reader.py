"""
app/services/workbook_reader.py

Reads an uploaded workbook into a header row plus numbered data rows.
"""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass, field
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from app.services.ingestion_errors import EmptyFileError, WorkbookStructureError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorksheetRow:
    row_number: int
    values: tuple[Any, ...]


@dataclass(frozen=True)
class WorkbookContent:
    sheet_name: str
    headers: list[str]
    rows: list[WorksheetRow] = field(default_factory=list)

    @property
    def total_columns(self) -> int:
        return len(self.headers)


def _is_blank_cell(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def read_workbook(content: bytes, *, sheet_name: str | None = None) -> WorkbookContent:
    """
    Load the first worksheet (or ``sheet_name``) of an .xlsx/.xlsm payload.

    Fully blank rows are skipped; row numbers keep their worksheet position
    so reported errors point at the right line.
    """

    try:
        workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise WorkbookStructureError(
            f"Workbook could not be opened: {exc}",
            details={"reason": type(exc).__name__},
        ) from exc

    try:
        if sheet_name is not None:
            if sheet_name not in workbook.sheetnames:
                raise WorkbookStructureError(
                    f"Worksheet '{sheet_name}' not found.",
                    details={"available_sheets": list(workbook.sheetnames)},
                )
            worksheet = workbook[sheet_name]
        else:
            if not workbook.sheetnames:
                raise EmptyFileError("Workbook has no worksheets.")
            worksheet = workbook[workbook.sheetnames[0]]

        row_iter = worksheet.iter_rows(values_only=True)
        header_values = next(row_iter, None)
        if header_values is None or all(_is_blank_cell(value) for value in header_values):
            raise EmptyFileError(
                "Worksheet has no header row.",
                details={"sheet_name": worksheet.title},
            )
        headers = ["" if value is None else str(value).strip() for value in header_values]

        rows: list[WorksheetRow] = []
        for row_number, values in enumerate(row_iter, start=2):
            if all(_is_blank_cell(value) for value in values):
                continue
            rows.append(WorksheetRow(row_number=row_number, values=tuple(values)))

        if not rows:
            raise EmptyFileError(
                "Worksheet has a header row but no data rows.",
                details={"sheet_name": worksheet.title},
            )

        logger.info(
            "Workbook read sheet=%s columns=%s rows=%s",
            worksheet.title,
            len(headers),
            len(rows),
        )
        return WorkbookContent(sheet_name=worksheet.title, headers=headers, rows=rows)
    finally:
        workbook.close()
