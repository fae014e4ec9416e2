"""xlsx import and export of sheets."""

import io
import logging
import re
import warnings
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Union

from openpyxl import Workbook, load_workbook

from .sheets.models import CellValue, Sheet, SheetData

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 31
FALLBACK_TITLE = "Sheet"
_INVALID_TITLE_CHARS = re.compile(r"[\\/?*\[\]:]")

WorkbookSource = Union[str, Path, bytes]


@contextmanager
def _open_workbook(source: WorkbookSource) -> Iterator[Any]:
    """Open a workbook with cached formula results and close it after use."""
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message="Conditional Formatting extension is not supported and will be removed",
            category=UserWarning,
            module="openpyxl",
        )
        wb = load_workbook(source, data_only=True)
    try:
        yield wb
    finally:
        wb.close()


def _cell_value(value: Any) -> CellValue:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


def _trim_row(row: list[CellValue]) -> list[CellValue]:
    while row and row[-1] is None:
        row.pop()
    return ["" if value is None else value for value in row]


def read_workbook(source: WorkbookSource) -> list[Sheet]:
    """
    Read every worksheet into a new Sheet.

    Imported sheets get fresh ids, no rules and no access codes. Trailing
    empty cells and rows are dropped.
    """
    sheets = []
    with _open_workbook(source) as wb:
        for ws in wb.worksheets:
            data: SheetData = [
                _trim_row([_cell_value(value) for value in row])
                for row in ws.iter_rows(values_only=True)
            ]
            while data and not data[-1]:
                data.pop()
            sheets.append(Sheet(name=ws.title or FALLBACK_TITLE, data=data))
            logger.debug(f"Read worksheet {ws.title!r} with {len(data)} rows")
    logger.info(f"Imported {len(sheets)} sheets from workbook")
    return sheets


def sanitize_title(name: str) -> str:
    """Make a sheet name acceptable as a worksheet title."""
    title = _INVALID_TITLE_CHARS.sub(" ", name or "").strip()[:MAX_TITLE_LENGTH].strip()
    return title or FALLBACK_TITLE


def _unique_title(name: str, taken: set[str]) -> str:
    title = sanitize_title(name)
    candidate = title
    counter = 1
    while candidate.lower() in taken:
        suffix = f" ({counter})"
        candidate = title[: MAX_TITLE_LENGTH - len(suffix)].rstrip() + suffix
        counter += 1
    taken.add(candidate.lower())
    return candidate


def _write_row(ws, row_index: int, row: list[CellValue]) -> None:
    for column_index, value in enumerate(row, start=1):
        if value == "" or value is None:
            continue
        cell = ws.cell(row=row_index, column=column_index, value=value)
        # Text such as "=1+1" is data, not a formula
        if isinstance(value, str) and cell.data_type == "f":
            cell.data_type = "s"


def export_workbook(sheets: list[Sheet]) -> bytes:
    """Write the sheets, in order, to an xlsx workbook and return its bytes."""
    wb = Workbook()
    wb.remove(wb.active)
    taken: set[str] = set()
    for sheet in sheets:
        ws = wb.create_sheet(title=_unique_title(sheet.name, taken))
        for row_index, row in enumerate(sheet.data, start=1):
            _write_row(ws, row_index, row)

    if not wb.worksheets:
        wb.create_sheet(title=FALLBACK_TITLE)

    buffer = io.BytesIO()
    wb.save(buffer)
    logger.info(f"Exported {len(sheets)} sheets to workbook")
    return buffer.getvalue()
