"""Reactive average of the two grade columns ("Nota 1", "Nota 2" -> "Média")."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import ColumnNotFoundError
from ..sheets.models import (
    CellValue,
    ConditionalRule,
    ConditionType,
    FAIL_STYLE,
    PASS_STYLE,
    Sheet,
)
from .cells import format_decimal, has_decimal_comma, is_empty, stringify, to_number
from .formatting import replace_column_rules

logger = logging.getLogger(__name__)

AVERAGE_HEADER = "Média"
PASSING_GRADE = 5


@dataclass(frozen=True)
class GradeColumns:
    """Header-derived positions of the grade inputs and their average."""

    first: Optional[int] = None
    second: Optional[int] = None
    average: Optional[int] = None

    @property
    def has_inputs(self) -> bool:
        return self.first is not None and self.second is not None

    @property
    def complete(self) -> bool:
        return self.has_inputs and self.average is not None


def _first_index(headers: list[str], predicate) -> Optional[int]:
    for index, header in enumerate(headers):
        if predicate(header):
            return index
    return None


def find_grade_columns(header_row: list[CellValue]) -> GradeColumns:
    """Locate the grade columns by case-insensitive header matching."""
    headers = [stringify(cell).lower().strip() for cell in header_row]
    return GradeColumns(
        first=_first_index(headers, lambda h: "nota 1" in h or h in ("p1", "n1")),
        second=_first_index(headers, lambda h: "nota 2" in h or h in ("p2", "n2")),
        average=_first_index(headers, lambda h: h in ("média", "media")),
    )


def _cell(row: list[CellValue], index: int) -> CellValue:
    return row[index] if index < len(row) else None


def average_text(first: CellValue, second: CellValue) -> Optional[str]:
    """
    Average two grade cells to one decimal place.

    Returns None unless both cells are non-empty numbers. The result uses a
    comma decimal separator iff either operand was written with one.
    """
    if is_empty(first) or is_empty(second):
        return None
    a = to_number(first, decimal_comma=True)
    b = to_number(second, decimal_comma=True)
    if a is None or b is None:
        return None
    use_comma = has_decimal_comma(first) or has_decimal_comma(second)
    return format_decimal((a + b) / 2, places=1, decimal_comma=use_comma)


def _pad(row: list[CellValue], index: int) -> None:
    while len(row) <= index:
        row.append("")


def derive_average(
    row: list[CellValue], columns: GradeColumns, edited_column: int
) -> list[CellValue]:
    """Return ``row`` with its average cell recomputed after an edit.

    Only edits to one of the two input columns trigger a recompute, and only
    when the sheet already has an average column.
    """
    if not columns.complete or edited_column not in (columns.first, columns.second):
        return row

    result = average_text(_cell(row, columns.first), _cell(row, columns.second))
    if result is None:
        return row

    updated = list(row)
    _pad(updated, columns.average)
    updated[columns.average] = result
    return updated


def calculate_all_averages(sheet: Sheet) -> tuple[Sheet, int]:
    """
    Recompute the average for every data row.

    Creates the "Média" column when missing and installs the pass/fail
    highlight on it, replacing earlier rules on that column.

    Returns:
        The updated sheet and the number of rows that received an average.
    """
    if not sheet.data or not sheet.data[0]:
        raise ColumnNotFoundError("Não encontrei as colunas 'Nota 1' e 'Nota 2'.")

    data = [list(row) for row in sheet.data]
    columns = find_grade_columns(data[0])
    if not columns.has_inputs:
        raise ColumnNotFoundError("Não encontrei as colunas 'Nota 1' e 'Nota 2'.")

    average_index = columns.average
    if average_index is None:
        data[0].append(AVERAGE_HEADER)
        average_index = len(data[0]) - 1

    updated_count = 0
    for row in data[1:]:
        _pad(row, average_index)
        result = average_text(_cell(row, columns.first), _cell(row, columns.second))
        if result is not None:
            row[average_index] = result
            updated_count += 1

    highlight = [
        ConditionalRule(
            column_index=average_index,
            condition=ConditionType.LT,
            value=PASSING_GRADE,
            style=FAIL_STYLE,
        ),
        ConditionalRule(
            column_index=average_index,
            condition=ConditionType.GTE,
            value=PASSING_GRADE,
            style=PASS_STYLE,
        ),
    ]
    updated = replace_column_rules(sheet.model_copy(update={"data": data}), average_index, highlight)

    logger.info(f"Calculated averages for {updated_count} rows of sheet {sheet.id}")
    return updated, updated_count
