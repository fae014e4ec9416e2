"""Normalization helpers for cell values.

Cells arrive as mixed JSON scalars. Everything in the rule engine reads them
through these helpers so numeric parsing and stringification behave the same
way for formatting, validation and averages.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..sheets.models import CellValue


def is_empty(value: CellValue) -> bool:
    """Return True for the two spellings of an empty cell."""
    return value is None or value == ""


def stringify(value: CellValue) -> str:
    """Render a cell the way it is displayed and exported as text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: CellValue, decimal_comma: bool = False) -> Optional[float]:
    """Parse a cell as a finite number.

    With ``decimal_comma`` the first comma is read as the decimal separator
    ("7,5" -> 7.5). Booleans and empty cells are never numeric.
    """
    if is_empty(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = str(value).strip()
    if decimal_comma:
        text = text.replace(",", ".", 1)
    if not text or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def has_decimal_comma(value: CellValue) -> bool:
    return "," in stringify(value)


def format_decimal(number: float, places: int = 1, decimal_comma: bool = False) -> str:
    """Fixed-point rendering, rounding half away from zero on the exact binary value."""
    quantum = Decimal(1).scaleb(-places)
    text = str(Decimal(number).quantize(quantum, rounding=ROUND_HALF_UP))
    if text.startswith("-") and Decimal(text) == 0:
        text = text[1:]
    return text.replace(".", ",") if decimal_comma else text
