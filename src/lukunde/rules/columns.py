"""Spreadsheet column addressing (A, B, ..., Z, AA, ...)."""

import re

from ..errors import ColumnNotFoundError, InvalidColumnError
from .cells import stringify

_COLUMN_LETTERS_PATTERN = re.compile(r"^[A-Z]+$")


def column_letter_to_index(letters: str) -> int:
    """Convert column letter(s) to 0-based index. A=0, B=1, ..., Z=25, AA=26, etc."""
    normalized = letters.strip().upper()
    if not _COLUMN_LETTERS_PATTERN.match(normalized):
        raise InvalidColumnError(f"Coluna inválida: {letters!r}")
    result = 0
    for char in normalized:
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def index_to_column_letter(index: int) -> str:
    """Convert 0-based index to column letter(s)."""
    if index < 0:
        raise InvalidColumnError(f"Índice de coluna inválido: {index}")
    result = ""
    index += 1
    while index > 0:
        index -= 1
        result = chr(ord("A") + (index % 26)) + result
        index //= 26
    return result


def find_header_index(header_row: list, name: str) -> int:
    """Position of the header matching ``name`` (trimmed, case-insensitive)."""
    wanted = name.strip().lower()
    for index, cell in enumerate(header_row):
        text = stringify(cell)
        if text.strip().lower() == wanted:
            return index
    raise ColumnNotFoundError()
