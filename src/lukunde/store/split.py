"""Splitting one sheet into several by the values of a column."""

from ..rules.cells import is_empty, stringify
from ..sheets.models import Sheet

NO_CLASS_LABEL = "Sem Turma"


def split_by_column(sheet: Sheet, column_index: int) -> list[Sheet]:
    """
    Group the data rows of ``sheet`` by the value at ``column_index``.

    Each group becomes a new sheet holding a copy of the header plus the
    group's rows, named "<source name> - <value>". Groups keep the order in
    which their first row appears. Rows with an empty cell go to the
    "Sem Turma" group.

    Returns:
        The new sheets, or an empty list when there are no data rows.
    """
    if len(sheet.data) < 2:
        return []

    header = sheet.data[0]
    groups: dict[str, list[list]] = {}
    for row in sheet.data[1:]:
        value = row[column_index] if column_index < len(row) else None
        key = NO_CLASS_LABEL if is_empty(value) else stringify(value)
        groups.setdefault(key, []).append(list(row))

    return [
        Sheet(name=f"{sheet.name} - {key}", data=[list(header), *rows])
        for key, rows in groups.items()
    ]
