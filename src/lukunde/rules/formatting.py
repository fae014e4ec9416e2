"""Conditional formatting: resolving which style a cell gets."""

import logging
import operator
from typing import Callable, Optional

from ..sheets.models import CellValue, ConditionalRule, ConditionalStyle, ConditionType, Sheet
from .cells import is_empty, stringify, to_number

logger = logging.getLogger(__name__)

_NUMERIC_COMPARATORS: dict[ConditionType, Callable[[float, float], bool]] = {
    ConditionType.GT: operator.gt,
    ConditionType.LT: operator.lt,
    ConditionType.GTE: operator.ge,
    ConditionType.LTE: operator.le,
    ConditionType.EQ: operator.eq,
}


def _matches(rule: ConditionalRule, value: CellValue, number: Optional[float]) -> bool:
    if number is not None:
        comparator = _NUMERIC_COMPARATORS.get(rule.condition)
        threshold = to_number(rule.value)
        if comparator is None or threshold is None:
            return False
        return comparator(number, threshold)

    text = stringify(value).lower()
    expected = stringify(rule.value).lower()
    if rule.condition == ConditionType.CONTAINS:
        return expected in text
    if rule.condition == ConditionType.EQ:
        return text == expected
    return False


def resolve_style(
    rules: list[ConditionalRule],
    column_index: int,
    value: CellValue,
    row_index: Optional[int] = None,
) -> Optional[ConditionalStyle]:
    """
    Return the style of the first rule on ``column_index`` matching ``value``.

    Rules are tried in insertion order; the header row (``row_index == 0``)
    is never styled. Numeric cells (comma decimals accepted) are compared
    with gt/lt/gte/lte/eq; anything else falls back to case-insensitive
    ``contains``/``eq`` on the text.
    """
    if row_index == 0:
        return None

    column_rules = [rule for rule in rules if rule.column_index == column_index]
    if not column_rules:
        return None

    number = None if is_empty(value) else to_number(value, decimal_comma=True)
    for rule in column_rules:
        if _matches(rule, value, number):
            return rule.style
    return None


def style_grid(sheet: Sheet) -> list[list[Optional[ConditionalStyle]]]:
    """Resolve the style of every cell in the sheet."""
    return [
        [
            resolve_style(sheet.conditional_formats, column_index, value, row_index)
            for column_index, value in enumerate(row)
        ]
        for row_index, row in enumerate(sheet.data)
    ]


def add_conditional_rule(sheet: Sheet, rule: ConditionalRule) -> Sheet:
    """Append a rule; earlier rules keep precedence."""
    logger.debug(
        f"Adding {rule.condition.value} rule on column {rule.column_index} of sheet {sheet.id}"
    )
    return sheet.model_copy(update={"conditional_formats": [*sheet.conditional_formats, rule]})


def replace_column_rules(
    sheet: Sheet, column_index: int, rules: list[ConditionalRule]
) -> Sheet:
    """Drop every rule on ``column_index`` and append ``rules``."""
    kept = [rule for rule in sheet.conditional_formats if rule.column_index != column_index]
    return sheet.model_copy(update={"conditional_formats": kept + list(rules)})


def remove_conditional_rule(sheet: Sheet, rule_id: str) -> tuple[Sheet, bool]:
    kept = [rule for rule in sheet.conditional_formats if rule.id != rule_id]
    removed = len(kept) != len(sheet.conditional_formats)
    return sheet.model_copy(update={"conditional_formats": kept}), removed
