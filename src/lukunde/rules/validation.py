"""Validation rules: deciding whether a cell write is legal."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..errors import ValidationFailedError
from ..sheets.models import CellValue, Sheet, ValidationRule, ValidationType
from .cells import is_empty, stringify, to_number

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_CLASS_OPTIONS = "1A, 1B, 2A, 2B, 3A, 3B, 4A, 4B, 5A, 5B, 6A, 6B"
CLASS_LIST_ERROR_MESSAGE = "Turma inválida. Selecione uma da lista."

# Accepted in addition to ISO 8601
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%d %b %Y", "%b %d %Y", "%B %d, %Y")


@dataclass
class ValidationResult:
    """Outcome of checking one value against one rule."""

    valid: bool
    message: Optional[str] = None


def _parses_as_date(text: str) -> bool:
    try:
        datetime.fromisoformat(text)
        return True
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(text, fmt)
            return True
        except ValueError:
            continue
    return False


def _validate_number(value: CellValue, rule: ValidationRule) -> ValidationResult:
    number = to_number(value)
    if number is None:
        return ValidationResult(False, "O valor deve ser um número.")
    minimum = to_number(rule.min) if rule.min else None
    maximum = to_number(rule.max) if rule.max else None
    if minimum is not None and number < minimum:
        return ValidationResult(False, f"O valor deve ser maior ou igual a {rule.min}.")
    if maximum is not None and number > maximum:
        return ValidationResult(False, f"O valor deve ser menor ou igual a {rule.max}.")
    return ValidationResult(True)


def _validate_date(text: str, rule: ValidationRule) -> ValidationResult:
    if not _parses_as_date(text):
        return ValidationResult(False, "Data inválida.")
    # Bounds compare the raw strings; only zero-padded ISO dates order correctly.
    if rule.min and text < rule.min:
        return ValidationResult(False, f"A data deve ser posterior a {rule.min}.")
    if rule.max and text > rule.max:
        return ValidationResult(False, f"A data deve ser anterior a {rule.max}.")
    return ValidationResult(True)


def validate(value: CellValue, rule: ValidationRule) -> ValidationResult:
    """Check ``value`` against ``rule``. Empty values always pass."""
    if is_empty(value):
        return ValidationResult(True)

    text = stringify(value).strip()

    if rule.type == ValidationType.NUMBER:
        return _validate_number(value, rule)
    if rule.type == ValidationType.DATE:
        return _validate_date(text, rule)
    if rule.type == ValidationType.LIST and rule.options is not None:
        if text not in rule.options:
            return ValidationResult(False, "Valor não permitido na lista.")
    if rule.type == ValidationType.EMAIL:
        if not EMAIL_PATTERN.fullmatch(text):
            return ValidationResult(False, "Endereço de email inválido.")
    return ValidationResult(True)


def check_write(sheet: Sheet, column_index: int, value: CellValue) -> None:
    """Raise ValidationFailedError if the column's rule rejects ``value``."""
    rule = sheet.validation_rule_for(column_index)
    if rule is None:
        return
    result = validate(value, rule)
    if not result.valid:
        message = rule.error_message or result.message or "Valor inválido."
        logger.info(
            f"Rejected write to column {column_index} of sheet {sheet.id}: {message}"
        )
        raise ValidationFailedError(message, column_index=column_index)


def add_validation_rule(sheet: Sheet, rule: ValidationRule) -> Sheet:
    """Install ``rule``, replacing any rule already on the same column."""
    kept = [r for r in sheet.validation_rules if r.column_index != rule.column_index]
    return sheet.model_copy(update={"validation_rules": kept + [rule]})


def remove_validation_rule(sheet: Sheet, rule_id: str) -> tuple[Sheet, bool]:
    kept = [rule for rule in sheet.validation_rules if rule.id != rule_id]
    removed = len(kept) != len(sheet.validation_rules)
    return sheet.model_copy(update={"validation_rules": kept}), removed


def parse_options(text: str) -> list[str]:
    """Split a comma-separated option list, dropping blanks."""
    return [option.strip() for option in text.split(",") if option.strip()]


def class_list_rule(column_index: int, options_text: str = DEFAULT_CLASS_OPTIONS) -> ValidationRule:
    """Build the list rule used to restrict a class column to known classes."""
    return ValidationRule(
        column_index=column_index,
        type=ValidationType.LIST,
        options=parse_options(options_text),
        error_message=CLASS_LIST_ERROR_MESSAGE,
    )
