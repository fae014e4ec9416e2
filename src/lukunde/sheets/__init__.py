"""Sheet data models."""

from .models import (
    CellValue,
    SheetData,
    Sheet,
    ConditionalRule,
    ConditionalStyle,
    ConditionType,
    ValidationRule,
    ValidationType,
    PRESET_STYLES,
    FAIL_STYLE,
    PASS_STYLE,
    empty_grid,
    new_id,
)

__all__ = [
    "CellValue",
    "SheetData",
    "Sheet",
    "ConditionalRule",
    "ConditionalStyle",
    "ConditionType",
    "ValidationRule",
    "ValidationType",
    "PRESET_STYLES",
    "FAIL_STYLE",
    "PASS_STYLE",
    "empty_grid",
    "new_id",
]
