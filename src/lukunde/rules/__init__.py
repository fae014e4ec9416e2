"""Rule engine: formatting, validation, reactive averages and column addressing."""

from .averages import (
    GradeColumns,
    average_text,
    calculate_all_averages,
    derive_average,
    find_grade_columns,
)
from .cells import format_decimal, is_empty, stringify, to_number
from .columns import column_letter_to_index, find_header_index, index_to_column_letter
from .formatting import (
    add_conditional_rule,
    remove_conditional_rule,
    replace_column_rules,
    resolve_style,
    style_grid,
)
from .validation import (
    DEFAULT_CLASS_OPTIONS,
    ValidationResult,
    add_validation_rule,
    check_write,
    class_list_rule,
    parse_options,
    remove_validation_rule,
    validate,
)

__all__ = [
    "GradeColumns",
    "average_text",
    "calculate_all_averages",
    "derive_average",
    "find_grade_columns",
    "format_decimal",
    "is_empty",
    "stringify",
    "to_number",
    "column_letter_to_index",
    "find_header_index",
    "index_to_column_letter",
    "add_conditional_rule",
    "remove_conditional_rule",
    "replace_column_rules",
    "resolve_style",
    "style_grid",
    "DEFAULT_CLASS_OPTIONS",
    "ValidationResult",
    "add_validation_rule",
    "check_write",
    "class_list_rule",
    "parse_options",
    "remove_validation_rule",
    "validate",
]
