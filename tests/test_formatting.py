"""Tests for conditional formatting."""

from lukunde.rules import (
    add_conditional_rule,
    remove_conditional_rule,
    replace_column_rules,
    resolve_style,
    style_grid,
)
from lukunde.sheets import (
    FAIL_STYLE,
    PASS_STYLE,
    PRESET_STYLES,
    ConditionalRule,
    ConditionType,
    Sheet,
)

HIGHLIGHT = PRESET_STYLES[3]


def _rule(column, condition, value, style=FAIL_STYLE, rule_id=None):
    kwargs = {"id": rule_id} if rule_id else {}
    return ConditionalRule(
        column_index=column, condition=condition, value=value, style=style, **kwargs
    )


class TestResolveStyle:
    """Test which style a cell receives."""

    def test_pass_fail_thresholds(self):
        rules = [
            _rule(4, ConditionType.LT, 5, FAIL_STYLE),
            _rule(4, ConditionType.GTE, 5, PASS_STYLE),
        ]
        assert resolve_style(rules, 4, "4,5", row_index=1) == FAIL_STYLE
        assert resolve_style(rules, 4, "5", row_index=1) == PASS_STYLE
        assert resolve_style(rules, 4, 9.5, row_index=2) == PASS_STYLE

    def test_first_matching_rule_wins(self):
        rules = [
            _rule(0, ConditionType.GT, 3, HIGHLIGHT),
            _rule(0, ConditionType.GT, 5, PASS_STYLE),
        ]
        assert resolve_style(rules, 0, 7, row_index=1) == HIGHLIGHT

    def test_header_row_never_styled(self):
        rules = [_rule(0, ConditionType.CONTAINS, "nota")]
        assert resolve_style(rules, 0, "Nota 1", row_index=0) is None
        assert resolve_style(rules, 0, "Nota 1", row_index=1) == FAIL_STYLE

    def test_rules_on_other_columns_ignored(self):
        rules = [_rule(1, ConditionType.GT, 0)]
        assert resolve_style(rules, 0, 10, row_index=1) is None

    def test_text_contains_and_eq_are_case_insensitive(self):
        contains = [_rule(2, ConditionType.CONTAINS, "aprov", PASS_STYLE)]
        assert resolve_style(contains, 2, "APROVADO", row_index=1) == PASS_STYLE
        assert resolve_style(contains, 2, "Reprovado", row_index=1) is None

        equals = [_rule(2, ConditionType.EQ, "reprovado")]
        assert resolve_style(equals, 2, "REPROVADO", row_index=1) == FAIL_STYLE
        assert resolve_style(equals, 2, "Reprovada", row_index=1) is None

    def test_ordering_conditions_never_match_text(self):
        rules = [_rule(0, ConditionType.GT, 5)]
        assert resolve_style(rules, 0, "abc", row_index=1) is None

    def test_contains_never_matches_numbers(self):
        rules = [_rule(0, ConditionType.CONTAINS, "5")]
        assert resolve_style(rules, 0, 15, row_index=1) is None

    def test_non_numeric_threshold_never_matches_numbers(self):
        rules = [_rule(0, ConditionType.GT, "abc")]
        assert resolve_style(rules, 0, 5, row_index=1) is None

    def test_empty_cells_compare_as_text(self):
        rules = [_rule(0, ConditionType.LT, 5)]
        assert resolve_style(rules, 0, "", row_index=1) is None
        assert resolve_style(rules, 0, None, row_index=1) is None


class TestRuleCollection:
    """Test adding and removing rules on a sheet."""

    def test_add_keeps_insertion_order(self):
        sheet = Sheet(name="S")
        first = _rule(0, ConditionType.GT, 1, rule_id="r1")
        second = _rule(0, ConditionType.GT, 2, rule_id="r2")
        updated = add_conditional_rule(add_conditional_rule(sheet, first), second)
        assert [r.id for r in updated.conditional_formats] == ["r1", "r2"]
        assert sheet.conditional_formats == []

    def test_replace_column_rules(self):
        sheet = Sheet(
            name="S",
            conditional_formats=[
                _rule(0, ConditionType.GT, 1, rule_id="keep"),
                _rule(3, ConditionType.GT, 1, rule_id="drop"),
            ],
        )
        updated = replace_column_rules(sheet, 3, [_rule(3, ConditionType.LT, 5, rule_id="new")])
        assert [r.id for r in updated.conditional_formats] == ["keep", "new"]

    def test_remove_rule(self):
        sheet = Sheet(name="S", conditional_formats=[_rule(0, ConditionType.GT, 1, rule_id="r1")])
        updated, removed = remove_conditional_rule(sheet, "r1")
        assert removed
        assert updated.conditional_formats == []

        _, removed = remove_conditional_rule(sheet, "missing")
        assert not removed

    def test_style_grid(self):
        sheet = Sheet(
            name="S",
            data=[["Média"], ["4"], ["6"]],
            conditional_formats=[
                _rule(0, ConditionType.LT, 5, FAIL_STYLE),
                _rule(0, ConditionType.GTE, 5, PASS_STYLE),
            ],
        )
        assert style_grid(sheet) == [[None], [FAIL_STYLE], [PASS_STYLE]]
