"""
Tests for rule conditions.
"""

import pytest

from docvars.conditions import evaluate_condition, resolve_actual_value
from docvars.model import ConditionOperator, ResponseSet, RuleCondition, SourceType, ValueType

OP = ConditionOperator


@pytest.fixture
def answers():
    return ResponseSet.from_mapping({
        "state": "Delaware",
        "employees": "12",
        "price": "1.50",
        "services": ["Incorporation", "Banking"],
        "founders": [{"name": "A"}, {"name": "B"}],
        "homeState": "delaware",
        "blank": "",
    })


def cond(question_id, operator, value="", **kwargs):
    return RuleCondition(question_id, operator, value, **kwargs)


class TestEquality:
    """Test == and !=."""

    def test_case_insensitive_text(self, answers):
        assert evaluate_condition(cond("state", OP.EQUALS, "DELAWARE"), answers)
        assert not evaluate_condition(cond("state", OP.NOT_EQUALS, "delaware"), answers)

    def test_numeric_when_both_sides_are_numbers(self, answers):
        assert evaluate_condition(cond("price", OP.EQUALS, "1.5"), answers)
        assert evaluate_condition(cond("employees", OP.NOT_EQUALS, "12.5"), answers)

    def test_empty_answer_is_present(self, answers):
        assert evaluate_condition(cond("blank", OP.EQUALS, ""), answers)


class TestMissingAnswers:
    """A missing answer only satisfies !=."""

    @pytest.mark.parametrize("operator, expected", [
        (OP.NOT_EQUALS, True),
        (OP.EQUALS, False),
        (OP.CONTAINS, False),
        (OP.NOT_CONTAINS, False),
        (OP.GREATER_THAN, False),
    ])
    def test_missing(self, answers, operator, expected):
        assert evaluate_condition(cond("nothing", operator, "x"), answers) is expected

    def test_missing_referenced_answer(self, answers):
        ref = cond("state", OP.EQUALS, value_type=ValueType.QUESTION, value_question_id="nothing")
        assert not evaluate_condition(ref, answers)
        ref = cond("state", OP.NOT_EQUALS, value_type=ValueType.QUESTION, value_question_id="nothing")
        assert evaluate_condition(ref, answers)


def test_compare_against_other_answer(answers):
    ref = cond("state", OP.EQUALS, value_type=ValueType.QUESTION, value_question_id="homeState")
    assert evaluate_condition(ref, answers)


def test_contains_and_in(answers):
    assert evaluate_condition(cond("services", OP.CONTAINS, "bank"), answers)
    assert evaluate_condition(cond("services", OP.NOT_CONTAINS, "payroll"), answers)
    assert evaluate_condition(cond("state", OP.IN, "California, Delaware"), answers)
    assert not evaluate_condition(cond("state", OP.IN, "Nevada,Texas"), answers)


class TestOrdering:
    """Ordering operators are numeric only."""

    def test_numeric(self, answers):
        assert evaluate_condition(cond("employees", OP.GREATER_THAN, "10"), answers)
        assert evaluate_condition(cond("employees", OP.LESS_EQUAL, "12"), answers)
        assert not evaluate_condition(cond("employees", OP.LESS_THAN, "12"), answers)

    def test_non_numeric_is_false(self, answers):
        assert not evaluate_condition(cond("state", OP.GREATER_THAN, "A"), answers)

    def test_repeating_group_compares_as_count(self, answers):
        assert evaluate_condition(cond("founders", OP.GREATER_EQUAL, "2"), answers)


class TestComputedSource:
    """Test sourceType=computed."""

    def test_reads_computed_table(self, answers):
        c = cond("foundersCount", OP.EQUALS, "2", source_type=SourceType.COMPUTED)
        assert evaluate_condition(c, answers, {"foundersCount": 2})
        assert resolve_actual_value(c, answers, {"foundersCount": 2}) == "2"

    def test_falls_back_to_answers_without_table(self, answers):
        c = cond("state", OP.EQUALS, "Delaware", source_type=SourceType.COMPUTED)
        assert evaluate_condition(c, answers)

    def test_missing_computed_entry(self, answers):
        c = cond("directorsCount", OP.NOT_EQUALS, "0", source_type=SourceType.COMPUTED)
        assert evaluate_condition(c, answers, {})
