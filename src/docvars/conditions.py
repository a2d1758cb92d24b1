"""
Condition evaluation for template selection rules.

ARCHITECTURAL RULE:
    A condition never raises. A missing answer is simply "not equal".
"""

from __future__ import annotations

from typing import Mapping, Optional, Union

from docvars.formatters import parse_float
from docvars.model import (
    ConditionOperator,
    ResponseSet,
    RuleCondition,
    SourceType,
    ValueType,
    answer_text,
)

ComputedTable = Mapping[str, Union[int, str]]

_ORDERING = {
    ConditionOperator.GREATER_THAN: lambda a, b: a > b,
    ConditionOperator.GREATER_EQUAL: lambda a, b: a >= b,
    ConditionOperator.LESS_THAN: lambda a, b: a < b,
    ConditionOperator.LESS_EQUAL: lambda a, b: a <= b,
}


def resolve_actual_value(
    condition: RuleCondition,
    responses: ResponseSet,
    computed: Optional[ComputedTable] = None,
) -> Optional[str]:
    """The left-hand side of a condition as a string, or None when missing."""
    if condition.source_type is SourceType.COMPUTED and computed is not None:
        raw = computed.get(condition.question_id)
        return None if raw is None else str(raw)
    value = responses.get(condition.question_id)
    return None if value is None else answer_text(value)


def _expected_value(condition: RuleCondition, responses: ResponseSet) -> Optional[str]:
    if condition.value_type is ValueType.QUESTION and condition.value_question_id:
        reference = responses.get(condition.value_question_id)
        return None if reference is None else answer_text(reference)
    return condition.value or ""


def _equal(actual: str, expected: str) -> bool:
    actual_number = parse_float(actual)
    expected_number = parse_float(expected)
    if actual_number is not None and expected_number is not None:
        return actual_number == expected_number
    return actual.lower() == expected.lower()


def evaluate_condition(
    condition: RuleCondition,
    responses: ResponseSet,
    computed: Optional[ComputedTable] = None,
) -> bool:
    """
    Test one condition.

    Semantics:
        ==, !=          numeric when both sides parse as numbers,
                        else case-insensitive text
        contains        case-insensitive substring
        in              actual is one of the comma-separated values
        >, >=, <, <=    numeric only; false if either side is not a number

    A missing answer (or a missing referenced answer) satisfies only ``!=``.
    """
    operator = condition.operator

    actual = resolve_actual_value(condition, responses, computed)
    if actual is None:
        return operator is ConditionOperator.NOT_EQUALS

    expected = _expected_value(condition, responses)
    if expected is None:
        return operator is ConditionOperator.NOT_EQUALS

    if operator is ConditionOperator.EQUALS:
        return _equal(actual, expected)
    if operator is ConditionOperator.NOT_EQUALS:
        return not _equal(actual, expected)
    if operator is ConditionOperator.CONTAINS:
        return expected.lower() in actual.lower()
    if operator is ConditionOperator.NOT_CONTAINS:
        return expected.lower() not in actual.lower()
    if operator is ConditionOperator.IN:
        options = [option.strip().lower() for option in expected.split(",")]
        return actual.lower() in options

    compare = _ORDERING.get(operator)
    if compare is None:
        return False
    actual_number = parse_float(actual)
    expected_number = parse_float(expected)
    if actual_number is None or expected_number is None:
        return False
    return compare(actual_number, expected_number)
