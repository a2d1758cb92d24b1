"""
Formula evaluation for calculated variables.

Pipeline:
    1. Substitute every ``{name}`` placeholder with the variable's numeric
       value (``$`` and ``,`` stripped; missing or non-numeric -> 0)
    2. Reject the result unless it only holds digits, whitespace,
       ``+ - * / ( )`` and ``.``
    3. Tokenize and parse into an AST (docvars.expressions)
    4. Interpret the AST

Failures of any kind produce an empty string, never an exception.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, List, Mapping, Tuple

from docvars.expressions import (
    ArithmeticOperator,
    BinaryExpression,
    Expression,
    Number,
    UnaryExpression,
    UnaryOperator,
)
from docvars.formatters import number_text, parse_float

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{([^}]+)\}")
_ALLOWED_EXPRESSION = re.compile(r"^[\d\s+\-*/().]+$")
_TOKEN_PATTERN = re.compile(r"\d+\.?\d*|\.\d+|[+\-*/()]")


class FormulaError(ValueError):
    """Raised when a substituted formula is not valid arithmetic."""
    pass


def formula_references(formula: str) -> List[str]:
    """Placeholder names used by a formula, in order of first use."""
    names: List[str] = []
    for name in PLACEHOLDER_PATTERN.findall(formula or ""):
        if name not in names:
            names.append(name)
    return names


def variable_number(value: Any) -> float:
    """Numeric reading of a variable value; anything unusable counts as 0."""
    if not isinstance(value, str) or value == "":
        return 0.0
    number = parse_float(value.replace("$", "").replace(",", ""))
    if number is None:
        return 0.0
    return number


def substitute_placeholders(formula: str, variables: Mapping[str, Any]) -> str:
    return PLACEHOLDER_PATTERN.sub(
        lambda m: number_text(variable_number(variables.get(m.group(1)))),
        formula,
    )


# =========================================================================
# Tokenizer and recursive-descent parser
# =========================================================================


def _tokenize(expr_str: str) -> List[str]:
    """Tokenize an arithmetic string into numbers, operators and parentheses."""
    tokens: List[str] = []
    pos = 0
    while pos < len(expr_str):
        if expr_str[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_PATTERN.match(expr_str, pos)
        if match is None:
            raise FormulaError(f"Unexpected character {expr_str[pos]!r} at {pos}")
        tokens.append(match.group(0))
        pos = match.end()
    if not tokens:
        raise FormulaError("Empty expression")
    return tokens


def _parse_additive(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    """Parse ``term (('+' | '-') term)*``, left-associative."""
    left, pos = _parse_multiplicative(tokens, pos)
    while pos < len(tokens) and tokens[pos] in ("+", "-"):
        operator = ArithmeticOperator(tokens[pos])
        right, pos = _parse_multiplicative(tokens, pos + 1)
        left = BinaryExpression(operator, left, right)
    return left, pos


def _parse_multiplicative(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    """Parse ``unary (('*' | '/') unary)*``, left-associative."""
    left, pos = _parse_unary(tokens, pos)
    while pos < len(tokens) and tokens[pos] in ("*", "/"):
        operator = ArithmeticOperator(tokens[pos])
        right, pos = _parse_unary(tokens, pos + 1)
        left = BinaryExpression(operator, left, right)
    return left, pos


def _parse_unary(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    """Parse a leading sign. ``5 * -3`` is a product with a negated operand."""
    if pos < len(tokens) and tokens[pos] in ("+", "-"):
        operator = UnaryOperator(tokens[pos])
        operand, pos = _parse_unary(tokens, pos + 1)
        return UnaryExpression(operator, operand), pos
    return _parse_primary(tokens, pos)


def _parse_primary(tokens: List[str], pos: int) -> Tuple[Expression, int]:
    if pos >= len(tokens):
        raise FormulaError("Unexpected end of expression")

    token = tokens[pos]

    if token == "(":
        expr, pos = _parse_additive(tokens, pos + 1)
        if pos >= len(tokens) or tokens[pos] != ")":
            raise FormulaError("Missing closing parenthesis")
        return expr, pos + 1

    if token[0].isdigit() or token[0] == ".":
        return Number(float(token)), pos + 1

    raise FormulaError(f"Unexpected token {token!r}")


def parse_arithmetic(expr_str: str) -> Expression:
    """Parse a placeholder-free arithmetic string into an AST."""
    tokens = _tokenize(expr_str)
    expr, pos = _parse_additive(tokens, 0)
    if pos != len(tokens):
        raise FormulaError(f"Unexpected token {tokens[pos]!r} after expression")
    return expr


def evaluate(expr: Expression) -> float:
    """Interpret an arithmetic AST. Division by zero raises ZeroDivisionError."""
    if isinstance(expr, Number):
        return expr.value
    if isinstance(expr, UnaryExpression):
        operand = evaluate(expr.operand)
        return -operand if expr.operator is UnaryOperator.NEGATE else operand
    if isinstance(expr, BinaryExpression):
        left = evaluate(expr.left)
        right = evaluate(expr.right)
        if expr.operator is ArithmeticOperator.ADD:
            return left + right
        if expr.operator is ArithmeticOperator.SUBTRACT:
            return left - right
        if expr.operator is ArithmeticOperator.MULTIPLY:
            return left * right
        return left / right
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def evaluate_formula(formula: str, variables: Mapping[str, Any]) -> str:
    """
    Evaluate a calculated-variable formula against a variable map.

    Example:
        evaluate_formula("{a} * {b}", {"a": "3", "b": "4"}) == "12"

    Returns "" for an empty formula, disallowed characters, malformed
    arithmetic, division by zero or a non-finite result.
    """
    if not formula or not formula.strip():
        logger.warning("Empty formula")
        return ""

    expression = substitute_placeholders(formula, variables)
    logger.debug("Formula %r -> %r", formula, expression)

    if not _ALLOWED_EXPRESSION.match(expression):
        logger.warning("Formula %r contains disallowed characters after substitution: %r", formula, expression)
        return ""

    try:
        result = evaluate(parse_arithmetic(expression))
    except (FormulaError, ZeroDivisionError, OverflowError, RecursionError) as e:
        logger.warning("Could not evaluate formula %r: %s", formula, e)
        return ""

    if math.isnan(result) or math.isinf(result):
        logger.warning("Formula %r produced a non-finite result", formula)
        return ""
    return number_text(result)
