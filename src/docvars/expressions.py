"""
Arithmetic Expression AST

Calculated template variables (share counts, totals) are parsed into an
Abstract Syntax Tree before they are evaluated. Formulas are never handed to
a general-purpose code evaluator.

ARCHITECTURAL RULE:
    Nodes here are structure only.
    Parsing lives in docvars.formula; so does evaluation.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum


class Expression(ABC):
    """
    Base class for all arithmetic AST nodes.

    DO NOT:
        - Add evaluation logic here (belongs in the interpreter)
        - Add string rendering here
    """
    pass


class ArithmeticOperator(Enum):
    """
    Binary operators allowed in formulas.

    Keep this minimal: a formula may only add, subtract, multiply and divide.
    """

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


class UnaryOperator(Enum):
    NEGATE = "-"
    PLUS = "+"


@dataclass(frozen=True)
class Number(Expression):
    """A numeric literal. Variable placeholders are substituted before parsing."""

    value: float


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Represents a binary arithmetic expression.

    Example:
        {Founder1Cash} / {FMV}   (after substitution: 1000000 / 0.1)

    Becomes:
        BinaryExpression(
            operator=ArithmeticOperator.DIVIDE,
            left=Number(1000000.0),
            right=Number(0.1),
        )

    IMPORTANT:
        This object is immutable (frozen=True).
        It does NOT evaluate itself.
    """

    operator: ArithmeticOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """
    A sign applied to an operand.

    Example:
        -(2 + 3)  ->  UnaryExpression(UnaryOperator.NEGATE, BinaryExpression(...))
    """

    operator: UnaryOperator
    operand: Expression
