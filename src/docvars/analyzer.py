"""
Template Analyzer: diagnostics for one template against one survey.

This module provides lightweight analysis of a Template:
    - Mapping inventory by source kind
    - Formula references and complexity
    - Rule evaluation with a per-condition breakdown
    - Variable validation against a transformed map
    - Warning flags for authoring mistakes

IMPORTANT: This is read-only. It does NOT modify the template, and it
never renders a document.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set

from docvars.aliases import is_auto_generated_variable
from docvars.conditions import ComputedTable
from docvars.engine import validate_template_variables
from docvars.expressions import BinaryExpression, Expression, UnaryExpression
from docvars.formula import FormulaError, formula_references, parse_arithmetic, substitute_placeholders
from docvars.model import (
    ADMIN_PREFIX,
    AUTO,
    CALCULATED,
    MANUAL,
    ConditionDetail,
    ResponseSet,
    RuleEvaluationResult,
    Template,
    ValidationResult,
    VariableMapping,
)
from docvars.rules import get_template_evaluation_details

MAX_FORMULA_DEPTH = 5


def _expression_depth(expr: Expression) -> int:
    if isinstance(expr, BinaryExpression):
        return 1 + max(_expression_depth(expr.left), _expression_depth(expr.right))
    if isinstance(expr, UnaryExpression):
        return 1 + _expression_depth(expr.operand)
    return 0


def mapping_source_kind(mapping: VariableMapping) -> str:
    """``auto``, ``manual``, ``calculated``, ``group`` or ``question``."""
    if mapping.question_id == AUTO:
        return "auto"
    if mapping.question_id == MANUAL:
        return "manual"
    if mapping.question_id == CALCULATED:
        return "calculated"
    if mapping.question_id.startswith(ADMIN_PREFIX) and (
        "." in mapping.question_id or mapping.question_id.endswith("Count")
    ):
        return "group"
    return "question"


@dataclass
class TemplateReport:
    """Analysis report for one template."""

    template_id: str
    template_name: str
    total_rules: int = 0
    total_conditions: int = 0
    total_mappings: int = 0

    # Mapping inventory
    mappings_by_source: Dict[str, int] = field(default_factory=dict)
    unanswered_questions: Set[str] = field(default_factory=set)

    # Formulas
    formula_references: Dict[str, List[str]] = field(default_factory=dict)
    undefined_references: Set[str] = field(default_factory=set)
    max_formula_depth: int = 0

    # Selection
    evaluation: Optional[RuleEvaluationResult] = None
    condition_details: List[ConditionDetail] = field(default_factory=list)
    unmet_conditions: int = 0

    # Validation (only when a variable map is given)
    validation: Optional[ValidationResult] = None

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_template(
    template: Template,
    responses: ResponseSet,
    variables: Optional[Mapping[str, Any]] = None,
    computed: Optional[ComputedTable] = None,
) -> TemplateReport:
    """
    Analyze a template's mappings and rules against a response set.

    If ``variables`` (a transformed map) is given, the report also carries
    validate_template_variables() and checks formula references against it.
    """
    report = TemplateReport(template_id=template.id, template_name=template.label)
    report.total_rules = len(template.rules)
    report.total_conditions = sum(len(rule.conditions) for rule in template.rules)
    report.total_mappings = len(template.variables)

    # =========================================================================
    # 1. MAPPING INVENTORY
    # =========================================================================

    by_source: Dict[str, int] = defaultdict(int)
    defined_names = {m.variable_name for m in template.variables}
    for mapping in template.variables:
        kind = mapping_source_kind(mapping)
        by_source[kind] += 1
        if kind == "question" and mapping.question_id not in responses:
            report.unanswered_questions.add(mapping.question_id)
            if not mapping.default_value and not is_auto_generated_variable(mapping.variable_name):
                report.add_warning(
                    f"Variable {mapping.variable_name} reads unanswered question {mapping.question_id}"
                )
    report.mappings_by_source = dict(by_source)

    # =========================================================================
    # 2. FORMULAS
    # =========================================================================

    for mapping in template.variables:
        if mapping.question_id != CALCULATED:
            continue
        if not mapping.formula:
            report.add_warning(f"Calculated variable {mapping.variable_name} has no formula")
            continue

        references = formula_references(mapping.formula)
        report.formula_references[mapping.variable_name] = references
        for name in references:
            known = name in defined_names or (variables is not None and name in variables)
            if not known and (variables is not None or not is_auto_generated_variable(name)):
                report.undefined_references.add(name)

        try:
            expr = parse_arithmetic(substitute_placeholders(mapping.formula, {}))
        except FormulaError as e:
            report.add_warning(f"Formula for {mapping.variable_name} does not parse: {e}")
            continue
        report.max_formula_depth = max(report.max_formula_depth, _expression_depth(expr))

    if report.undefined_references:
        report.add_warning(
            f"Undefined formula references: {', '.join(sorted(report.undefined_references))}"
        )
    if report.max_formula_depth > MAX_FORMULA_DEPTH:
        report.add_warning(f"High formula complexity: max depth {report.max_formula_depth}")

    # =========================================================================
    # 3. SELECTION
    # =========================================================================

    evaluation, details = get_template_evaluation_details(template, responses, computed)
    report.evaluation = evaluation
    report.condition_details = details
    report.unmet_conditions = sum(1 for d in details if not d.is_met)

    if not template.is_active:
        report.add_warning("Template is inactive and will never be selected")
    for index, rule in enumerate(template.rules):
        if not rule.conditions and not rule.is_always_include and not rule.is_manual_only:
            report.add_warning(f"Rule {index} has no conditions and no flag; it never matches")
        if rule.is_manual_only and rule.conditions:
            report.add_warning(f"Rule {index} is manual-only; its conditions are ignored")

    # =========================================================================
    # 4. VALIDATION
    # =========================================================================

    if variables is not None:
        report.validation = validate_template_variables(variables, template)
        if report.validation.missing_variables:
            report.add_warning(
                f"Missing variables: {', '.join(report.validation.missing_variables)}"
            )
        if report.validation.empty_required:
            report.add_warning(
                f"Empty required variables: {', '.join(report.validation.empty_required)}"
            )

    return report
