"""
Rule evaluation and template selection.

Scoring:
    - no rules                 score 0
    - any always-include rule  score 1, every rule counted as matched
    - any manual-only rule     score 0, flagged manual
    - otherwise                matched / rules-with-conditions

Buckets (see select_templates):
    required   always-include, or score 1
    suggested  score above 0.5
    optional   manual-only, templates without conditions, everything else
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from docvars.conditions import ComputedTable, evaluate_condition, resolve_actual_value
from docvars.model import (
    ConditionDetail,
    LogicalOperator,
    ResponseSet,
    RuleEvaluationResult,
    SelectionRule,
    Template,
    TemplateSelection,
)

logger = logging.getLogger(__name__)

SUGGESTED_THRESHOLD = 0.5


def rule_matches(
    rule: SelectionRule,
    responses: ResponseSet,
    computed: Optional[ComputedTable] = None,
) -> bool:
    results = (evaluate_condition(c, responses, computed) for c in rule.conditions)
    if rule.logical_operator is LogicalOperator.OR:
        return any(results)
    return all(results)


def _by_priority(rules: List[SelectionRule]) -> List[SelectionRule]:
    return sorted(rules, key=lambda rule: rule.priority)


def evaluate_rules(
    template: Template,
    responses: ResponseSet,
    computed: Optional[ComputedTable] = None,
) -> RuleEvaluationResult:
    rules = template.rules
    if not rules:
        return RuleEvaluationResult(template_id=template.id)

    if any(rule.is_always_include for rule in rules):
        return RuleEvaluationResult(
            template_id=template.id,
            score=1.0,
            matched_rules=len(rules),
            total_rules=len(rules),
            is_always_include=True,
        )

    if any(rule.is_manual_only for rule in rules):
        return RuleEvaluationResult(
            template_id=template.id,
            total_rules=len(rules),
            is_manual_only=True,
        )

    conditional = [rule for rule in _by_priority(rules) if rule.conditions]
    matched = sum(1 for rule in conditional if rule_matches(rule, responses, computed))
    total = len(conditional)
    return RuleEvaluationResult(
        template_id=template.id,
        score=matched / total if total else 0.0,
        matched_rules=matched,
        total_rules=total,
    )


def select_templates(
    responses: ResponseSet,
    templates: Iterable[Template],
    computed: Optional[ComputedTable] = None,
) -> TemplateSelection:
    """Partition active templates into required / suggested / optional, each sorted by label."""
    selection = TemplateSelection()
    for template in templates:
        if not template.is_active:
            continue

        evaluation = evaluate_rules(template, responses, computed)
        if evaluation.is_always_include:
            bucket = selection.required
        elif evaluation.is_manual_only or evaluation.total_rules == 0:
            bucket = selection.optional
        elif evaluation.score >= 1.0:
            bucket = selection.required
        elif evaluation.score > SUGGESTED_THRESHOLD:
            bucket = selection.suggested
        else:
            bucket = selection.optional
        logger.debug(
            "Template %s scored %.2f (%d/%d)",
            template.id, evaluation.score, evaluation.matched_rules, evaluation.total_rules,
        )
        bucket.append(template)

    for bucket in (selection.required, selection.suggested, selection.optional):
        bucket.sort(key=lambda t: (t.label.casefold(), t.label))
    return selection


def get_template_evaluation_details(
    template: Template,
    responses: ResponseSet,
    computed: Optional[ComputedTable] = None,
) -> Tuple[RuleEvaluationResult, List[ConditionDetail]]:
    """The rule evaluation plus a per-condition breakdown, for debugging."""
    details: List[ConditionDetail] = []
    for index, rule in enumerate(template.rules):
        for condition in rule.conditions:
            actual = resolve_actual_value(condition, responses, computed)
            details.append(ConditionDetail(
                rule_index=index,
                condition=condition,
                is_met=evaluate_condition(condition, responses, computed),
                actual_value=actual if actual is not None else "",
            ))
    return evaluate_rules(template, responses, computed), details
