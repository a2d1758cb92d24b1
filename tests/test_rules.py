"""
Tests for rule scoring and template selection.
"""

from docvars.groups import compute_variables
from docvars.model import (
    ConditionOperator,
    LogicalOperator,
    ResponseSet,
    RuleCondition,
    SelectionRule,
    Template,
)
from docvars.rules import evaluate_rules, get_template_evaluation_details, select_templates

EQ = ConditionOperator.EQUALS

ANSWERS = ResponseSet.from_mapping({"state": "Delaware", "size": "small"})


def rule(*conditions, **kwargs):
    return SelectionRule(conditions=list(conditions), **kwargs)


def template(template_id, *rules, **kwargs):
    return Template(id=template_id, name=template_id, rules=list(rules), **kwargs)


class TestEvaluateRules:
    """Test scoring."""

    def test_no_rules(self):
        result = evaluate_rules(template("t"), ANSWERS)
        assert result.score == 0
        assert result.total_rules == 0

    def test_always_include(self):
        result = evaluate_rules(template("t", rule(is_always_include=True), rule()), ANSWERS)
        assert result.score == 1.0
        assert result.is_always_include
        assert result.matched_rules == result.total_rules == 2

    def test_manual_only(self):
        result = evaluate_rules(template("t", rule(RuleCondition("state", EQ, "Delaware"), is_manual_only=True)), ANSWERS)
        assert result.score == 0
        assert result.is_manual_only

    def test_score_is_fraction_of_conditional_rules(self):
        t = template(
            "t",
            rule(RuleCondition("state", EQ, "Delaware")),
            rule(RuleCondition("size", EQ, "large")),
            rule(),
        )
        result = evaluate_rules(t, ANSWERS)
        assert result.matched_rules == 1
        assert result.total_rules == 2
        assert result.score == 0.5

    def test_and_versus_or(self):
        both = [RuleCondition("state", EQ, "Delaware"), RuleCondition("size", EQ, "large")]
        assert evaluate_rules(template("t", rule(*both)), ANSWERS).score == 0
        assert evaluate_rules(template("t", rule(*both, logical_operator=LogicalOperator.OR)), ANSWERS).score == 1

    def test_priority_does_not_change_score(self):
        a = rule(RuleCondition("state", EQ, "Delaware"), priority=100)
        b = rule(RuleCondition("size", EQ, "large"), priority=1)
        assert evaluate_rules(template("t", a, b), ANSWERS).score == evaluate_rules(template("t", b, a), ANSWERS).score


class TestSelectTemplates:
    """Test bucket assignment."""

    def test_buckets(self):
        templates = [
            template("always", rule(is_always_include=True)),
            template("full", rule(RuleCondition("state", EQ, "delaware"))),
            template(
                "two-thirds",
                rule(RuleCondition("state", EQ, "Delaware")),
                rule(RuleCondition("size", EQ, "small")),
                rule(RuleCondition("size", EQ, "large")),
            ),
            template("half", rule(RuleCondition("state", EQ, "Delaware")), rule(RuleCondition("size", EQ, "large"))),
            template("manual", rule(is_manual_only=True)),
            template("none"),
            template("inactive", rule(is_always_include=True), is_active=False),
        ]
        selection = select_templates(ANSWERS, templates)
        assert [t.id for t in selection.required] == ["always", "full"]
        assert [t.id for t in selection.suggested] == ["two-thirds"]
        assert [t.id for t in selection.optional] == ["half", "manual", "none"]

    def test_sorted_by_label(self):
        templates = [
            template("b", rule(is_always_include=True), display_name="Zeta"),
            template("a", rule(is_always_include=True), display_name="Alpha"),
        ]
        assert [t.label for t in select_templates(ANSWERS, templates).required] == ["Alpha", "Zeta"]

    def test_label_order_ignores_case(self):
        templates = [
            template("b", rule(is_always_include=True), display_name="Banana"),
            template("a", rule(is_always_include=True), display_name="apple"),
            template("c", rule(is_always_include=True), display_name="Apple"),
            template("d", rule(is_always_include=True), display_name="cherry"),
        ]
        labels = [t.label for t in select_templates(ANSWERS, templates).required]
        assert labels == ["Apple", "apple", "Banana", "cherry"]


def test_example_bundle_partition(bundle):
    computed = compute_variables(bundle.responses)
    selection = select_templates(bundle.responses, bundle.templates, computed)
    assert [t.id for t in selection.required] == ["bylaws", "coi"]
    assert [t.id for t in selection.suggested] == ["option-plan"]
    assert [t.id for t in selection.optional] == ["bank-consent", "foreign-qualification", "founder-stock"]


def test_evaluation_details(bundle):
    founder_stock = bundle.get_template("founder-stock")
    computed = compute_variables(bundle.responses)
    evaluation, details = get_template_evaluation_details(founder_stock, bundle.responses, computed)
    assert evaluation.score == 0.5
    assert [(d.rule_index, d.is_met, d.actual_value) for d in details] == [
        (0, True, "2"),
        (1, False, "yes"),
    ]
