"""
Tests for serialization and deserialization of docvars objects.

These tests ensure lossless JSON/YAML round-trip of bundles and the
reading of legacy rule records, using `docvars.serialization`.
"""

import json

import pytest

from docvars.model import (
    CUSTOMER_EMAIL,
    CUSTOMER_NAME,
    ConditionOperator,
    DataType,
    LogicalOperator,
    MultiSelect,
    PersonTypeFilter,
    RepeatingGroup,
    Scalar,
    SourceType,
)
from docvars.serialization import (
    LEGACY_RULE_PRIORITY,
    bundle_from_dict,
    bundle_from_json,
    bundle_from_yaml,
    bundle_to_dict,
    bundle_to_json,
    bundle_to_yaml,
    load_bundle,
    mapping_from_dict,
    responses_from_data,
    rule_from_dict,
    template_from_dict,
    variables_to_json,
)


def test_json_roundtrip(bundle):
    before = bundle_to_dict(bundle)
    restored = bundle_from_json(bundle_to_json(bundle))
    assert bundle_to_dict(restored) == before


def test_yaml_roundtrip(bundle):
    before = bundle_to_dict(bundle)
    restored = bundle_from_yaml(bundle_to_yaml(bundle))
    assert bundle_to_dict(restored) == before


def test_load_bundle_reads_json_as_yaml(bundle):
    text = bundle_to_json(bundle)
    assert bundle_to_dict(load_bundle(text)) == bundle_to_dict(load_bundle(text, "json"))


class TestResponses:
    """Test answer records."""

    def test_record_list(self):
        responses = responses_from_data([
            {"questionId": "state", "value": "Delaware"},
            {"questionId": "services", "value": ["A", "B"]},
            {"questionId": "founders", "value": [{"name": "a", "cash": 100}]},
        ])
        assert responses.get("state") == Scalar("Delaware")
        assert responses.get("services") == MultiSelect(("A", "B"))
        assert responses.get("founders") == RepeatingGroup(({"name": "a", "cash": "100"},))

    def test_plain_mapping(self):
        responses = responses_from_data({"employees": 12, "remote": True})
        assert responses.text("employees") == "12"
        assert responses.text("remote") == "true"

    def test_duplicate_ids_keep_the_last(self):
        responses = responses_from_data([
            {"questionId": "state", "value": "Nevada"},
            {"questionId": "state", "value": "Delaware"},
        ])
        assert responses.text("state") == "Delaware"
        assert len(responses) == 1

    def test_customer_info(self):
        bundle = bundle_from_dict({
            "responses": {"state": "Delaware"},
            "customerInfo": {"name": "Ann Lee", "email": "ann@example.com"},
        })
        assert bundle.responses.text(CUSTOMER_NAME) == "Ann Lee"
        assert bundle.responses.text(CUSTOMER_EMAIL) == "ann@example.com"

    def test_wrong_shapes(self):
        with pytest.raises(TypeError):
            responses_from_data("state=Delaware")
        with pytest.raises(TypeError):
            responses_from_data([["state", "Delaware"]])
        with pytest.raises(TypeError):
            responses_from_data({"address": {"street": "1 Main St"}})


class TestRules:
    """Test current and legacy rule records."""

    def test_current_record(self):
        rule = rule_from_dict({
            "conditions": [
                {"questionId": "foundersCount", "operator": ">=", "value": 2, "sourceType": "computed"},
                {"questionId": "state", "operator": "in", "value": ["Delaware", "Nevada"]},
            ],
            "logicalOperator": "OR",
        })
        assert rule.priority == 1
        assert rule.logical_operator is LogicalOperator.OR
        assert rule.conditions[0].value == "2"
        assert rule.conditions[0].source_type is SourceType.COMPUTED
        assert rule.conditions[1].value == "Delaware,Nevada"

    def test_legacy_triple(self):
        rule = rule_from_dict({
            "questionId": "services",
            "conditionOperator": "contains",
            "conditionValue": '["Banking"]',
        })
        assert rule.priority == LEGACY_RULE_PRIORITY
        (condition,) = rule.conditions
        assert condition.operator is ConditionOperator.CONTAINS
        assert condition.value == "Banking"

    def test_legacy_always(self):
        rule = rule_from_dict({"ruleType": "always"})
        assert rule.is_always_include
        assert rule.priority == 1

    def test_explicit_zero_priority_is_kept(self):
        assert rule_from_dict({"conditions": [], "priority": 0}).priority == 0
        assert rule_from_dict({"ruleType": "always", "priority": 0}).priority == 0
        assert rule_from_dict({"questionId": "state", "priority": 0}).priority == 0
        assert rule_from_dict({"conditions": [], "priority": None}).priority == 1

    def test_legacy_without_condition(self):
        assert rule_from_dict({"questionId": "state"}).conditions == []

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            rule_from_dict({"conditions": [{"questionId": "a", "operator": "~="}]})


class TestTemplates:
    """Test template and mapping records."""

    def test_defaults(self):
        template = template_from_dict({"id": 7})
        assert template.id == "7"
        assert template.category == "Other"
        assert template.is_active
        assert template.person_type_filter is PersonTypeFilter.ALL

    def test_mapping(self):
        mapping = mapping_from_dict({
            "variableName": "capital",
            "questionId": "__calculated__",
            "dataType": "currency",
            "defaultValue": 0,
            "formula": "{a} + {b}",
        })
        assert mapping.data_type is DataType.CURRENCY
        assert mapping.default_value == "0"
        assert mapping.transform_rule == ""

    def test_unknown_data_type(self):
        with pytest.raises(ValueError):
            mapping_from_dict({"variableName": "x", "dataType": "blob"})

    def test_template_must_be_a_mapping(self):
        with pytest.raises(TypeError):
            template_from_dict(["coi"])


def test_variables_to_json_is_sorted():
    text = variables_to_json({"b": "2", "a": "1", "founders": [{"name": "A"}]})
    assert list(json.loads(text)) == ["a", "b", "founders"]
