"""
Serialization helpers for docvars objects (responses, mappings, rules, templates).

Provides JSON/YAML round-trip via an intermediate dict representation.
Keys are camelCase, matching the records the surrounding services store.

Unknown enum values raise ValueError; records of the wrong shape raise
TypeError.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from docvars.model import (
    CUSTOMER_COMPANY,
    CUSTOMER_EMAIL,
    CUSTOMER_NAME,
    ConditionOperator,
    DataType,
    LogicalOperator,
    PersonTypeFilter,
    ResponseSet,
    RuleCondition,
    RuleEvaluationResult,
    SelectionRule,
    SourceType,
    SurveyResponse,
    Template,
    TemplateSelection,
    ValidationResult,
    ValueType,
    VariableMapping,
    answer_to_raw,
)

LEGACY_RULE_PRIORITY = 100


def _require_mapping(d: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(d, Mapping):
        raise TypeError(f"Unsupported {what} record type: {type(d)}")
    return d


def _text(value: Any) -> str:
    """Condition values may arrive as numbers or lists."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =========================================================================
# Responses
# =========================================================================


def response_to_dict(r: SurveyResponse) -> Dict[str, Any]:
    return {"questionId": r.question_id, "value": answer_to_raw(r.value)}


def response_from_dict(d: Any) -> SurveyResponse:
    d = _require_mapping(d, "response")
    return SurveyResponse.of(d["questionId"], d.get("value"))


def responses_to_list(responses: ResponseSet) -> List[Dict[str, Any]]:
    return [response_to_dict(r) for r in responses]


def responses_from_data(data: Any) -> ResponseSet:
    """A list of ``{questionId, value}`` records, or a plain id -> value mapping."""
    if data is None:
        return ResponseSet()
    if isinstance(data, Mapping):
        return ResponseSet.from_mapping(data)
    if isinstance(data, list):
        return ResponseSet(response_from_dict(d) for d in data)
    raise TypeError(f"Unsupported responses type: {type(data)}")


def with_customer_info(responses: ResponseSet, info: Optional[Mapping[str, Any]]) -> ResponseSet:
    """Add ``__customerName`` / ``__customerEmail`` / ``__customerCompany`` answers."""
    if not info:
        return responses
    for key, question_id in (("name", CUSTOMER_NAME), ("email", CUSTOMER_EMAIL), ("company", CUSTOMER_COMPANY)):
        if info.get(key):
            responses = responses.with_answer(question_id, info[key])
    return responses


# =========================================================================
# Mappings
# =========================================================================


def mapping_to_dict(m: VariableMapping) -> Dict[str, Any]:
    return {
        "variableName": m.variable_name,
        "questionId": m.question_id,
        "dataType": m.data_type.value,
        "transformRule": m.transform_rule,
        "required": m.required,
        "defaultValue": m.default_value,
        "formula": m.formula,
    }


def mapping_from_dict(d: Any) -> VariableMapping:
    d = _require_mapping(d, "variable mapping")
    default = d.get("defaultValue")
    return VariableMapping(
        variable_name=d["variableName"],
        question_id=d.get("questionId", ""),
        data_type=DataType(d.get("dataType") or "text"),
        transform_rule=d.get("transformRule") or "",
        required=bool(d.get("required", False)),
        default_value=_text(default) if default not in (None, "") else None,
        formula=d.get("formula") or None,
    )


# =========================================================================
# Rules
# =========================================================================


def condition_to_dict(c: RuleCondition) -> Dict[str, Any]:
    return {
        "questionId": c.question_id,
        "operator": c.operator.value,
        "value": c.value,
        "valueType": c.value_type.value,
        "valueQuestionId": c.value_question_id,
        "sourceType": c.source_type.value,
    }


def condition_from_dict(d: Any) -> RuleCondition:
    d = _require_mapping(d, "condition")
    return RuleCondition(
        question_id=d["questionId"],
        operator=ConditionOperator(d["operator"]),
        value=_text(d.get("value")),
        value_type=ValueType(d.get("valueType") or "literal"),
        value_question_id=d.get("valueQuestionId"),
        source_type=SourceType(d.get("sourceType") or "question"),
    )


def rule_to_dict(r: SelectionRule) -> Dict[str, Any]:
    return {
        "id": r.id,
        "conditions": [condition_to_dict(c) for c in r.conditions],
        "logicalOperator": r.logical_operator.value,
        "priority": r.priority,
        "isAlwaysInclude": r.is_always_include,
        "isManualOnly": r.is_manual_only,
    }


def _priority(d: Dict[str, Any], default: int) -> int:
    priority = d.get("priority")
    return default if priority is None else int(priority)


def _legacy_condition_value(value: Any) -> str:
    """Legacy records store list values as a JSON string."""
    if isinstance(value, str) and value.startswith("["):
        try:
            return _text(json.loads(value))
        except json.JSONDecodeError:
            return value
    return _text(value)


def rule_from_dict(d: Any) -> SelectionRule:
    """
    Read a rule record.

    Current records carry a ``conditions`` list. Legacy records carry either
    ``ruleType: always`` or one ``questionId`` / ``conditionOperator`` /
    ``conditionValue`` triple, and default to a lower priority.
    """
    d = _require_mapping(d, "rule")
    if isinstance(d.get("conditions"), list):
        return SelectionRule(
            id=d.get("id"),
            conditions=[condition_from_dict(c) for c in d["conditions"]],
            logical_operator=LogicalOperator(d.get("logicalOperator") or "AND"),
            priority=_priority(d, 1),
            is_always_include=bool(d.get("isAlwaysInclude", False)),
            is_manual_only=bool(d.get("isManualOnly", False)),
        )

    if d.get("ruleType") == "always":
        return SelectionRule(id=d.get("id"), priority=_priority(d, 1), is_always_include=True)

    conditions = []
    if d.get("questionId") and d.get("conditionOperator") and d.get("conditionValue") is not None:
        conditions.append(RuleCondition(
            question_id=d["questionId"],
            operator=ConditionOperator(d["conditionOperator"]),
            value=_legacy_condition_value(d["conditionValue"]),
        ))
    return SelectionRule(
        id=d.get("id"),
        conditions=conditions,
        priority=_priority(d, LEGACY_RULE_PRIORITY),
    )


# =========================================================================
# Templates
# =========================================================================


def template_to_dict(t: Template) -> Dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "displayName": t.display_name,
        "category": t.category,
        "rules": [rule_to_dict(r) for r in t.rules],
        "variables": [mapping_to_dict(m) for m in t.variables],
        "isActive": t.is_active,
        "repeatForPersons": t.repeat_for_persons,
        "personTypeFilter": t.person_type_filter.value,
    }


def template_from_dict(d: Any) -> Template:
    d = _require_mapping(d, "template")
    return Template(
        id=str(d["id"]),
        name=d.get("name", ""),
        display_name=d.get("displayName") or None,
        category=d.get("category") or "Other",
        rules=[rule_from_dict(r) for r in d.get("rules", [])],
        variables=[mapping_from_dict(m) for m in d.get("variables", [])],
        is_active=bool(d.get("isActive", True)),
        repeat_for_persons=bool(d.get("repeatForPersons", False)),
        person_type_filter=PersonTypeFilter(d.get("personTypeFilter") or "all"),
    )


def template_summary(t: Template) -> Dict[str, Any]:
    return {"id": t.id, "name": t.name, "displayName": t.label, "category": t.category}


# =========================================================================
# Results
# =========================================================================


def evaluation_to_dict(e: RuleEvaluationResult) -> Dict[str, Any]:
    return {
        "templateId": e.template_id,
        "score": e.score,
        "matchedRules": e.matched_rules,
        "totalRules": e.total_rules,
        "isAlwaysInclude": e.is_always_include,
        "isManualOnly": e.is_manual_only,
    }


def selection_to_dict(s: TemplateSelection) -> Dict[str, Any]:
    return {
        "required": [template_summary(t) for t in s.required],
        "suggested": [template_summary(t) for t in s.suggested],
        "optional": [template_summary(t) for t in s.optional],
    }


def validation_to_dict(v: ValidationResult) -> Dict[str, Any]:
    return {
        "isValid": v.is_valid,
        "missingVariables": list(v.missing_variables),
        "emptyRequired": list(v.empty_required),
    }


def variables_to_json(variables: Mapping[str, Any]) -> str:
    return json.dumps(dict(variables), sort_keys=True, ensure_ascii=False)


# =========================================================================
# Bundles
# =========================================================================


@dataclass
class Bundle:
    """
    One survey's answers plus the templates (and loose mappings) to run.

    On disk:
        responses:    [{questionId, value}, ...] or {questionId: value}
        customerInfo: {name, email, company}       (optional)
        templates:    [template records]
        mappings:     [mapping records]           (optional)
    """

    responses: ResponseSet = field(default_factory=ResponseSet)
    templates: List[Template] = field(default_factory=list)
    mappings: List[VariableMapping] = field(default_factory=list)

    def get_template(self, template_id: str) -> Optional[Template]:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None


def bundle_to_dict(b: Bundle) -> Dict[str, Any]:
    return {
        "responses": responses_to_list(b.responses),
        "templates": [template_to_dict(t) for t in b.templates],
        "mappings": [mapping_to_dict(m) for m in b.mappings],
    }


def bundle_from_dict(d: Any) -> Bundle:
    d = _require_mapping(d, "bundle")
    responses = with_customer_info(responses_from_data(d.get("responses")), d.get("customerInfo"))
    return Bundle(
        responses=responses,
        templates=[template_from_dict(t) for t in d.get("templates", [])],
        mappings=[mapping_from_dict(m) for m in d.get("mappings", [])],
    )


def bundle_to_json(b: Bundle) -> str:
    return json.dumps(bundle_to_dict(b), sort_keys=True, ensure_ascii=False)


def bundle_from_json(s: str) -> Bundle:
    return bundle_from_dict(json.loads(s))


def bundle_to_yaml(b: Bundle) -> str:
    return yaml.safe_dump(bundle_to_dict(b), allow_unicode=True)


def bundle_from_yaml(s: str) -> Bundle:
    return bundle_from_dict(yaml.safe_load(s))


def load_bundle(text: str, fmt: Union[str, None] = None) -> Bundle:
    """Parse bundle text; ``fmt`` is "json" or "yaml" (YAML also reads JSON)."""
    if fmt == "json":
        return bundle_from_json(text)
    return bundle_from_yaml(text)
