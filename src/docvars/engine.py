"""
Variable transformation engine.

Turns survey responses plus a template's variable mappings into the flat
variable map a document renderer consumes, and validates such a map.

ARCHITECTURAL RULE:
    The engine is pure. It reads no files and keeps no state between
    calls; two transformations of the same input (with the same clock and
    document number) give the same map.
"""

from __future__ import annotations

import logging
from datetime import datetime
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

from docvars.model import ResponseSet, SurveyResponse, Template, TransformOptions, ValidationResult, VariableMapping
from docvars.persons import PERSON_AUTO_VARIABLES
from docvars.stages import STAGES, StageContext

logger = logging.getLogger(__name__)

# Names that only exist inside a renderer loop body.
LOOP_CONTEXT_VARIABLES = (
    "name", "Name", "NAME",
    "address", "Address", "ADDRESS",
    "email", "Email", "EMAIL",
    "type", "Type", "TYPE",
    "cash", "Cash", "CASH",
    "share", "Share", "SHARE",
    "ceoName", "CeoName", "ceoname",
    "isCorporation", "isIndividual",
    "index", "isFirst", "isLast",
)


def _as_response_set(responses: Union[ResponseSet, Iterable[SurveyResponse]]) -> ResponseSet:
    if isinstance(responses, ResponseSet):
        return responses
    return ResponseSet(responses)


def transform_survey_to_variables(
    responses: Union[ResponseSet, Iterable[SurveyResponse]],
    mappings: Iterable[VariableMapping],
    options: Optional[TransformOptions] = None,
) -> Mapping[str, Any]:
    """
    Build the variable map for one template.

    Example:
        variables = transform_survey_to_variables(
            ResponseSet.from_mapping({"companyName": "acme corp"}),
            [VariableMapping("companyName", "companyName")],
        )
        variables["companyName"] == "Acme Corp"

    Returns a read-only mapping. Values are strings, except loop arrays
    (lists of dicts) for repeating groups and multi-select mappings.
    """
    options = options or TransformOptions()
    context = StageContext(
        responses=_as_response_set(responses),
        mappings=tuple(mappings),
        now=options.now or datetime.now(),
        document_number=options.document_number,
        overrides=dict(options.overrides),
        config=options.config,
    )

    variables: Mapping[str, Any] = MappingProxyType({})
    for name, stage in STAGES:
        patch = stage(context, variables)
        if patch:
            variables = MappingProxyType({**variables, **patch})
        logger.debug("Stage %s: %d entries (%d total)", name, len(patch), len(variables))

    logger.info(
        "Transformed %d responses with %d mappings into %d variables",
        len(context.responses), len(context.mappings), len(variables),
    )
    return variables


def _is_empty(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return not value


def validate_variables(variables: Mapping[str, Any], mappings: Iterable[VariableMapping]) -> ValidationResult:
    """
    Missing: a mapped variable absent from the map.
    Empty required: a required mapped variable that is blank.
    """
    result = ValidationResult()
    for mapping in mappings:
        name = mapping.variable_name
        if name not in variables:
            result.missing_variables.append(name)
        elif mapping.required and _is_empty(variables[name]):
            result.empty_required.append(name)
    return result


def validate_template_variables(variables: Mapping[str, Any], template: Template) -> ValidationResult:
    """
    validate_variables for a template's own mappings, skipping names that
    only get values later: Person* overlays for per-person templates,
    loop-body fields otherwise.
    """
    excluded = PERSON_AUTO_VARIABLES if template.repeat_for_persons else LOOP_CONTEXT_VARIABLES
    mappings = [m for m in template.variables if m.variable_name not in excluded]
    result = validate_variables(variables, mappings)
    if not result.is_valid:
        logger.warning(
            "Template %s has missing or empty variables: missing=%s empty=%s",
            template.id, result.missing_variables, result.empty_required,
        )
    return result
