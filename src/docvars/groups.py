"""
Repeating-group expansion.

A repeating group answer (``founders``, ``directors``, ...) becomes:
    - a count and hasMultiple/hasSingle flags
    - per field: and/comma/or lists plus one variable per index
    - a loop array of formatted records for the renderer
    - first-record aliases (``founderName``)
    - for founders: the first individual and first corporation founder

compute_variables builds the small table condition rules read with
``sourceType: computed``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from docvars.aliases import (
    capitalize_first,
    first_item_names,
    group_count_name,
    group_flag_names,
    group_list_names,
    indexed_names,
    singular_of,
)
from docvars.lists import format_list_and, format_list_comma, format_list_or
from docvars.model import RepeatingGroup, ResponseSet
from docvars.name_rules import FOUNDERS, format_group_field, is_corporation

logger = logging.getLogger(__name__)


def _flag(condition: bool) -> str:
    return "true" if condition else ""


def founder_loop_aliases(item: Dict[str, Any]) -> Dict[str, Any]:
    """Capitalised field aliases a founders loop body may reference."""
    aliases: Dict[str, Any] = {}
    for field, alias in (("name", "Name"), ("address", "Address"), ("email", "Email"), ("cash", "Cash")):
        value = item.get(field) or ""
        aliases[f"Founder{alias}"] = value
        aliases[f"founder{alias}"] = value
    ceo_name = item.get("ceoName") or item.get("ceoname") or ""
    aliases["FounderCeoName"] = ceo_name
    aliases["founderCeoName"] = ceo_name
    return aliases


def loop_records(group: str, answer: RepeatingGroup) -> List[Dict[str, Any]]:
    """Formatted records with ``index`` (1-based), ``isFirst`` and ``isLast``."""
    last = len(answer.records) - 1
    items: List[Dict[str, Any]] = []
    for position, record in enumerate(answer.records):
        item: Dict[str, Any] = {key: format_group_field(group, key, record) for key in record}
        if group == FOUNDERS:
            item.update(founder_loop_aliases(item))
        item["index"] = position + 1
        item["isFirst"] = position == 0
        item["isLast"] = position == last
        if group == FOUNDERS:
            corporation = is_corporation(record)
            item["isCorporation"] = corporation
            item["isIndividual"] = not corporation
        items.append(item)
    return items


def _first_founder_variables(prefix: str, record: Optional[Dict[str, str]], fields: List[str]) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for field in fields:
        value = format_group_field(FOUNDERS, field, record) if record else ""
        name = f"{prefix}{capitalize_first(field)}"
        variables[name] = value
        variables[capitalize_first(name)] = value
    return variables


def founder_kind_variables(answer: RepeatingGroup) -> Dict[str, str]:
    """
    individualFounder* and corporationFounder* from the first founder of
    each kind. Missing kinds give empty strings.
    """
    individual = next((r for r in answer.records if not is_corporation(r)), None)
    corporation = next((r for r in answer.records if is_corporation(r)), None)

    variables = _first_founder_variables(
        "individualFounder", individual, ["name", "address", "email", "cash"]
    )
    variables.update(_first_founder_variables(
        "corporationFounder", corporation, ["name", "address", "email", "cash"]
    ))
    ceo_name = ""
    if corporation:
        ceo_record = {"ceoName": corporation.get("ceoName") or corporation.get("ceoname") or ""}
        ceo_name = format_group_field(FOUNDERS, "ceoName", ceo_record)
    variables["corporationFounderCeoName"] = ceo_name
    variables["CorporationFounderCeoName"] = ceo_name
    return variables


def expand_group(group: str, answer: RepeatingGroup) -> Dict[str, Any]:
    """All variables derived from one non-empty repeating group."""
    records = answer.records
    count = len(records)
    multiple, single = group_flag_names(group)

    variables: Dict[str, Any] = {
        group_count_name(group): str(count),
        multiple: _flag(count > 1),
        single: _flag(count == 1),
    }

    for field in answer.field_names():
        values = [format_group_field(group, field, record) for record in records]
        names = group_list_names(group, field)
        variables[names["list_and"]] = format_list_and(values)
        variables[names["list_comma"]] = format_list_comma(values)
        variables[names["list_or"]] = format_list_or(values)
        for index, value in enumerate(values, start=1):
            for name in indexed_names(group, index, field):
                variables[name] = value

    variables[group] = loop_records(group, answer)

    first = records[0]
    for field in first:
        value = format_group_field(group, field, first)
        for name in first_item_names(group, field):
            variables[name] = value

    singular = singular_of(group)
    first_name = format_group_field(group, "name", first)
    variables[singular] = first_name
    variables[capitalize_first(singular)] = first_name

    if group == FOUNDERS:
        variables.update(founder_kind_variables(answer))

    logger.debug("Expanded group %s: %d records, %d variables", group, count, len(variables))
    return variables


def compute_variables(responses: ResponseSet) -> Dict[str, Union[int, str]]:
    """
    Counts and flags rule conditions can test with ``sourceType: computed``.

    Example:
        {"foundersCount": 2, "hasMultipleFounders": "true", "hasSingleFounders": "",
         "individualFoundersCount": 1, "corporationFoundersCount": 1, ...}
    """
    computed: Dict[str, Union[int, str]] = {}
    for group, answer in responses.groups():
        if not answer.records:
            continue
        count = len(answer.records)
        multiple, single = group_flag_names(group)
        computed[group_count_name(group)] = count
        computed[multiple] = _flag(count > 1)
        computed[single] = _flag(count == 1)

        if group == FOUNDERS:
            corporations = sum(1 for record in answer.records if is_corporation(record))
            individuals = count - corporations
            computed["individualFoundersCount"] = individuals
            computed["corporationFoundersCount"] = corporations
            computed["hasIndividualFounder"] = _flag(individuals > 0)
            computed["hasCorporationFounder"] = _flag(corporations > 0)
    return computed
