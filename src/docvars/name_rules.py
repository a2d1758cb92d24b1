"""
Name-based formatting rules.

Some answers are formatted by what their id or field is called rather than
by a mapping. All such rules live in the tables below; nothing else in the
package decides formatting from a name.

    ANSWER_NAME_RULES   answer id (lower-cased) -> formatter
    GROUP_FIELD_RULES   repeating-group field (lower-cased) -> kind
    OFFICER_NAME_ALIASES officer answer id -> extra variable spellings
"""

from __future__ import annotations

from typing import Callable, Dict, Mapping, Tuple

from docvars.formatters import corporate_capitalize, format_currency, parse_float, to_title_case


FOUNDERS = "founders"
DIRECTORS = "directors"
CORPORATION = "corporation"

COMPANY_NAME_IDS = (
    "companyname", "companyname1", "companyname2", "companyname3",
    "corporationname", "businessname", "entityname",
)
PERSON_NAME_IDS = (
    "ceoname", "cfoname", "csname", "agentname", "registeredagentname", "incorporatorname",
)

ANSWER_NAME_RULES: Dict[str, Callable[[str], str]] = {
    **{qid: corporate_capitalize for qid in COMPANY_NAME_IDS},
    **{qid: to_title_case for qid in PERSON_NAME_IDS},
}

# Field kinds:
#   money        "$" + comma-grouped amount
#   person_name  title case
#   entity_name  title case, corporate capitalize for corporation founders
GROUP_FIELD_RULES: Dict[str, str] = {
    "cash": "money",
    "ceoname": "person_name",
    "name": "entity_name",
}

OFFICER_NAME_ALIASES: Dict[str, Tuple[str, ...]] = {
    "ceoName": ("CEOName", "CEONAME"),
    "cfoName": ("CFOName", "CFONAME"),
    "csName": ("CSName", "CSNAME"),
    "chairmanName": ("ChairmanName", "CHAIRMANNAME"),
}


def is_corporation(record: Mapping[str, str]) -> bool:
    return (record.get("type") or "").lower() == CORPORATION


def format_answer_by_name(question_id: str, text: str) -> str:
    rule = ANSWER_NAME_RULES.get(question_id.lower())
    return rule(text) if rule else text


def format_group_field(group: str, field: str, record: Mapping[str, str]) -> str:
    """Formatted value of one field of one repeating-group record."""
    value = record.get(field) or ""
    if not value:
        return value
    kind = GROUP_FIELD_RULES.get(field.lower())
    if kind == "money":
        amount = parse_float(value.replace(",", ""))
        return format_currency(amount) if amount is not None else value
    if kind == "person_name":
        return to_title_case(value)
    if kind == "entity_name":
        if group == FOUNDERS and is_corporation(record):
            return corporate_capitalize(value)
        return to_title_case(value)
    return value
