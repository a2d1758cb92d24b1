"""
Person-repeat expansion.

Templates flagged ``repeat_for_persons`` render once per person. Persons
are collected from directors, founders and the officer answers, merged by
exact trimmed name, and each rendering gets the base variable map with a
Person* overlay on top.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from docvars.formatters import corporate_capitalize, format_number_with_comma, parse_float, to_title_case
from docvars.model import PersonTypeFilter, ResponseSet, Template
from docvars.name_rules import CORPORATION, DIRECTORS, FOUNDERS, is_corporation

logger = logging.getLogger(__name__)

INDIVIDUAL = "individual"

PERSON_AUTO_VARIABLES = (
    "PersonName", "personName", "PersonAddress", "personAddress",
    "PersonEmail", "personEmail", "PersonRoles", "personRoles",
    "PersonCash", "personCash", "PersonShare", "personShare",
    "PersonCeoName", "personCeoName", "PersonCEOName",
    "FounderName", "founderName", "FounderAddress", "founderAddress",
    "FounderEmail", "founderEmail", "FounderCash", "founderCash",
    "FounderShare", "founderShare", "DirectorName", "directorName",
    "DirectorAddress", "directorAddress", "DirectorEmail", "directorEmail",
)

# (answer id, role, address answer, email answer)
_OFFICERS = (
    ("ceoName", "CEO", "ceoAddress", "ceoEmail"),
    ("cfoName", "CFO", "cfoAddress", "cfoEmail"),
    ("csName", "Corporate Secretary", "csAddress", "csEmail"),
    ("chairmanName", "Chairman", None, None),
)


@dataclass
class Person:
    name: str
    roles: List[str] = field(default_factory=list)
    address: Optional[str] = None
    email: Optional[str] = None
    cash: Optional[str] = None
    type: Optional[str] = None
    ceo_name: Optional[str] = None

    @property
    def is_corporation(self) -> bool:
        return self.type == CORPORATION

    @property
    def is_founder(self) -> bool:
        return "Founder" in self.roles


def extract_all_persons(responses: ResponseSet) -> List[Person]:
    """
    Every distinct person, in first-seen order:
    directors, founders, CEO, CFO, Corporate Secretary, Chairman.

    Names are matched exactly after trimming, so "jane doe" and "Jane Doe"
    are two persons. Later sources only fill contact details that are
    still missing.
    """
    persons: Dict[str, Person] = {}

    directors = responses.group(DIRECTORS)
    for record in directors.records if directors else ():
        name = (record.get("name") or "").strip()
        if not name:
            continue
        person = persons.get(name)
        if person is None:
            persons[name] = Person(name, ["Director"], record.get("address"), record.get("email"))
            continue
        person.roles.append("Director")
        person.address = person.address or record.get("address")
        person.email = person.email or record.get("email")

    founders = responses.group(FOUNDERS)
    for record in founders.records if founders else ():
        name = (record.get("name") or "").strip()
        if not name:
            continue
        kind = CORPORATION if is_corporation(record) else INDIVIDUAL
        ceo_name = record.get("ceoName") or record.get("ceoname") or ""
        person = persons.get(name)
        if person is None:
            persons[name] = Person(
                name,
                ["Founder"],
                record.get("address"),
                record.get("email"),
                record.get("cash"),
                kind,
                ceo_name if kind == CORPORATION else None,
            )
            continue
        person.roles.append("Founder")
        person.address = person.address or record.get("address")
        person.email = person.email or record.get("email")
        if record.get("cash"):
            person.cash = record["cash"]
        if kind == CORPORATION:
            person.type = CORPORATION
            if ceo_name:
                person.ceo_name = ceo_name

    for question_id, role, address_id, email_id in _OFFICERS:
        name = (responses.text(question_id) or "").strip()
        if not name:
            continue
        address = responses.text(address_id) if address_id else None
        email = responses.text(email_id) if email_id else None
        person = persons.get(name)
        if person is None:
            persons[name] = Person(name, [role], address, email)
            continue
        person.roles.append(role)
        person.address = person.address or address
        person.email = person.email or email

    return list(persons.values())


def person_matches_filter(person: Person, type_filter: PersonTypeFilter) -> bool:
    if type_filter is PersonTypeFilter.INDIVIDUAL:
        return not person.is_corporation
    if type_filter is PersonTypeFilter.INDIVIDUAL_FOUNDER:
        return person.is_founder and not person.is_corporation
    if type_filter in (PersonTypeFilter.CORPORATION, PersonTypeFilter.CORPORATION_FOUNDER):
        return person.is_corporation
    return True


def _amount(text: Optional[str]) -> float:
    value = parse_float((text or "").replace("$", "").replace(",", "") or "0")
    return value if value is not None else 0.0


def create_person_variables(base: Mapping[str, Any], person: Person) -> Dict[str, Any]:
    """The base map with Person*, Founder* and Director* set for one person."""
    variables: Dict[str, Any] = dict(base)

    name = corporate_capitalize(person.name) if person.is_corporation else to_title_case(person.name)
    address = person.address or ""
    email = person.email or ""
    roles = " / ".join(person.roles)
    ceo_name = to_title_case(person.ceo_name) if person.is_corporation and person.ceo_name else ""

    cash = _amount(person.cash)
    cash_text = "$" + format_number_with_comma(cash) if cash > 0 else ""

    fmv_text = base.get("fairMarketValue") or base.get("FMV") or "0"
    fmv = _amount(fmv_text if isinstance(fmv_text, str) else "0")
    share_text = format_number_with_comma(math.floor(cash / fmv)) if fmv > 0 and cash > 0 else ""

    for key, value in (
        ("Name", name),
        ("Address", address),
        ("Email", email),
        ("Roles", roles),
        ("CeoName", ceo_name),
        ("Cash", cash_text),
        ("Share", share_text),
    ):
        variables[f"Person{key}"] = value
        variables[f"person{key}"] = value
    variables["PersonCEOName"] = ceo_name

    if person.is_founder:
        for key, value in (
            ("Name", name),
            ("Address", address),
            ("Email", email),
            ("Cash", cash_text),
            ("Share", share_text),
        ):
            variables[f"Founder{key}"] = value
            variables[f"founder{key}"] = value

    if "Director" in person.roles:
        for key, value in (("Name", name), ("Address", address), ("Email", email)):
            variables[f"Director{key}"] = value
            variables[f"director{key}"] = value

    logger.debug("Person variables for %s: roles=%s cash=%r share=%r", person.name, roles, cash_text, share_text)
    return variables


def expand_for_persons(
    base: Mapping[str, Any],
    responses: ResponseSet,
    template: Template,
    selected_indices: Optional[Sequence[int]] = None,
) -> List[Tuple[Person, Dict[str, Any]]]:
    """
    One variable map per selected person that passes the template's
    person-type filter. ``selected_indices`` index into
    extract_all_persons(); None selects everyone.
    """
    persons = extract_all_persons(responses)
    indices = range(len(persons)) if selected_indices is None else selected_indices

    expanded: List[Tuple[Person, Dict[str, Any]]] = []
    for index in indices:
        if not 0 <= index < len(persons):
            logger.warning("Person at index %d not found for template %s", index, template.id)
            continue
        person = persons[index]
        if not person_matches_filter(person, template.person_type_filter):
            logger.debug("Skipping %s for template %s (%s)", person.name, template.id, template.person_type_filter.value)
            continue
        expanded.append((person, create_person_variables(base, person)))
    return expanded
