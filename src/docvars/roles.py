"""Role lookup: which offices a named person holds."""

from __future__ import annotations

from typing import List

from docvars.lists import format_list_and
from docvars.model import ResponseSet

ROLE_FULL_NAMES = {
    "CEO": "Chief Executive Officer",
    "CFO": "Chief Financial Officer",
    "Corporate Secretary": "Corporate Secretary",
    "CS": "Corporate Secretary",
    "Director": "Director",
    "Founder": "Shareholder",
    "Chairman": "Chairman of the Board",
}

# Officer titles take precedence over Director in signature blocks.
OFFICER_ROLES = ("CEO", "CFO", "Corporate Secretary")

_OFFICER_ANSWERS = (
    ("ceoName", "CEO"),
    ("cfoName", "CFO"),
    ("csName", "Corporate Secretary"),
    ("chairmanName", "Chairman"),
)

_GROUP_ANSWERS = (
    ("directors", "Director"),
    ("founders", "Founder"),
)


def get_roles_for_name(name: str, responses: ResponseSet) -> List[str]:
    """
    Every role ``name`` holds, matched case-insensitively after trimming.

    Order: CEO, CFO, Corporate Secretary, Chairman, Director, Founder.
    """
    if not name or not name.strip():
        return []
    wanted = name.strip().lower()

    roles: List[str] = []
    for question_id, role in _OFFICER_ANSWERS:
        officer = (responses.text(question_id) or "").strip()
        if officer and officer.lower() == wanted:
            roles.append(role)

    for question_id, role in _GROUP_ANSWERS:
        group = responses.group(question_id)
        if group and any((record.get("name") or "").strip().lower() == wanted for record in group.records):
            roles.append(role)
    return roles


def format_roles_as_title(roles: List[str]) -> str:
    """``["CEO", "CFO"]`` -> ``"Chief Executive Officer and Chief Financial Officer"``."""
    titles = list(dict.fromkeys(ROLE_FULL_NAMES.get(role, role) for role in roles))
    return format_list_and(titles)


def get_title_for_name(name: str, responses: ResponseSet) -> str:
    """Officer titles if any, else "Director" for directors, else ""."""
    roles = get_roles_for_name(name, responses)
    officer_roles = [role for role in roles if role in OFFICER_ROLES]
    if officer_roles:
        return format_roles_as_title(officer_roles)
    if "Director" in roles:
        return ROLE_FULL_NAMES["Director"]
    return ""
