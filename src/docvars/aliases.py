"""
Variable naming strategy.

Every derived variable name the engine emits is built here, so each alias
rule can be tested on its own:
    - case variants (lower, UPPER, First-upper, first-lower)
    - repeating-group names (Count, hasMultiple..., {group}{Field}Formatted)
    - per-index names ({singular}{N}{Field} and friends)
    - the catalogue of engine-produced ("auto-generated") names
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Tuple


REPEATABLE_GROUPS = ("directors", "founders")
REPEATABLE_GROUP_FIELDS = ("name", "address", "email", "type", "ceoName", "cash", "share")


def capitalize_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def singular_of(group: str) -> str:
    """``founders`` -> ``founder``."""
    return group[:-1] if group.endswith("s") else group


def case_variants(key: str) -> List[str]:
    """The other spellings a case-insensitive consumer may look up."""
    variants: List[str] = []
    for variant in (key.lower(), key.upper(), capitalize_first(key), lower_first(key)):
        if variant != key and variant not in variants:
            variants.append(variant)
    return variants


def derive_aliases(key: str, value: Any) -> List[Tuple[str, Any]]:
    """Case-variant aliases of one entry. Non-string values get none."""
    if not isinstance(value, str):
        return []
    return [(variant, value) for variant in case_variants(key)]


def expand_case_aliases(variables: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Add case-variant aliases for every string variable.

    Entries already in the map always win; among aliases the first one
    derived wins.
    """
    result = dict(variables)
    for key, value in variables.items():
        for alias, alias_value in derive_aliases(key, value):
            result.setdefault(alias, alias_value)
    return result


# =========================================================================
# Repeating-group names
# =========================================================================


def group_count_name(group: str) -> str:
    return f"{group}Count"


def group_flag_names(group: str) -> Tuple[str, str]:
    """``(hasMultipleFounders, hasSingleFounders)``."""
    capitalized = capitalize_first(group)
    return f"hasMultiple{capitalized}", f"hasSingle{capitalized}"


def group_list_names(group: str, field: str) -> Dict[str, str]:
    """List-rule -> variable name for one field across all records."""
    base = f"{group}{capitalize_first(field)}"
    return {
        "list_and": f"{base}Formatted",
        "list_comma": f"{base}List",
        "list_or": f"{base}OrList",
    }


def indexed_names(group: str, index: int, field: str) -> List[str]:
    """``founder1Cash``, ``Founder1Cash``, ``founders1Cash`` (1-indexed)."""
    singular = singular_of(group)
    field_cap = capitalize_first(field)
    return [
        f"{singular}{index}{field_cap}",
        f"{capitalize_first(singular)}{index}{field_cap}",
        f"{group}{index}{field_cap}",
    ]


def first_item_names(group: str, field: str) -> List[str]:
    """``founderCash``, ``FounderCash`` and ``founder`` + the field name as written."""
    singular = singular_of(group)
    field_cap = capitalize_first(field)
    names = [
        f"{singular}{field_cap}",
        f"{capitalize_first(singular)}{field_cap}",
        f"{singular}{field}",
    ]
    return list(dict.fromkeys(names))


# =========================================================================
# Auto-generated variable catalogue
# =========================================================================

ENGINE_VARIABLES = (
    # company
    "companyName", "companyName1", "companyName2", "companyName3", "info", "designator",
    "companyAddress", "usAddress", "krAddress", "hasUSAddress",
    # dates
    "currentDate", "currentDateShort", "currentDateISO", "currentDateKR", "currentTime",
    "currentYear", "documentNumber",
    "COIDate", "COIDateShort", "COIDateISO", "COIDateKR",
    "SIGNDate", "SIGNDateShort", "SIGNDateISO", "SIGNDateKR", "SIGNYear",
    "cashin", "cashinShort", "cashinISO", "SHSIGNDate", "SHSIGNDateShort", "SHSIGNDateISO",
    # officers
    "ceoName", "CEOName", "cfoName", "CFOName", "csName", "CSName", "chairmanName",
    "BankConsent", "BankConsent1", "BankConsent2",
    "BankConsentTitle", "BankConsent1Title", "BankConsent2Title",
    # per-person overlay
    "PersonName", "PersonAddress", "PersonEmail", "PersonRoles", "PersonCash",
    "PersonShare", "PersonCeoName", "PersonCEOName",
    "FounderName", "FounderAddress", "FounderEmail", "FounderCash", "FounderShare",
    "FounderCeoName", "FounderCEOName",
    "DirectorName", "DirectorAddress", "DirectorEmail",
    # first individual / corporation founder
    "individualFounderName", "individualFounderAddress", "individualFounderEmail",
    "individualFounderCash",
    "corporationFounderName", "corporationFounderCeoName", "corporationFounderAddress",
    "corporationFounderEmail", "corporationFounderCash",
    # loop arrays
    "founders", "founder", "directors", "director",
    # shares
    "authorizedShares", "authorizedSharesRaw", "authorizedSharesEnglish",
    "parValue", "parValueDollar", "PV",
    "fairMarketValue", "fairMarketValueDollar", "FMV",
    "cashSum", "shareSum",
    "hasStockOption", "stockOption", "optionPool",
    "optionPoolShares", "optionPoolSharesRaw", "totalIssuedShares",
)

LOOP_CONTEXT_FIELDS = (
    "name", "address", "email", "type", "cash", "share", "ceoName",
    "isCorporation", "isIndividual",
    "index", "isFirst", "isLast",
)

_ENGINE_VARIABLES_LOWER = frozenset(name.lower() for name in ENGINE_VARIABLES)
_LOOP_CONTEXT_LOWER = frozenset(name.lower() for name in LOOP_CONTEXT_FIELDS)
_FIELD_ALTERNATION = "|".join(field.lower() for field in REPEATABLE_GROUP_FIELDS)


def _group_patterns() -> List["re.Pattern[str]"]:
    patterns = []
    for group in REPEATABLE_GROUPS:
        singular = singular_of(group)
        patterns.append(re.compile(rf"^{group}count$"))
        patterns.append(re.compile(rf"^has(?:multiple|single){group}$"))
        patterns.append(re.compile(rf"^{group}(?:{_FIELD_ALTERNATION})(?:formatted|list|orlist)$"))
        patterns.append(re.compile(rf"^(?:{singular}|{group})[1-9](?:{_FIELD_ALTERNATION})$"))
    return patterns


_GROUP_PATTERNS = _group_patterns()


def is_auto_generated_variable(name: str) -> bool:
    """
    True when the engine itself produces ``name`` (case-insensitive).

    Mappings for such variables only re-format an existing value; they
    never read an answer directly.
    """
    lowered = name.lower()
    if lowered in _ENGINE_VARIABLES_LOWER or lowered in _LOOP_CONTEXT_LOWER:
        return True
    return any(pattern.match(lowered) for pattern in _GROUP_PATTERNS)
