"""
List Formatters

Join an ordered sequence of strings into prose:

    []                  -> ""
    ["A"]               -> "A"
    ["A", "B"]          -> "A and B"
    ["A", "B", "C"]     -> "A, B, and C"   (Oxford comma)

plus plain comma and newline joins, and the helper variables generated for
multi-select answers.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence


def _join_with(items: Sequence[str], connector: str) -> str:
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} {connector} {items[1]}"
    return f"{', '.join(items[:-1])}, {connector} {items[-1]}"


def format_list_and(items: Sequence[str]) -> str:
    return _join_with(items, "and")


def format_list_or(items: Sequence[str]) -> str:
    return _join_with(items, "or")


def format_list_comma(items: Sequence[str]) -> str:
    return ", ".join(items)


def format_list_newline(items: Sequence[str]) -> str:
    return "\n".join(items)


LIST_RULES = {
    "list_and": format_list_and,
    "list_or": format_list_or,
    "list_comma": format_list_comma,
    "list_newline": format_list_newline,
}


def format_list(items: Sequence[str], rule: str = "list_and") -> str:
    """Join with the named list rule; unknown rules fall back to ``list_and``."""
    return LIST_RULES.get(rule, format_list_and)(items)


def loop_items(items: Sequence[str]) -> List[Dict[str, Any]]:
    """Loop records for a renderer: ``{value, isFirst, isLast, index}``, 1-indexed."""
    last = len(items) - 1
    return [
        {"value": item, "isFirst": i == 0, "isLast": i == last, "index": i + 1}
        for i, item in enumerate(items)
    ]


def generate_array_helper_variables(base_name: str, items: Sequence[str]) -> Dict[str, Any]:
    """
    Helper variables for a plain list answer.

    Generated (for base name ``options``):
        optionsCount, optionsFormatted, optionsList, optionsOrList,
        optionsFirst, optionsLast (non-empty lists only),
        hasMultipleOptions, hasSingleOptions, hasNoOptions ("true" or ""),
        options1, options2, ... and the loop array ``options``.
    """
    capitalized = base_name[:1].upper() + base_name[1:]
    helpers: Dict[str, Any] = {
        f"{base_name}Count": str(len(items)),
        f"{base_name}Formatted": format_list_and(items),
        f"{base_name}List": format_list_comma(items),
        f"{base_name}OrList": format_list_or(items),
    }
    if items:
        helpers[f"{base_name}First"] = items[0]
        helpers[f"{base_name}Last"] = items[-1]

    helpers[f"hasMultiple{capitalized}"] = "true" if len(items) >= 2 else ""
    helpers[f"hasSingle{capitalized}"] = "true" if len(items) == 1 else ""
    helpers[f"hasNo{capitalized}"] = "true" if not items else ""

    for index, item in enumerate(items, start=1):
        helpers[f"{base_name}{index}"] = item

    helpers[base_name] = loop_items(items)
    return helpers
