"""
Plain-text preview of a template body.

Placeholders are ``{name}``. Loop and section tags (``{#founders}``,
``{/founders}``) are not variables and are ignored.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")
_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def extract_placeholders(text: str) -> List[str]:
    """
    Distinct placeholder names in ``text``, sorted case-insensitively.

    Names differing only in case count once; the first spelling is kept.
    """
    seen: Dict[str, str] = {}
    for raw in _PLACEHOLDER.findall(text or ""):
        name = raw.strip()
        if _IDENTIFIER.match(name):
            seen.setdefault(name.lower(), name)
    return sorted(seen.values(), key=str.lower)


def generate_preview_text(text: str, variables: Mapping[str, Any]) -> str:
    """
    Substitute string variables into ``text``.

    Empty values render as ``[name]`` so gaps stand out; placeholders with
    no variable at all are left untouched.
    """
    result = text
    for key, value in variables.items():
        if not isinstance(value, str):
            continue
        result = result.replace(f"{{{key}}}", value or f"[{key}]")
    return result


def missing_placeholders(text: str, variables: Mapping[str, Any]) -> List[str]:
    """Placeholders with no non-empty value in ``variables``."""
    return [name for name in extract_placeholders(text) if not variables.get(name)]
