"""Backends that consume a finished variable map (text preview)."""

from .preview import extract_placeholders, generate_preview_text, missing_placeholders

__all__ = ["extract_placeholders", "generate_preview_text", "missing_placeholders"]
