"""
Document Variable Engine (docvars)

Turns questionnaire answers into the flat variable namespace consumed by a
document-templating renderer, and decides which templates apply to a
respondent.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - HTTP request handling
    - Persistent storage
    - Document binary formats
    - Template rendering

It is a pure, synchronous data pipeline: every call takes its full input
and returns a fresh output. Callers own I/O.
"""

__version__ = "0.1.0"
