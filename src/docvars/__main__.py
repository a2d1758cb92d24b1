"""
Command-line entry point.

    docvars transform BUNDLE [--template ID]
    docvars select BUNDLE
    docvars validate BUNDLE --template ID
    docvars persons BUNDLE --template ID
    docvars analyze BUNDLE --template ID

BUNDLE is a YAML or JSON file (see docvars.serialization.Bundle). Results
are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from docvars.analyzer import analyze_template
from docvars.config import load_config
from docvars.engine import transform_survey_to_variables, validate_template_variables
from docvars.groups import compute_variables
from docvars.logging_setup import configure_logging
from docvars.model import Template, TransformOptions
from docvars.persons import expand_for_persons
from docvars.rules import select_templates
from docvars.serialization import (
    Bundle,
    evaluation_to_dict,
    load_bundle,
    selection_to_dict,
    validation_to_dict,
)

logger = logging.getLogger("docvars")


def _read_bundle(path: str) -> Bundle:
    text = Path(path).read_text(encoding="utf-8")
    fmt = "json" if path.endswith(".json") else "yaml"
    return load_bundle(text, fmt)


def _template(bundle: Bundle, template_id: Optional[str]) -> Optional[Template]:
    if template_id is None:
        return None
    template = bundle.get_template(template_id)
    if template is None:
        raise SystemExit(f"Unknown template: {template_id}")
    return template


def _transform(bundle: Bundle, template: Optional[Template], options: TransformOptions) -> Dict[str, Any]:
    mappings = list(bundle.mappings)
    if template is not None:
        mappings.extend(template.variables)
    return dict(transform_survey_to_variables(bundle.responses, mappings, options))


def _print_json(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, sort_keys=True, ensure_ascii=False)
    sys.stdout.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docvars", description="Document variable engine")
    parser.add_argument("--config", help="Settings file (default: docvars.yaml)")
    parser.add_argument("--now", help="Fixed clock as an ISO date or datetime")
    parser.add_argument("--document-number", help="Fixed document number")

    sub = parser.add_subparsers(dest="command", required=True)

    transform = sub.add_parser("transform", help="Print the variable map")
    transform.add_argument("bundle")
    transform.add_argument("--template", help="Apply this template's mappings")

    select = sub.add_parser("select", help="Print required / suggested / optional templates")
    select.add_argument("bundle")

    for name, help_text in (
        ("validate", "Validate a template's variables"),
        ("persons", "Print one variable map per person"),
        ("analyze", "Print diagnostics for a template"),
    ):
        command = sub.add_parser(name, help=help_text)
        command.add_argument("bundle")
        command.add_argument("--template", required=True)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    configure_logging(config.log_level)

    bundle = _read_bundle(args.bundle)
    logger.debug(
        "Loaded %s: %d responses, %d templates, %d mappings",
        args.bundle, len(bundle.responses), len(bundle.templates), len(bundle.mappings),
    )
    template = _template(bundle, getattr(args, "template", None))
    options = TransformOptions(
        now=datetime.fromisoformat(args.now) if args.now else None,
        document_number=args.document_number,
        config=config,
    )

    if args.command == "transform":
        _print_json(_transform(bundle, template, options))
        return 0

    if args.command == "select":
        computed = compute_variables(bundle.responses)
        _print_json(selection_to_dict(select_templates(bundle.responses, bundle.templates, computed)))
        return 0

    variables = _transform(bundle, template, options)

    if args.command == "validate":
        result = validate_template_variables(variables, template)
        _print_json(validation_to_dict(result))
        return 0 if result.is_valid else 1

    if args.command == "persons":
        expanded = expand_for_persons(variables, bundle.responses, template)
        _print_json([{"person": person.name, "roles": person.roles, "variables": v} for person, v in expanded])
        return 0

    report = analyze_template(template, bundle.responses, variables, compute_variables(bundle.responses))
    _print_json({
        "templateId": report.template_id,
        "templateName": report.template_name,
        "evaluation": evaluation_to_dict(report.evaluation),
        "mappingsBySource": report.mappings_by_source,
        "undefinedReferences": sorted(report.undefined_references),
        "unmetConditions": report.unmet_conditions,
        "warnings": report.warnings,
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
