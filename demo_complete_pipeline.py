#!/usr/bin/env python3
"""
Complete Pipeline Demo: Responses → Selection → Variables → Preview

Shows the full workflow on the example incorporation bundle:
1. Select templates from the survey answers
2. Transform answers into the certificate's variable map
3. Validate and analyze the certificate template
4. Preview a template body
5. Expand a per-person template
"""

from datetime import datetime

from docvars.analyzer import analyze_template
from docvars.backends import generate_preview_text, missing_placeholders
from docvars.engine import transform_survey_to_variables, validate_template_variables
from docvars.examples import build_example_incorporation
from docvars.groups import compute_variables
from docvars.logging_setup import configure_logging
from docvars.model import TransformOptions
from docvars.persons import expand_for_persons
from docvars.rules import select_templates

CERTIFICATE_BODY = """CERTIFICATE OF INCORPORATION OF {companyName} {designator}
Dated {incorporationDate}. Document {documentNumber}.
Directors: {directorNames}. Founders: {foundersNameFormatted}.
Total capital {totalCapital}; {founderOneShares} shares to {Founder1Name}.
Registered agent: {registeredAgent}
"""


def main():
    configure_logging("WARNING")
    bundle = build_example_incorporation()
    responses = bundle.responses
    computed = compute_variables(responses)

    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Responses → Selection → Variables → Preview")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Select templates
    # =========================================================================
    print("\n1. SELECTING TEMPLATES...")
    selection = select_templates(responses, bundle.templates, computed)
    for bucket in ("required", "suggested", "optional"):
        labels = [t.label for t in getattr(selection, bucket)]
        print(f"   ✓ {bucket:<9} {', '.join(labels) or '(none)'}")

    # =========================================================================
    # STEP 2: Transform
    # =========================================================================
    print("\n2. TRANSFORMING ANSWERS...")
    certificate = bundle.get_template("coi")
    options = TransformOptions(now=datetime(2024, 1, 15, 9, 30), document_number="FR-20240115-DEMO01")
    variables = transform_survey_to_variables(responses, certificate.variables, options)
    print(f"   ✓ Variables: {len(variables)}")
    for name in ("companyName", "FMV", "Founder1Share", "shareSum", "optionPoolShares", "SHSIGNDate"):
        print(f"   ✓ {name} = {variables.get(name)!r}")

    # =========================================================================
    # STEP 3: Validate and analyze
    # =========================================================================
    print("\n3. VALIDATING...")
    validation = validate_template_variables(variables, certificate)
    print(f"   ✓ Valid: {validation.is_valid}")
    report = analyze_template(certificate, responses, variables, computed)
    print(f"   ✓ Mappings by source: {report.mappings_by_source}")
    if report.warnings:
        print(f"\n   Warnings ({len(report.warnings)}):")
        for warning in report.warnings[:5]:
            print(f"      - {warning}")

    # =========================================================================
    # STEP 4: Preview
    # =========================================================================
    print("\n4. PREVIEW:")
    print("-" * 80)
    for line in generate_preview_text(CERTIFICATE_BODY, variables).splitlines():
        print(f"   {line}")
    print(f"   Unfilled: {missing_placeholders(CERTIFICATE_BODY, variables)}")

    # =========================================================================
    # STEP 5: Per-person expansion
    # =========================================================================
    print("\n5. PER-PERSON DOCUMENTS:")
    print("-" * 80)
    founder_stock = bundle.get_template("founder-stock")
    for person, person_vars in expand_for_persons(variables, responses, founder_stock):
        print(f"   ✓ {person_vars['PersonName']} ({person_vars['PersonRoles']}): "
              f"{person_vars['PersonCash']} → {person_vars['PersonShare']} shares")

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE!")
    print("=" * 80)


if __name__ == "__main__":
    main()
