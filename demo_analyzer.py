"""
Demo: Run the analyzer on every example template and print the reports.
"""

from datetime import datetime

from docvars.analyzer import analyze_template
from docvars.engine import transform_survey_to_variables
from docvars.examples import build_example_incorporation
from docvars.groups import compute_variables
from docvars.model import TransformOptions
from docvars.serialization import bundle_to_yaml


def print_report(report):
    """Pretty-print a TemplateReport."""
    print()
    print("=" * 70)
    print(f"TEMPLATE ANALYSIS REPORT: {report.template_name} ({report.template_id})")
    print("=" * 70)
    print()

    print("📊 BASIC METRICS")
    print(f"  Total Rules:           {report.total_rules}")
    print(f"  Total Conditions:      {report.total_conditions}")
    print(f"  Total Mappings:        {report.total_mappings}")
    print()

    print("📈 MAPPING SOURCES")
    for source, count in sorted(report.mappings_by_source.items()):
        print(f"    {source}: {count}")
    if report.unanswered_questions:
        print(f"  Unanswered Questions:  {sorted(report.unanswered_questions)}")
    print()

    if report.formula_references:
        print("📐 FORMULAS")
        for name, references in report.formula_references.items():
            print(f"    {name}: {', '.join(references)}")
        print(f"  Max Formula Depth:     {report.max_formula_depth}")
        print()

    evaluation = report.evaluation
    print("✅ SELECTION")
    print(f"  Score:                 {evaluation.score:.2f} ({evaluation.matched_rules}/{evaluation.total_rules} rules)")
    print(f"  Always Include:        {'YES' if evaluation.is_always_include else 'NO'}")
    print(f"  Manual Only:           {'YES' if evaluation.is_manual_only else 'NO'}")
    for detail in report.condition_details:
        mark = "✓" if detail.is_met else "✗"
        condition = detail.condition
        print(f"    {mark} rule {detail.rule_index}: {condition.question_id} {condition.operator.value} "
              f"{condition.value!r} (actual {detail.actual_value!r})")
    print()

    if report.validation is not None:
        print("⚙️  VALIDATION")
        print(f"  Valid:                 {'YES' if report.validation.is_valid else 'NO'}")
        print()

    if report.warnings:
        print("⚠️  WARNINGS")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    else:
        print("✨ NO WARNINGS - Template looks clean!")
    print()


if __name__ == "__main__":
    bundle = build_example_incorporation()
    computed = compute_variables(bundle.responses)
    options = TransformOptions(now=datetime(2024, 1, 15, 9, 30), document_number="FR-20240115-DEMO01")

    for template in bundle.templates:
        variables = transform_survey_to_variables(bundle.responses, template.variables, options)
        print_report(analyze_template(template, bundle.responses, variables, computed))

    # Also save the bundle to YAML for inspection
    with open("example_bundle_output.yaml", "w", encoding="utf-8") as f:
        f.write(bundle_to_yaml(bundle))
    print("✅ Bundle exported to example_bundle_output.yaml")
