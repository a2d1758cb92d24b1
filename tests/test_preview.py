"""
Tests for the plain-text preview backend.
"""

from docvars.backends import extract_placeholders, generate_preview_text, missing_placeholders
from docvars.engine import transform_survey_to_variables

BODY = """CERTIFICATE OF INCORPORATION OF {companyName}
{#founders}{name} pays {cash}{/founders}
Registered at {companyAddress}. Signed {SIGNDate} by {CompanyName}.
"""


def test_extract_placeholders():
    # Loop tags and case variants are not separate placeholders.
    assert extract_placeholders(BODY) == ["cash", "companyAddress", "companyName", "name", "SIGNDate"]


def test_extract_ignores_non_identifiers():
    assert extract_placeholders("{ a } {1x} {a-b} {}") == ["a"]
    assert extract_placeholders("") == []


def test_preview_substitutes_strings():
    text = generate_preview_text(BODY, {
        "companyName": "Acme Corp",
        "CompanyName": "Acme Corp",
        "companyAddress": "",
        "founders": [{"name": "Jane Doe"}],
    })
    assert "INCORPORATION OF Acme Corp" in text
    assert "Registered at [companyAddress]." in text
    assert "by Acme Corp." in text
    assert "{SIGNDate}" in text
    assert "{#founders}" in text


def test_missing_placeholders():
    variables = {"companyName": "Acme Corp", "companyAddress": "", "name": "x", "cash": "$1"}
    assert missing_placeholders(BODY, variables) == ["companyAddress", "SIGNDate"]


def test_preview_of_example_certificate(bundle, options):
    variables = transform_survey_to_variables(bundle.responses, bundle.get_template("coi").variables, options)
    text = generate_preview_text("{companyName} {designator} was formed on {incorporationDate}.", variables)
    assert text == "Acme Corp Inc. was formed on January 15, 2024."
