"""
Test the example incorporation bundle.

Validates that the example builder creates the expected answers,
templates and mappings, so the demos and the other tests can rely on it.
"""

from docvars.examples import build_certificate_mappings, build_example_incorporation
from docvars.model import CALCULATED, PersonTypeFilter, RepeatingGroup


def test_example_bundle_structure():
    bundle = build_example_incorporation()

    # Six active templates plus one inactive
    assert len(bundle.templates) == 7
    assert [t.id for t in bundle.templates if not t.is_active] == ["legacy-form"]

    founders = bundle.responses.group("founders")
    assert isinstance(founders, RepeatingGroup)
    assert len(founders.records) == 2
    assert len(bundle.responses.group("directors").records) == 2

    founder_stock = bundle.get_template("founder-stock")
    assert founder_stock.repeat_for_persons
    assert founder_stock.person_type_filter is PersonTypeFilter.INDIVIDUAL_FOUNDER

    assert bundle.get_template("missing") is None


def test_certificate_mappings():
    mappings = {m.variable_name: m for m in build_certificate_mappings()}
    assert mappings["companyName"].required
    assert mappings["totalCapital"].question_id == CALCULATED
    assert mappings["founderOneShares"].formula == "{Founder1Cash} / {FMV}"


def test_builders_return_fresh_objects():
    first = build_example_incorporation()
    second = build_example_incorporation()
    first.templates[0].variables.clear()
    assert second.templates[0].variables
