"""
Tests for docvars Core Model Objects

These tests verify:
    - Classification of raw answers into Scalar / MultiSelect / RepeatingGroup
    - Response set lookups and duplicate handling
    - Template and result defaults
"""

import pytest

from docvars.model import (
    MultiSelect,
    RepeatingGroup,
    ResponseSet,
    Scalar,
    SurveyResponse,
    Template,
    ValidationResult,
    answer_is_present,
    answer_text,
    answer_to_raw,
    answer_value_from_raw,
)


class TestAnswerValues:
    """Test raw answer classification."""

    def test_scalar(self):
        """Strings, numbers and booleans become scalars."""
        assert answer_value_from_raw("Delaware") == Scalar("Delaware")
        assert answer_value_from_raw(12.0) == Scalar("12")
        assert answer_value_from_raw(0.5) == Scalar("0.5")
        assert answer_value_from_raw(False) == Scalar("false")
        assert answer_value_from_raw(None) == Scalar("")

    def test_multi_select(self):
        """A list of plain values is a multi-select."""
        assert answer_value_from_raw(["A", 2]) == MultiSelect(("A", "2"))
        assert answer_value_from_raw([]) == MultiSelect(())

    def test_repeating_group(self):
        """A list whose first element is a mapping is a repeating group."""
        value = answer_value_from_raw([{"name": "Ann", "cash": 100}, {"name": "Bo"}])
        assert value == RepeatingGroup(({"name": "Ann", "cash": "100"}, {"name": "Bo"}))

    def test_bare_mapping_is_rejected(self):
        """A single record is not a valid answer."""
        with pytest.raises(TypeError):
            answer_value_from_raw({"name": "Ann"})

    def test_raw_inverse(self):
        """answer_to_raw gives back plain Python values."""
        assert answer_to_raw(MultiSelect(("A", "B"))) == ["A", "B"]
        assert answer_to_raw(RepeatingGroup(({"name": "Ann"},))) == [{"name": "Ann"}]


class TestAnswerText:
    """Test flattening answers for comparison."""

    def test_presence(self):
        """Only a missing answer or an empty scalar counts as absent."""
        assert not answer_is_present(None)
        assert not answer_is_present(Scalar(""))
        assert answer_is_present(Scalar(" "))
        assert answer_is_present(MultiSelect(()))

    def test_text(self):
        """Multi-selects join with commas; groups give their size."""
        assert answer_text(MultiSelect(("A", "B"))) == "A,B"
        assert answer_text(RepeatingGroup(({"name": "a"}, {"name": "b"}))) == "2"


class TestResponseSet:
    """Test response set lookups."""

    def test_lookups(self):
        responses = ResponseSet.from_mapping({
            "state": "Delaware",
            "services": ["Banking", "Payroll"],
            "directors": [{"name": "Ann"}],
        })
        assert responses.text("state") == "Delaware"
        assert responses.text("services") is None
        assert responses.first_text("services") == "Banking"
        assert responses.group("directors").records[0]["name"] == "Ann"
        assert responses.group("state") is None
        assert [name for name, _ in responses.groups()] == ["directors"]
        assert "state" in responses
        assert len(responses) == 3

    def test_last_duplicate_wins(self):
        responses = ResponseSet([
            SurveyResponse.of("state", "Nevada"),
            SurveyResponse.of("city", "Dover"),
            SurveyResponse.of("state", "Delaware"),
        ])
        assert responses.text("state") == "Delaware"
        assert [r.question_id for r in responses] == ["city", "state"]

    def test_with_answer_copies(self):
        responses = ResponseSet.from_mapping({"state": "Nevada"})
        updated = responses.with_answer("state", "Delaware")
        assert responses.text("state") == "Nevada"
        assert updated.text("state") == "Delaware"


def test_group_field_names_are_the_union():
    group = RepeatingGroup(({"name": "a", "cash": "1"}, {"name": "b", "type": "corporation"}))
    assert group.field_names() == ["name", "cash", "type"]


def test_template_label_fallback():
    assert Template(id="coi").label == "coi"
    assert Template(id="coi", name="certificate").label == "certificate"
    assert Template(id="coi", name="certificate", display_name="Certificate").label == "Certificate"


def test_validation_result():
    assert ValidationResult().is_valid
    assert not ValidationResult(empty_required=["x"]).is_valid
