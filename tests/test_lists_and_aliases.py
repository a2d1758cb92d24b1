"""
Tests for list joining and variable naming.
"""

from docvars.aliases import (
    case_variants,
    expand_case_aliases,
    first_item_names,
    group_list_names,
    indexed_names,
    is_auto_generated_variable,
)
from docvars.lists import (
    format_list,
    format_list_and,
    format_list_or,
    generate_array_helper_variables,
)


class TestListJoining:
    """Test prose list joins."""

    def test_and_list(self):
        assert format_list_and([]) == ""
        assert format_list_and(["A"]) == "A"
        assert format_list_and(["A", "B"]) == "A and B"
        assert format_list_and(["A", "B", "C"]) == "A, B, and C"

    def test_or_list(self):
        assert format_list_or(["A", "B", "C"]) == "A, B, or C"

    def test_named_rules(self):
        assert format_list(["A", "B"], "list_comma") == "A, B"
        assert format_list(["A", "B"], "list_newline") == "A\nB"
        assert format_list(["A", "B"], "unknown") == "A and B"


def test_array_helpers():
    helpers = generate_array_helper_variables("options", ["x", "y", "z"])
    assert helpers["optionsCount"] == "3"
    assert helpers["optionsFormatted"] == "x, y, and z"
    assert helpers["optionsOrList"] == "x, y, or z"
    assert helpers["optionsFirst"] == "x"
    assert helpers["optionsLast"] == "z"
    assert helpers["options2"] == "y"
    assert helpers["hasMultipleOptions"] == "true"
    assert helpers["hasSingleOptions"] == ""
    assert helpers["hasNoOptions"] == ""
    assert helpers["options"][0] == {"value": "x", "isFirst": True, "isLast": False, "index": 1}
    assert helpers["options"][2]["isLast"] is True


def test_array_helpers_for_empty_list():
    helpers = generate_array_helper_variables("options", [])
    assert helpers["hasNoOptions"] == "true"
    assert "optionsFirst" not in helpers
    assert helpers["options"] == []


class TestCaseAliases:
    """Test case-variant aliasing."""

    def test_variants_exclude_the_key(self):
        assert case_variants("companyName") == ["companyname", "COMPANYNAME", "CompanyName"]

    def test_existing_entries_win(self):
        expanded = expand_case_aliases({"FMV": "$0.1", "fmv": "other"})
        assert expanded["fmv"] == "other"
        assert expanded["fMV"] == "$0.1"

    def test_non_strings_get_no_aliases(self):
        expanded = expand_case_aliases({"founders": [{"name": "A"}]})
        assert set(expanded) == {"founders"}


def test_group_names():
    assert group_list_names("founders", "name")["list_or"] == "foundersNameOrList"
    assert indexed_names("founders", 2, "cash") == ["founder2Cash", "Founder2Cash", "founders2Cash"]
    assert first_item_names("directors", "email") == ["directorEmail", "DirectorEmail", "directoremail"]


class TestAutoGenerated:
    """Test the engine-produced variable catalogue."""

    def test_catalogue_names(self):
        assert is_auto_generated_variable("FMV")
        assert is_auto_generated_variable("companyname")
        assert is_auto_generated_variable("PersonShare")

    def test_group_patterns(self):
        assert is_auto_generated_variable("foundersCount")
        assert is_auto_generated_variable("hasMultipleDirectors")
        assert is_auto_generated_variable("foundersCashFormatted")
        assert is_auto_generated_variable("Founder3Share")

    def test_plain_answers_are_not_auto(self):
        assert not is_auto_generated_variable("incorporationState")
