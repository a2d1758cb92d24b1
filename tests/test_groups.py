"""
Tests for repeating-group expansion and the computed-variable table.
"""

import pytest

from docvars.groups import compute_variables, expand_group, founder_kind_variables, loop_records
from docvars.model import RepeatingGroup, ResponseSet


@pytest.fixture
def founders():
    return RepeatingGroup((
        {"name": "jane doe", "type": "individual", "cash": "1,000,000"},
        {"name": "seoul ventures LLC", "type": "Corporation", "cash": "500000", "ceoName": "kim min"},
        {"name": "bob lee", "cash": "lots"},
    ))


class TestExpandGroup:
    """Test the variables one group expands into."""

    def test_count_and_flags(self, founders):
        variables = expand_group("founders", founders)
        assert variables["foundersCount"] == "3"
        assert variables["hasMultipleFounders"] == "true"
        assert variables["hasSingleFounders"] == ""

    def test_single_record_flags(self):
        variables = expand_group("directors", RepeatingGroup(({"name": "ann"},)))
        assert variables["hasMultipleDirectors"] == ""
        assert variables["hasSingleDirectors"] == "true"

    def test_field_lists(self, founders):
        variables = expand_group("founders", founders)
        assert variables["foundersNameFormatted"] == "Jane Doe, Seoul Ventures LLC, and Bob Lee"
        assert variables["foundersNameList"] == "Jane Doe, Seoul Ventures LLC, Bob Lee"
        assert variables["foundersNameOrList"] == "Jane Doe, Seoul Ventures LLC, or Bob Lee"

    def test_indexed_values(self, founders):
        variables = expand_group("founders", founders)
        assert variables["founder2Name"] == "Seoul Ventures LLC"
        assert variables["Founder1Cash"] == "$1,000,000"
        assert variables["founders2Cash"] == "$500,000"
        assert variables["Founder3Cash"] == "lots"

    def test_fields_are_the_union_across_records(self, founders):
        variables = expand_group("founders", founders)
        assert variables["founder2CeoName"] == "Kim Min"
        assert variables["founder1CeoName"] == ""

    def test_first_record_aliases(self, founders):
        variables = expand_group("founders", founders)
        assert variables["founderName"] == "Jane Doe"
        assert variables["FounderCash"] == "$1,000,000"
        assert variables["founder"] == "Jane Doe"
        assert variables["Founder"] == "Jane Doe"

    def test_directors_are_title_cased(self):
        variables = expand_group("directors", RepeatingGroup(({"name": "ACME holdings LLC"},)))
        assert variables["director1Name"] == "Acme Holdings Llc"

    def test_records_are_not_mutated(self, founders):
        before = [dict(record) for record in founders.records]
        expand_group("founders", founders)
        assert [dict(record) for record in founders.records] == before


class TestLoopRecords:
    """Test the loop array a renderer iterates over."""

    def test_positions(self, founders):
        records = loop_records("founders", founders)
        assert [r["index"] for r in records] == [1, 2, 3]
        assert [r["isFirst"] for r in records] == [True, False, False]
        assert [r["isLast"] for r in records] == [False, False, True]

    def test_founder_aliases_and_kind(self, founders):
        second = loop_records("founders", founders)[1]
        assert second["name"] == "Seoul Ventures LLC"
        assert second["FounderName"] == "Seoul Ventures LLC"
        assert second["founderCash"] == "$500,000"
        assert second["FounderCeoName"] == "Kim Min"
        assert second["isCorporation"] is True
        assert second["isIndividual"] is False

    def test_other_groups_have_no_founder_fields(self):
        record = loop_records("directors", RepeatingGroup(({"name": "ann"},)))[0]
        assert "FounderName" not in record
        assert "isCorporation" not in record


def test_founder_kinds(founders):
    variables = founder_kind_variables(founders)
    assert variables["individualFounderName"] == "Jane Doe"
    assert variables["IndividualFounderCash"] == "$1,000,000"
    assert variables["corporationFounderName"] == "Seoul Ventures LLC"
    assert variables["corporationFounderCeoName"] == "Kim Min"


def test_founder_kinds_without_corporation():
    variables = founder_kind_variables(RepeatingGroup(({"name": "ann"},)))
    assert variables["corporationFounderName"] == ""
    assert variables["CorporationFounderCeoName"] == ""


class TestComputeVariables:
    """Test the table read by computed conditions."""

    def test_counts(self, founders):
        computed = compute_variables(ResponseSet.from_mapping({"founders": list(founders.records)}))
        assert computed["foundersCount"] == 3
        assert computed["hasMultipleFounders"] == "true"
        assert computed["individualFoundersCount"] == 2
        assert computed["corporationFoundersCount"] == 1
        assert computed["hasIndividualFounder"] == "true"
        assert computed["hasCorporationFounder"] == "true"

    def test_only_founders_get_kind_counts(self):
        computed = compute_variables(ResponseSet.from_mapping({"directors": [{"name": "a"}]}))
        assert computed == {"directorsCount": 1, "hasMultipleDirectors": "", "hasSingleDirectors": "true"}

    def test_scalars_are_ignored(self):
        assert compute_variables(ResponseSet.from_mapping({"state": "Delaware"})) == {}
