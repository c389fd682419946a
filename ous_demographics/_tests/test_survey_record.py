"""
Unit tests for the SurveyRecord model.

Tests:
1. Category keys and their unknown buckets
2. Gear string splitting
3. People count resolution
4. Construction from export properties and transport dicts

Run with: python -m pytest ous_demographics/_tests/test_survey_record.py -v
"""

import math

import pytest
from shapely.geometry import box


def _record(**kwargs):
    from ous_demographics.models import SurveyRecord

    kwargs.setdefault("respondent_id", "R1")
    kwargs.setdefault("geometry", box(0, 0, 1, 1))
    return SurveyRecord(**kwargs)


class TestCategoryKeys:
    """Test atoll, island and sector key derivation."""

    def test_missing_attributes_use_unknown_buckets(self):
        """All-null optional attributes resolve to the unknown buckets."""
        record = _record()

        assert record.atoll_key() == "unknown-atoll"
        assert record.island_key() == "unknown-island"
        assert record.sector_key() == "unknown-sector"
        assert record.gear_keys() == ["unknown-gear"]

    def test_island_key_is_qualified_by_atoll(self):
        record = _record(atoll="Lh", island="Kurendhoo")
        assert record.island_key() == "Lh - Kurendhoo"

    def test_island_without_atoll_is_unknown(self):
        """An island name alone cannot be placed, so it is unknown."""
        record = _record(island="Kurendhoo")
        assert record.island_key() == "unknown-island"
        assert record.atoll_key() == "unknown-atoll"

    def test_empty_strings_are_unknown(self):
        record = _record(atoll="", sector="")
        assert record.atoll_key() == "unknown-atoll"
        assert record.sector_key() == "unknown-sector"

    def test_has_respondent(self):
        assert _record().has_respondent
        assert not _record(respondent_id="").has_respondent


class TestGearKeys:
    """Test splitting the delimited gear string."""

    def test_double_space_separates_tokens(self):
        record = _record(gear="Nets  Jigging")
        assert record.gear_keys() == ["Nets", "Jigging"]

    def test_single_space_stays_inside_token(self):
        record = _record(gear="Hand held nets   Pole and line")
        assert record.gear_keys() == ["Hand held nets", "Pole and line"]

    def test_surrounding_whitespace_is_ignored(self):
        record = _record(gear="  Longline  ")
        assert record.gear_keys() == ["Longline"]

    def test_whitespace_only_is_unknown(self):
        assert _record(gear="   ").gear_keys() == ["unknown-gear"]


class TestResolvePeople:
    """Test people count parsing."""

    @pytest.mark.parametrize("value", [None, "", "  ", float("nan")])
    def test_unset_defaults_to_one(self, value):
        assert _record(people_count=value).resolve_people() == 1

    @pytest.mark.parametrize(
        "value,expected", [("20", 20.0), (" 3 ", 3.0), ("2.5", 2.5), (4, 4.0)]
    )
    def test_numeric_values(self, value, expected):
        assert _record(people_count=value).resolve_people() == expected

    def test_zero_is_kept(self):
        """An explicit 0 is a value, not an unset marker."""
        assert _record(people_count="0").resolve_people() == 0

    @pytest.mark.parametrize("value", ["abc", "nan", "3 people"])
    def test_malformed_string_raises(self, value):
        from ous_demographics.models import PeopleCountError

        record = _record(respondent_id="R42", people_count=value)
        with pytest.raises(PeopleCountError, match="R42"):
            record.resolve_people()

    def test_people_count_error_is_value_error(self):
        from ous_demographics.models import PeopleCountError

        assert issubclass(PeopleCountError, ValueError)


class TestRecordConstruction:
    """Test factories and transport round trip."""

    def test_from_properties_normalises_nan(self):
        from ous_demographics.models import SurveyRecord

        record = SurveyRecord.from_properties(
            {
                "resp_id": 17,
                "weight": float("nan"),
                "atoll": float("nan"),
                "island": "Kurendhoo",
                "sector": "tuna fishing",
                "gear": None,
                "number_of_ppl": float("nan"),
            },
            box(0, 0, 1, 1),
        )

        assert record.respondent_id == "17"
        assert record.weight is None
        assert record.atoll is None
        assert record.people_count is None
        assert record.resolve_people() == 1

    def test_from_properties_missing_respondent(self):
        from ous_demographics.models import SurveyRecord

        record = SurveyRecord.from_properties({"resp_id": None}, box(0, 0, 1, 1))
        assert record.respondent_id == ""
        assert not record.has_respondent

    def test_custom_field_names(self):
        from ous_demographics.config_types import SurveyFieldsConfig
        from ous_demographics.models import SurveyRecord

        fields = SurveyFieldsConfig(respondent_id="rid", people_count="ppl")
        record = SurveyRecord.from_properties(
            {"rid": "X", "ppl": "5"}, box(0, 0, 1, 1), fields
        )
        assert record.respondent_id == "X"
        assert record.resolve_people() == 5

    def test_from_feature(self, survey_features):
        from ous_demographics.models import SurveyRecord

        record = SurveyRecord.from_feature(survey_features[0])
        assert record.respondent_id == "B"
        assert record.atoll == "HA"
        assert record.geometry.geom_type == "Polygon"
        assert math.isclose(record.geometry.bounds[0], 73.0)

    def test_transport_dict_preserves_fields(self, survey_records):
        from ous_demographics.models import SurveyRecord

        original = survey_records[1]
        restored = SurveyRecord.from_dict(original.to_dict())

        assert restored.respondent_id == original.respondent_id
        assert restored.gear == original.gear
        assert restored.people_count == original.people_count
        assert restored.geometry.equals(original.geometry)
