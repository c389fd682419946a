"""
Unit tests for respondent-safe partitioning.

Run with: python -m pytest ous_demographics/_tests/test_partitioner.py -v
"""

import pytest
from shapely.geometry import box


def _records(ids):
    from ous_demographics.models import SurveyRecord

    return [SurveyRecord(respondent_id=rid, geometry=box(0, 0, 1, 1)) for rid in ids]


def _ids(slices):
    return [[r.respondent_id for r in s] for s in slices]


def _assert_respondent_safe(slices, records, k):
    """Slices are contiguous, non-empty, at most k, and never split a respondent."""
    assert len(slices) <= k
    assert all(slices)
    assert [r for s in slices for r in s] == list(records)
    seen = {}
    for index, s in enumerate(slices):
        for r in s:
            assert seen.setdefault(r.respondent_id, index) == index


class TestPartitionEdgeCases:
    """Test empty, small and degenerate inputs."""

    def test_empty_input_gives_no_slices(self):
        from ous_demographics.parallel import partition_by_respondent

        assert partition_by_respondent([], 6) == []

    def test_fewer_records_than_partitions(self):
        from ous_demographics.parallel import partition_by_respondent

        records = _records(["a", "b", "c"])
        slices = partition_by_respondent(records, 6)
        assert _ids(slices) == [["a", "b", "c"]]

    def test_single_partition(self):
        from ous_demographics.parallel import partition_by_respondent

        records = _records(["a", "a", "b", "c"])
        assert _ids(partition_by_respondent(records, 1)) == [["a", "a", "b", "c"]]

    def test_invalid_partition_count(self):
        from ous_demographics.parallel import partition_by_respondent

        with pytest.raises(ValueError):
            partition_by_respondent(_records(["a"]), 0)


class TestPartitionBoundaries:
    """Test boundary walking around shared respondents."""

    def test_even_split_on_distinct_respondents(self):
        from ous_demographics.parallel import partition_by_respondent

        records = _records(["a", "b", "c", "d", "e", "f"])
        slices = partition_by_respondent(records, 3)
        assert _ids(slices) == [["a", "b"], ["c", "d"], ["e", "f"]]

    def test_boundary_walks_forward_past_shared_respondent(self):
        from ous_demographics.parallel import partition_by_respondent

        # Nominal cut at 2 falls inside respondent "b"
        records = _records(["a", "b", "b", "b", "c", "d"])
        slices = partition_by_respondent(records, 3)
        assert _ids(slices) == [["a", "b", "b", "b"], ["c", "d"]]
        _assert_respondent_safe(slices, records, 3)

    def test_dominant_respondent_yields_one_large_slice(self):
        """A respondent owning more than N/K records is never split."""
        from ous_demographics.parallel import partition_by_respondent

        records = _records(["a"] + ["b"] * 8 + ["c"])
        slices = partition_by_respondent(records, 5)
        assert _ids(slices) == [["a", "b", "b", "b", "b", "b", "b", "b", "b"], ["c"]]

    def test_walk_reaching_end_is_absorbed(self):
        from ous_demographics.parallel import partition_by_respondent

        records = _records(["a", "a", "a", "a", "a", "a"])
        slices = partition_by_respondent(records, 3)
        assert _ids(slices) == [["a"] * 6]

    def test_uneven_sizes_never_produce_empty_slices(self):
        """7 records into 6 partitions: nominal size 2 leaves trailing boundaries unused."""
        from ous_demographics.parallel import partition_by_respondent

        records = _records(["a", "b", "c", "d", "e", "f", "g"])
        slices = partition_by_respondent(records, 6)
        assert _ids(slices) == [["a", "b"], ["c", "d"], ["e", "f"], ["g"]]

    def test_realistic_input_is_respondent_safe(self, many_records):
        from ous_demographics.parallel import partition_by_respondent, sort_by_respondent

        records = sort_by_respondent(many_records)
        for k in (1, 2, 3, 6, 11):
            _assert_respondent_safe(partition_by_respondent(records, k), records, k)


class TestSortByRespondent:
    """Test the stable respondent sort."""

    def test_sort_groups_respondents_and_is_stable(self, survey_records):
        from ous_demographics.parallel import sort_by_respondent

        ordered = sort_by_respondent(survey_records)
        assert [r.respondent_id for r in ordered] == ["A", "A", "B", "B"]
        # Input order kept within a respondent
        assert [r.sector for r in ordered[2:]] == ["tuna fishing", "bait fishing"]
        assert ordered[0].gear == "Nets  Jigging"
