"""
Respondent-safe partitioning of survey records.

Splits a respondent-sorted record sequence into at most K contiguous slices
so that every respondent's records land in exactly one slice. The engine
dedups respondents per run, so a respondent split across two slices would be
counted twice after merging.

Cuts start at nominal boundaries of ceil(N/K) records and walk forward while
the record before the cut belongs to the same respondent as the record at the
cut. A walk that reaches the end of the sequence, or a nominal boundary
already passed by a previous walk, is absorbed into the current slice.
"""

import math
from typing import List, Sequence

from ous_demographics.models.survey_record import SurveyRecord


def sort_by_respondent(records: Sequence[SurveyRecord]) -> List[SurveyRecord]:
    """Stable sort by respondent ID (input order kept within a respondent)."""
    return sorted(records, key=lambda r: r.respondent_id)


def partition_by_respondent(
    records: Sequence[SurveyRecord], n_partitions: int
) -> List[List[SurveyRecord]]:
    """
    Split respondent-sorted records into respondent-safe slices.

    Args:
        records: Records sorted (grouped) by respondent ID
        n_partitions: Maximum number of slices (K >= 1)

    Returns:
        Non-empty contiguous slices whose concatenation equals the input.
        Empty input gives no slices; fewer records than K give one slice.

    Raises:
        ValueError: If n_partitions < 1
    """
    if n_partitions < 1:
        raise ValueError(f"n_partitions must be >= 1, got {n_partitions}")

    n = len(records)
    if n == 0:
        return []
    if n < n_partitions:
        return [list(records)]

    size = math.ceil(n / n_partitions)
    ids = [r.respondent_id for r in records]

    slices: List[List[SurveyRecord]] = []
    start = 0
    for i in range(1, n_partitions):
        cut = max(i * size, start)
        if cut >= n:
            break
        while cut < n and ids[cut] == ids[cut - 1]:
            cut += 1
        if cut >= n:
            break
        if cut > start:
            slices.append(list(records[start:cut]))
            start = cut

    if start < n:
        slices.append(list(records[start:]))
    return slices
