#!/usr/bin/env python3
"""
OUS Demographic Overlap Engine

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Count survey respondents (and the people they represent)
whose shapes overlap a planning area, broken down by sector, atoll, island
and gear type.

This is a PURE COMPUTATION module - no parallelism, no file I/O, no CONFIG
access. One call processes one respondent-safe partition; the orchestrator
runs one call per worker and merges the results.

Counting rules (a respondent owns many shapes):
- Overall, atoll and island: once per respondent
- Sector: once per respondent and sector
- Gear: once per respondent and gear token

Navigation Guide:
- compute_ous_stats: Core accumulation loop
- overlap_partition: Stats + metrics for one partition
- OverlapCounters: Per-run record bookkeeping for logging
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Set, Tuple

from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep

from ous_demographics.metric_emitter import gen_ous_metrics
from ous_demographics.models.metric import OverlapResult
from ous_demographics.models.ous_stats import OusStats, add_class_count
from ous_demographics.models.survey_record import SurveyRecord

logger = logging.getLogger("OUS.Engine")


@dataclass
class OverlapCounters:
    """Record bookkeeping for one engine run."""

    records: int = 0
    skipped_no_respondent: int = 0
    not_overlapping: int = 0
    counted: int = 0


def compute_ous_stats(
    records: Iterable[SurveyRecord],
    planning_geometry: Optional[BaseGeometry] = None,
    log: Optional[logging.Logger] = None,
) -> Tuple[OusStats, OverlapCounters]:
    """
    Accumulate demographic counts for records overlapping a planning area.

    Args:
        records: Survey records of ONE respondent-safe partition. A
            respondent split across two calls would be counted twice.
        planning_geometry: Combined planning area, or None to count every
            record (survey-wide baseline).
        log: Optional logger, defaults to the engine logger

    Returns:
        Tuple of (stats, counters)

    Raises:
        PeopleCountError: If a counted record has a non-numeric people count.
    """
    log = log or logger
    stats = OusStats()
    counters = OverlapCounters()

    # Prepared geometry speeds up repeated intersects() against one polygon
    prepared = prep(planning_geometry) if planning_geometry is not None else None

    counted_respondents: Set[str] = set()
    # (respondent, grouping, category key) already counted
    counted_categories: Set[Tuple[str, str, str]] = set()

    for record in records:
        counters.records += 1

        if not record.has_respondent:
            counters.skipped_no_respondent += 1
            log.debug(f"Missing respondent ID for record {counters.records}, skipping")
            continue

        if prepared is not None and not prepared.intersects(record.geometry):
            counters.not_overlapping += 1
            continue

        counters.counted += 1
        resp_id = record.respondent_id
        cur_people = record.resolve_people()

        # Once per respondent - overall, atoll, island
        if resp_id not in counted_respondents:
            stats.add_respondent(record.atoll_key(), record.island_key(), cur_people)
            counted_respondents.add(resp_id)

        # Once per respondent and gear token
        for gear in record.gear_keys():
            marker = (resp_id, "gear", gear)
            if marker not in counted_categories:
                add_class_count(stats.by_gear, gear, 1, cur_people)
                counted_categories.add(marker)

        # Once per respondent and sector
        sector = record.sector_key()
        marker = (resp_id, "sector", sector)
        if marker not in counted_categories:
            add_class_count(stats.by_sector, sector, 1, cur_people)
            counted_categories.add(marker)

    if counters.skipped_no_respondent:
        log.warning(
            f"⚠️ Skipped {counters.skipped_no_respondent} record(s) "
            f"with missing respondent ID"
        )

    return stats, counters


def overlap_partition(
    records: Iterable[SurveyRecord],
    planning_geometry: Optional[BaseGeometry] = None,
    sketch_id: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> Tuple[OverlapResult, OverlapCounters]:
    """
    Compute stats and metrics for one partition.

    Args:
        records: Survey records of one respondent-safe partition
        planning_geometry: Combined (already unioned) planning area or None
        sketch_id: Planning area identifier stamped on every metric
        log: Optional logger

    Returns:
        Tuple of (OverlapResult, counters)
    """
    stats, counters = compute_ous_stats(records, planning_geometry, log)
    result = OverlapResult(stats=stats, metrics=gen_ous_metrics(stats, sketch_id))
    return result, counters
