"""
Survey-wide baseline precalculation.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Run the overlap computation with no planning area to get
the survey totals (percentage denominators for sketch reports), and derive
the metric groups listing every class a report should display.

Metric group layout:
- Overall: a single "Total" class
- Sector: keys in encounter order
- Atoll: sorted codes with display names, unknown-atoll appended
- Island: sorted keys, unknown-island appended
- Gear: sorted keys

MODIFICATION POINT: Add new groupings to build_metric_groups()
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ous_demographics.config_types import AppConfig, normalize_config
from ous_demographics.data_loader import write_json
from ous_demographics.models.metric import PEOPLE_COUNT_ALL_CLASS, OverlapResult
from ous_demographics.models.ous_stats import OusStats
from ous_demographics.models.survey_record import (
    UNKNOWN_ATOLL,
    UNKNOWN_ISLAND,
    SurveyRecord,
)
from ous_demographics.parallel.overlap_orchestrator import (
    TimingHook,
    overlap_ous_demographic,
)

logger = logging.getLogger("OUS.Baseline")

METRIC_GROUP_TYPE = "countOverlap"
UNKNOWN_DISPLAY = "Unknown"

OVERALL_GROUP_ID = "ousOverallDemographicOverlap"
SECTOR_GROUP_ID = "ousSectorDemographicOverlap"
ATOLL_GROUP_ID = "ousAtollDemographicOverlap"
ISLAND_GROUP_ID = "ousIslandDemographicOverlap"
GEAR_GROUP_ID = "ousGearDemographicOverlap"


def compute_baseline(
    records: Iterable[SurveyRecord],
    config: Union[Dict[str, Any], AppConfig, None] = None,
    timing_hook: Optional[TimingHook] = None,
) -> OverlapResult:
    """Overlap computation over every record (sketchId None)."""
    logger.info("📊 Computing survey-wide baseline")
    return overlap_ous_demographic(
        records, planning_area=None, config=config, timing_hook=timing_hook
    )


def _display_name(name: str) -> str:
    return name[:1].upper() + name[1:]


def _data_class(class_id: str, display: str, datasource_id: str) -> Dict[str, str]:
    return {
        "classId": class_id,
        "display": display,
        "datasourceId": datasource_id,
        "layerId": "",
    }


def _metric_group(metric_id: str, classes: List[Dict[str, str]]) -> Dict[str, Any]:
    return {"metricId": metric_id, "type": METRIC_GROUP_TYPE, "classes": classes}


def _sorted_keys(keys: Iterable[str], exclude: Optional[str] = None) -> List[str]:
    return sorted((k for k in keys if k != exclude), key=str.casefold)


def build_metric_groups(
    stats: OusStats, config: Union[Dict[str, Any], AppConfig, None] = None
) -> List[Dict[str, Any]]:
    """
    Build the overall, sector, atoll, island and gear metric groups.

    Args:
        stats: Baseline statistics (keys define the classes)
        config: CONFIG dict, AppConfig, or None for the module defaults

    Returns:
        List of metric group dicts: {metricId, type, classes}
    """
    app_config = normalize_config(config)
    datasource_id = app_config.baseline.datasource_id
    atoll_names = app_config.baseline.atoll_display_names

    overall = [_data_class(PEOPLE_COUNT_ALL_CLASS, "Total", datasource_id)]

    sectors = [
        _data_class(name, _display_name(name), datasource_id)
        for name in stats.by_sector
    ]

    atolls = [
        _data_class(code, atoll_names.get(code, code), datasource_id)
        for code in _sorted_keys(stats.by_atoll, exclude=UNKNOWN_ATOLL)
    ]
    atolls.append(_data_class(UNKNOWN_ATOLL, UNKNOWN_DISPLAY, datasource_id))

    islands = [
        _data_class(name, _display_name(name), datasource_id)
        for name in _sorted_keys(stats.by_island, exclude=UNKNOWN_ISLAND)
    ]
    islands.append(_data_class(UNKNOWN_ISLAND, UNKNOWN_DISPLAY, datasource_id))

    gears = [
        _data_class(name, _display_name(name), datasource_id)
        for name in _sorted_keys(stats.by_gear)
    ]

    groups = [
        _metric_group(OVERALL_GROUP_ID, overall),
        _metric_group(SECTOR_GROUP_ID, sectors),
        _metric_group(ATOLL_GROUP_ID, atolls),
        _metric_group(ISLAND_GROUP_ID, islands),
        _metric_group(GEAR_GROUP_ID, gears),
    ]
    for group in groups:
        logger.debug(f"   {group['metricId']}: {len(group['classes'])} classes")
    return groups


def write_baseline(
    result: OverlapResult,
    groups: List[Dict[str, Any]],
    totals_path: Union[str, Path],
    groups_path: Union[str, Path],
) -> None:
    """Write the totals ({"metrics": [...]}) and metric groups JSON files."""
    write_json({"metrics": [m.to_dict() for m in result.metrics]}, totals_path)
    logger.info(f"💾 Wrote baseline totals: {totals_path}")
    write_json(groups, groups_path)
    logger.info(f"💾 Wrote metric groups: {groups_path}")


__all__ = [
    "compute_baseline",
    "build_metric_groups",
    "write_baseline",
]
