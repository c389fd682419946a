"""Data models package for typed survey records, statistics and metrics."""

from .survey_record import (
    SurveyRecord,
    PeopleCountError,
    UNKNOWN_ATOLL,
    UNKNOWN_ISLAND,
    UNKNOWN_SECTOR,
    UNKNOWN_GEAR,
)

from .ous_stats import (
    BaseCountStats,
    ClassCountStats,
    OusStats,
    add_class_count,
)

from .metric import (
    Metric,
    OverlapResult,
    PEOPLE_COUNT_METRIC,
    RESPONDENT_COUNT_METRIC,
    PEOPLE_COUNT_ALL_CLASS,
    RESPONDENT_COUNT_ALL_CLASS,
)

from .planning_area import (
    PlanningArea,
    combine_geometries,
    combine_wkts,
)

__all__ = [
    # Survey records
    "SurveyRecord",
    "PeopleCountError",
    "UNKNOWN_ATOLL",
    "UNKNOWN_ISLAND",
    "UNKNOWN_SECTOR",
    "UNKNOWN_GEAR",
    # Statistics
    "BaseCountStats",
    "ClassCountStats",
    "OusStats",
    "add_class_count",
    # Metrics
    "Metric",
    "OverlapResult",
    "PEOPLE_COUNT_METRIC",
    "RESPONDENT_COUNT_METRIC",
    "PEOPLE_COUNT_ALL_CLASS",
    "RESPONDENT_COUNT_ALL_CLASS",
    # Planning area
    "PlanningArea",
    "combine_geometries",
    "combine_wkts",
]
