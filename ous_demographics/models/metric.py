"""
Flat metric record and overlap result container.

A Metric is one keyed numeric fact: which count (people or respondents),
which category (or the overall total), and which planning area it was
computed for (None for the survey-wide baseline).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ous_demographics.models.ous_stats import OusStats


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ METRIC IDS
# ═══════════════════════════════════════════════════════════════════════════

PEOPLE_COUNT_METRIC = "peopleCount"
RESPONDENT_COUNT_METRIC = "respondentCount"

PEOPLE_COUNT_ALL_CLASS = f"{PEOPLE_COUNT_METRIC}_all"
RESPONDENT_COUNT_ALL_CLASS = f"{RESPONDENT_COUNT_METRIC}_all"

MetricKey = Tuple[str, Optional[str], Optional[str]]


@dataclass
class Metric:
    """Single keyed metric value."""

    metric_id: str
    class_id: Optional[str] = None
    value: float = 0
    group_id: Optional[str] = None
    geography_id: Optional[str] = None
    sketch_id: Optional[str] = None

    @property
    def key(self) -> MetricKey:
        """Identity used when summing metrics across partitions."""
        return (self.metric_id, self.class_id, self.sketch_id)

    def copy(self) -> "Metric":
        return Metric(
            metric_id=self.metric_id,
            class_id=self.class_id,
            value=self.value,
            group_id=self.group_id,
            geography_id=self.geography_id,
            sketch_id=self.sketch_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metricId": self.metric_id,
            "sketchId": self.sketch_id,
            "classId": self.class_id,
            "groupId": self.group_id,
            "geographyId": self.geography_id,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Metric":
        return cls(
            metric_id=d["metricId"],
            class_id=d.get("classId"),
            value=d.get("value", 0),
            group_id=d.get("groupId"),
            geography_id=d.get("geographyId"),
            sketch_id=d.get("sketchId"),
        )


@dataclass
class OverlapResult:
    """Statistics plus the flat metrics derived from them."""

    stats: OusStats = field(default_factory=OusStats)
    metrics: List[Metric] = field(default_factory=list)

    def copy(self) -> "OverlapResult":
        return OverlapResult(
            stats=self.stats.copy(), metrics=[m.copy() for m in self.metrics]
        )

    def metrics_by_key(self) -> Dict[MetricKey, float]:
        """Metric values keyed by (metricId, classId, sketchId)."""
        return {m.key: m.value for m in self.metrics}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "metrics": [m.to_dict() for m in self.metrics],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OverlapResult":
        return cls(
            stats=OusStats.from_dict(d.get("stats", {})),
            metrics=[Metric.from_dict(m) for m in d.get("metrics", [])],
        )
