"""
OUS Metric Emitter

Converts nested OusStats into the flat metric list consumed by report
formatting. Every category key yields a people metric followed by a
respondent metric. Keys keep the insertion order of their map; display
sorting is left to the consumer.
"""

from typing import List, Optional

from ous_demographics.models.metric import (
    Metric,
    PEOPLE_COUNT_ALL_CLASS,
    PEOPLE_COUNT_METRIC,
    RESPONDENT_COUNT_ALL_CLASS,
    RESPONDENT_COUNT_METRIC,
)
from ous_demographics.models.ous_stats import ClassCountStats, OusStats


def gen_class_metrics(
    class_stats: ClassCountStats, sketch_id: Optional[str] = None
) -> List[Metric]:
    """Generate people/respondent metric pairs for one category map."""
    metrics = []
    for class_id, counts in class_stats.items():
        metrics.append(
            Metric(
                metric_id=PEOPLE_COUNT_METRIC,
                class_id=class_id,
                value=counts.people,
                sketch_id=sketch_id,
            )
        )
        metrics.append(
            Metric(
                metric_id=RESPONDENT_COUNT_METRIC,
                class_id=class_id,
                value=counts.respondents,
                sketch_id=sketch_id,
            )
        )
    return metrics


def gen_ous_metrics(stats: OusStats, sketch_id: Optional[str] = None) -> List[Metric]:
    """
    Generate the full metric list for an OusStats.

    Order: overall people, overall respondents, then sector, atoll, island
    and gear class metrics.

    Args:
        stats: Accumulated statistics
        sketch_id: Planning area identifier, None for the baseline run

    Returns:
        List of Metric (2 + 2 * number of category keys)
    """
    metrics = [
        Metric(
            metric_id=PEOPLE_COUNT_METRIC,
            class_id=PEOPLE_COUNT_ALL_CLASS,
            value=stats.people,
            sketch_id=sketch_id,
        ),
        Metric(
            metric_id=RESPONDENT_COUNT_METRIC,
            class_id=RESPONDENT_COUNT_ALL_CLASS,
            value=stats.respondents,
            sketch_id=sketch_id,
        ),
    ]
    for _, class_stats in stats.class_groups():
        metrics.extend(gen_class_metrics(class_stats, sketch_id))
    return metrics
