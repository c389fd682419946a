"""
Merge per-partition overlap results into one result.

Partitions are respondent-disjoint, so plain addition of counts is exact.
Metrics are matched on (metricId, classId, sketchId); a metric seen for the
first time is appended as a copy. The merged result does not depend on
partition order or boundaries, up to floating-point addition order.
"""

import logging
from typing import Dict, List, Sequence

from ous_demographics.models.metric import Metric, MetricKey, OverlapResult
from ous_demographics.models.ous_stats import CLASS_GROUPS, OusStats, add_class_count

logger = logging.getLogger("OUS.Parallel.Merger")


def merge_stats(target: OusStats, incoming: OusStats) -> OusStats:
    """Add incoming stats onto target in place and return target."""
    target.respondents += incoming.respondents
    target.people += incoming.people
    for attr, _ in CLASS_GROUPS:
        target_map = getattr(target, attr)
        for key, counts in getattr(incoming, attr).items():
            add_class_count(target_map, key, counts.respondents, counts.people)
    return target


def merge_metrics(target: List[Metric], incoming: Sequence[Metric]) -> List[Metric]:
    """Add incoming metric values onto target in place and return target."""
    index: Dict[MetricKey, Metric] = {m.key: m for m in target}
    for metric in incoming:
        existing = index.get(metric.key)
        if existing is None:
            copied = metric.copy()
            target.append(copied)
            index[copied.key] = copied
        else:
            existing.value += metric.value
    return target


def merge_results(results: Sequence[OverlapResult]) -> OverlapResult:
    """
    Fold partition results into one OverlapResult.

    Args:
        results: One result per partition, any order

    Returns:
        New OverlapResult; inputs are not modified. An empty sequence gives
        an empty result with no metrics.
    """
    if not results:
        return OverlapResult()

    merged = results[0].copy()
    for result in results[1:]:
        merge_stats(merged.stats, result.stats)
        merge_metrics(merged.metrics, result.metrics)

    logger.debug(
        f"Merged {len(results)} partition results: "
        f"{merged.stats.respondents} respondents, {len(merged.metrics)} metrics"
    )
    return merged


__all__ = ["merge_results", "merge_stats", "merge_metrics"]
