"""
OUS Demographic Parallel Processing Module

Provides respondent-safe parallel overlap computation.
Architecture patterns:
- Thin workers calling the overlap engine
- Always uses parallel infrastructure (one-worker pool for a single partition)
- WKT serialization layer for geometry transport

Module Structure:
- overlap_orchestrator.py: Main orchestrator + config + serialization
- overlap_worker.py: Thin worker for a single partition
- partitioner.py: Respondent-safe slicing of sorted records
- result_merger.py: Summing partition stats and metrics
"""

from ous_demographics.parallel.overlap_orchestrator import (
    # Orchestrator functions
    overlap_ous_demographic,
    OverlapComputationError,
    should_use_parallel,
    get_effective_worker_count,
    # Config functions
    get_parallel_config,
    get_partition_key,
    DEFAULT_PARALLEL_CONFIG,
    # Serialization functions
    serialize_records,
)

from ous_demographics.parallel.partitioner import (
    partition_by_respondent,
    sort_by_respondent,
)

from ous_demographics.parallel.result_merger import (
    merge_results,
    merge_stats,
    merge_metrics,
)

__all__ = [
    # Orchestrator
    "overlap_ous_demographic",
    "OverlapComputationError",
    "should_use_parallel",
    "get_effective_worker_count",
    # Config
    "get_parallel_config",
    "get_partition_key",
    "DEFAULT_PARALLEL_CONFIG",
    # Serialization
    "serialize_records",
    # Partitioning
    "partition_by_respondent",
    "sort_by_respondent",
    # Merging
    "merge_results",
    "merge_stats",
    "merge_metrics",
]
