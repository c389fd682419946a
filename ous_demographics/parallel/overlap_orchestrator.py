"""
Orchestrator for parallel OUS demographic overlap computation.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Split survey records into respondent-safe partitions,
dispatch one worker per partition, and merge the partition results into a
single OverlapResult.

Pipeline:
1. Stable-sort records by respondent ID
2. Simplify the planning area ONCE and serialize it to WKT
3. Partition into at most K respondent-safe slices
4. joblib Parallel with delayed for process-based parallelism
5. Result collection with error aggregation (any failure fails the run)
6. Merge stats and metrics

Always uses parallel infrastructure. A single partition runs in a one-worker
pool rather than joblib n_jobs=1, so the run timeout still applies.
There is no sequential fallback: a failed or timed-out partition raises
OverlapComputationError, since a partial merge would silently undercount.

Key Functions:
- overlap_ous_demographic(): Main entry point
- should_use_parallel(): Decide between K partitions and one
- _dispatch_partitions(): Parallel job dispatch
- _run_single_partition(): One-worker pool for a lone partition
- _collect_results(): Aggregate worker result dicts

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import concurrent.futures
import logging
import multiprocessing
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from ous_demographics.config_types import AppConfig, normalize_config
from ous_demographics.models.metric import OverlapResult
from ous_demographics.models.planning_area import PlanningArea
from ous_demographics.models.survey_record import SurveyRecord
from ous_demographics.overlap_engine import overlap_partition
from ous_demographics.parallel.partitioner import (
    partition_by_respondent,
    sort_by_respondent,
)
from ous_demographics.parallel.result_merger import merge_results

logger = logging.getLogger("OUS.Parallel.Orchestrator")

TimingHook = Callable[[str, float], None]


class OverlapComputationError(RuntimeError):
    """
    Raised when any partition fails or the parallel run times out.

    Attributes:
        failures: Partition key -> error message
    """

    def __init__(self, message: str, failures: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.failures = dict(failures or {})


# ═══════════════════════════════════════════════════════════════════════════
# 📋 DEFAULT PARALLEL CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

DEFAULT_PARALLEL_CONFIG: Dict[str, Any] = {
    "enabled": True,
    "max_workers": 6,
    "min_records_for_parallel": 6,
    "timeout_seconds": 900,
    "backend": "loky",
    "verbose": 0,
}


# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ CONFIG ACCESS FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════


def get_parallel_config(
    config: Union[Dict[str, Any], AppConfig, None],
) -> Dict[str, Any]:
    """
    Extract parallel config from main CONFIG with defaults fallback.

    Args:
        config: Main CONFIG dictionary, AppConfig object, or None.

    Returns:
        Merged parallel config dict with defaults applied.
    """
    app_config = normalize_config(config)

    user_config = {
        "enabled": app_config.parallel.enabled,
        "max_workers": app_config.parallel.max_workers,
        "min_records_for_parallel": app_config.parallel.min_records_for_parallel,
        "timeout_seconds": app_config.parallel.timeout_seconds,
        "backend": app_config.parallel.backend,
        "verbose": app_config.parallel.verbose,
    }
    return {**DEFAULT_PARALLEL_CONFIG, **user_config}


def should_use_parallel(
    n_records: int,
    config: Union[Dict[str, Any], AppConfig, None],
) -> Tuple[bool, str]:
    """
    Determine if the records should be split into several partitions.

    Args:
        n_records: Number of survey records to process.
        config: Main CONFIG dictionary or AppConfig object.

    Returns:
        Tuple of (should_use: bool, reason: str).
    """
    parallel_config = get_parallel_config(config)

    if not parallel_config.get("enabled", True):
        return False, "Parallel disabled in config"

    if parallel_config.get("max_workers", 1) <= 1:
        return False, "max_workers is 1"

    min_records = parallel_config.get("min_records_for_parallel", 6)
    if n_records < min_records:
        return False, f"Only {n_records} records (< {min_records} threshold)"

    return True, f"OK ({n_records} records)"


def get_effective_worker_count(
    n_partitions: int,
    config: Union[Dict[str, Any], AppConfig, None],
) -> int:
    """
    Calculate worker count: never more workers than partitions.

    Args:
        n_partitions: Number of partitions to process.
        config: Main CONFIG dictionary or AppConfig object.

    Returns:
        Number of workers to use (at least 1).
    """
    parallel_config = get_parallel_config(config)
    max_workers = parallel_config.get("max_workers", 1)
    return max(1, min(max_workers, n_partitions))


# ═══════════════════════════════════════════════════════════════════════════
# 📦 SERIALIZATION
# ═══════════════════════════════════════════════════════════════════════════


def serialize_records(records: Iterable[SurveyRecord]) -> List[Dict[str, Any]]:
    """SurveyRecords -> picklable dicts with WKT geometry."""
    return [r.to_dict() for r in records]


def get_partition_key(index: int) -> str:
    return f"p{index}"


def _report_timing(
    timing_hook: Optional[TimingHook], stage: str, started: float
) -> None:
    elapsed = time.time() - started
    logger.debug(f"   ⏱️ {stage}: {elapsed:.3f}s")
    if timing_hook is not None:
        timing_hook(stage, elapsed)


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 MAIN ORCHESTRATOR FUNCTION
# ═══════════════════════════════════════════════════════════════════════════


def overlap_ous_demographic(
    records: Iterable[SurveyRecord],
    planning_area: Optional[PlanningArea] = None,
    config: Union[Dict[str, Any], AppConfig, None] = None,
    timeout_seconds: Optional[float] = None,
    timing_hook: Optional[TimingHook] = None,
) -> OverlapResult:
    """
    Compute OUS demographic overlap statistics and metrics.

    Main entry point. Without a planning area every record with a respondent
    is counted and the result is the survey-wide baseline (sketchId None).

    Args:
        records: Survey records in any order.
        planning_area: Sketch or sketch collection to overlap, or None.
        config: CONFIG dict, AppConfig, or None for the module defaults.
        timeout_seconds: Bound on the run; defaults to
            parallel.timeout_seconds.
        timing_hook: Optional callable(stage, seconds) receiving the duration
            of each stage (sort, simplify, partition, dispatch, merge, total).

    Returns:
        OverlapResult with merged stats and metrics.

    Raises:
        OverlapComputationError: If any partition fails or the run times out.
    """
    start_time = time.time()
    app_config = normalize_config(config)
    sketch_id = planning_area.sketch_id if planning_area is not None else None

    logger.info("=" * 60)
    if planning_area is not None:
        logger.info(
            f"🗺️ OUS DEMOGRAPHIC OVERLAP: sketch {sketch_id}"
            + (f" ({planning_area.name})" if planning_area.name else "")
        )
    else:
        logger.info("🗺️ OUS DEMOGRAPHIC OVERLAP: survey-wide baseline")
    logger.info("=" * 60)

    stage_start = time.time()
    sorted_records = sort_by_respondent(list(records))
    _report_timing(timing_hook, "sort", stage_start)

    planning_wkts: Optional[List[str]] = None
    if planning_area is not None:
        stage_start = time.time()
        simplified = planning_area.simplified(
            app_config.planning_area.simplify_tolerance,
            app_config.planning_area.preserve_topology,
        )
        planning_wkts = simplified.to_wkts()
        _report_timing(timing_hook, "simplify", stage_start)

    if not sorted_records:
        logger.info("   📭 No survey records, returning empty result")
        result, _ = overlap_partition([], None, sketch_id)
        _report_timing(timing_hook, "total", start_time)
        return result

    use_parallel, reason = should_use_parallel(len(sorted_records), app_config)
    n_partitions = app_config.parallel.max_workers if use_parallel else 1
    if not use_parallel:
        reason = f"{reason} -> using one partition"
    logger.info(f"   ⚡ Using parallel processing: {reason}")

    stage_start = time.time()
    partitions = partition_by_respondent(sorted_records, n_partitions)
    _report_timing(timing_hook, "partition", stage_start)
    logger.info(
        f"   📦 {len(sorted_records)} records -> {len(partitions)} partitions "
        f"({', '.join(str(len(p)) for p in partitions)})"
    )

    timeout = (
        timeout_seconds
        if timeout_seconds is not None
        else app_config.parallel.timeout_seconds
    )

    stage_start = time.time()
    results_list = _dispatch_partitions(
        partitions, planning_wkts, sketch_id, app_config, timeout
    )
    _report_timing(timing_hook, "dispatch", stage_start)

    collected = _collect_results(results_list)
    failures = {
        key: r.get("error") or "Unknown error"
        for key, r in collected.items()
        if not r.get("success")
    }
    missing = [
        get_partition_key(i)
        for i in range(len(partitions))
        if get_partition_key(i) not in collected
    ]
    for key in missing:
        failures[key] = "No result returned"
    if failures:
        raise OverlapComputationError(
            f"{len(failures)} of {len(partitions)} partitions failed: "
            + "; ".join(f"{k}: {v}" for k, v in sorted(failures.items())),
            failures,
        )

    skipped = sum(r.get("skipped_count", 0) for r in collected.values())
    if skipped:
        logger.warning(f"⚠️ {skipped} record(s) skipped for missing respondent ID")

    stage_start = time.time()
    merged = merge_results(
        [
            OverlapResult.from_dict(collected[get_partition_key(i)]["result"])
            for i in range(len(partitions))
        ]
    )
    _report_timing(timing_hook, "merge", stage_start)

    elapsed = time.time() - start_time
    _report_timing(timing_hook, "total", start_time)

    logger.info("=" * 60)
    logger.info("✅ OVERLAP COMPLETE")
    logger.info(f"   Respondents: {merged.stats.respondents}")
    logger.info(f"   People: {merged.stats.people}")
    logger.info(f"   Metrics: {len(merged.metrics)}")
    logger.info(f"   Total time: {elapsed:.1f}s")
    logger.info("=" * 60)

    return merged


# ═══════════════════════════════════════════════════════════════════════════
# ⚡ PARALLEL DISPATCH
# ═══════════════════════════════════════════════════════════════════════════


def _dispatch_partitions(
    partitions: List[List[SurveyRecord]],
    planning_wkts: Optional[List[str]],
    sketch_id: Optional[str],
    config: AppConfig,
    timeout_seconds: float,
) -> List[Optional[Dict[str, Any]]]:
    """
    Dispatch one job per partition and block until all complete.

    Serializes each partition once before dispatch. The pool lives inside a
    `with Parallel(...)` block so it is released on every exit path.

    Args:
        partitions: Respondent-safe record slices
        planning_wkts: Simplified planning area members as WKT, or None
        sketch_id: Planning area identifier, or None
        config: Normalized application config
        timeout_seconds: Per-task bound; one task per worker, so it bounds the run

    Returns:
        List of worker result dicts, in partition order

    Raises:
        OverlapComputationError: On timeout or a pool-level failure
    """
    from joblib import Parallel, delayed
    from ous_demographics.parallel import overlap_worker

    parallel_config = get_parallel_config(config)
    n_workers = get_effective_worker_count(len(partitions), config)

    logger.info(f"🚀 Dispatching {len(partitions)} partitions to {n_workers} workers...")

    logger.info("   📦 Serializing inputs...")
    payloads = [serialize_records(p) for p in partitions]

    try:
        dispatch_start = time.time()
        if len(payloads) == 1:
            results_list = _run_single_partition(
                payloads[0], planning_wkts, sketch_id, parallel_config, timeout_seconds
            )
        else:
            with Parallel(
                n_jobs=n_workers,
                backend=parallel_config.get("backend", "loky"),
                verbose=parallel_config.get("verbose", 0),
                timeout=timeout_seconds,
            ) as parallel:
                results_list = list(
                    parallel(
                        delayed(overlap_worker.worker_process_partition)(
                            partition_key=get_partition_key(i),
                            records_payload=payload,
                            planning_wkts=planning_wkts,
                            sketch_id=sketch_id,
                        )
                        for i, payload in enumerate(payloads)
                    )
                )
        dispatch_time = time.time() - dispatch_start
        logger.info(f"   ⏱️ Parallel dispatch completed in {dispatch_time:.1f}s")

    except (
        TimeoutError,
        multiprocessing.TimeoutError,
        concurrent.futures.TimeoutError,
    ) as e:
        logger.error(f"❌ Parallel run exceeded {timeout_seconds}s timeout")
        failures = {
            get_partition_key(i): f"Timed out after {timeout_seconds}s"
            for i in range(len(partitions))
        }
        raise OverlapComputationError(
            f"Overlap computation timed out after {timeout_seconds}s", failures
        ) from e
    except Exception as e:
        logger.error(f"❌ Parallel dispatch failed: {type(e).__name__}: {e}")
        raise OverlapComputationError(
            f"Parallel dispatch failed: {type(e).__name__}: {e}",
            {"dispatch": f"{type(e).__name__}: {e}"},
        ) from e

    return results_list


def _run_single_partition(
    payload: List[Dict[str, Any]],
    planning_wkts: Optional[List[str]],
    sketch_id: Optional[str],
    parallel_config: Dict[str, Any],
    timeout_seconds: float,
) -> List[Optional[Dict[str, Any]]]:
    """
    Run a lone partition in a one-worker pool so the timeout still applies.

    joblib runs n_jobs=1 inline and ignores its timeout. Process backends use
    loky's reusable executor and kill its worker on timeout. A thread cannot
    be killed, so on timeout it is abandoned and finishes in the background.

    Raises:
        concurrent.futures.TimeoutError: If the partition exceeds the timeout
    """
    from joblib.externals.loky import get_reusable_executor
    from ous_demographics.parallel import overlap_worker

    use_threads = parallel_config.get("backend", "loky") == "threading"
    if use_threads:
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    else:
        executor = get_reusable_executor(max_workers=1)
    logger.info(
        f"   ⚡ Single partition on a one-worker pool (timeout {timeout_seconds}s)"
    )

    future = executor.submit(
        overlap_worker.worker_process_partition,
        partition_key=get_partition_key(0),
        records_payload=payload,
        planning_wkts=planning_wkts,
        sketch_id=sketch_id,
    )
    timed_out = False
    try:
        return [future.result(timeout=timeout_seconds)]
    except concurrent.futures.TimeoutError:
        timed_out = True
        raise
    finally:
        if use_threads:
            executor.shutdown(wait=False)
        elif timed_out:
            executor.shutdown(wait=False, kill_workers=True)


# ═══════════════════════════════════════════════════════════════════════════
# 📦 RESULT COLLECTION
# ═══════════════════════════════════════════════════════════════════════════


def _collect_results(
    results_list: List[Optional[Dict[str, Any]]],
) -> Dict[str, Dict[str, Any]]:
    """
    Aggregate worker results into a dict keyed by partition key.

    Args:
        results_list: List of result dicts from workers

    Returns:
        Dict mapping partition_key -> result dict
    """
    output = {}
    success_count = 0
    error_count = 0

    for result in results_list:
        if result is None:
            continue
        key = result.get("key", "unknown")
        output[key] = result

        if result.get("success"):
            success_count += 1
        else:
            error_count += 1
            logger.warning(f"⚠️ {key}: {result.get('error', 'Unknown error')}")

    logger.info(f"📦 Collected {success_count} successes, {error_count} errors")
    return output


# ═══════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    # Main entry point
    "overlap_ous_demographic",
    "OverlapComputationError",
    # Parallel decision functions
    "should_use_parallel",
    "get_effective_worker_count",
    # Config functions
    "DEFAULT_PARALLEL_CONFIG",
    "get_parallel_config",
    "get_partition_key",
    # Serialization
    "serialize_records",
]
