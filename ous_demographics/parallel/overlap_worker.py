"""
Worker function for processing one respondent-safe partition.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Run the overlap engine over one partition of survey records.
THIN WRAPPER pattern - calls overlap_engine.overlap_partition() and does not
duplicate any counting logic.

Protocol:
- Accept only primitive/serializable parameters (record dicts, WKT strings)
- Return a dict with success/error status, never raise
- Silent logging (one line per partition to avoid interleaving)

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import time
from typing import Any, Dict, List, Optional

from ous_demographics.models.planning_area import combine_wkts
from ous_demographics.models.survey_record import SurveyRecord
from ous_demographics.overlap_engine import overlap_partition


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 WORKER LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def _setup_worker_logging(partition_key: str) -> logging.Logger:
    """Named logger so messages from parallel workers can be told apart."""
    logger = logging.getLogger(f"OUS.Worker.{partition_key}")
    logger.setLevel(logging.INFO)
    return logger


# ═══════════════════════════════════════════════════════════════════════════
# 📊 WORKER RESULT HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _create_empty_result(partition_key: str) -> Dict[str, Any]:
    """
    Create initial result structure with default values.

    Args:
        partition_key: Unique key for this partition

    Returns:
        Dict with initialized result structure
    """
    return {
        "key": partition_key,
        "success": False,
        "record_count": 0,
        "skipped_count": 0,
        "not_overlapping_count": 0,
        "counted_count": 0,
        "result": None,
        "duration_seconds": 0,
        "error": None,
    }


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 WORKER ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


def worker_process_partition(
    partition_key: str,
    records_payload: List[Dict[str, Any]],
    planning_wkts: Optional[List[str]] = None,
    sketch_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Worker function to process a single partition.

    Args:
        partition_key: Unique key for this partition (e.g., "p3")
        records_payload: SurveyRecord.to_dict() output for the partition
        planning_wkts: Simplified planning area members as WKT, or None for
            the survey-wide baseline
        sketch_id: Planning area identifier stamped on every metric

    Returns:
        Dict with key, success, record_count, skipped_count,
        not_overlapping_count, counted_count, result (OverlapResult.to_dict()),
        duration_seconds and error
    """
    start_time = time.time()
    logger = _setup_worker_logging(partition_key)
    result = _create_empty_result(partition_key)

    try:
        records = [SurveyRecord.from_dict(d) for d in records_payload]
        planning_geometry = combine_wkts(planning_wkts) if planning_wkts else None

        overlap, counters = overlap_partition(
            records, planning_geometry, sketch_id, log=logger
        )

        result["record_count"] = counters.records
        result["skipped_count"] = counters.skipped_no_respondent
        result["not_overlapping_count"] = counters.not_overlapping
        result["counted_count"] = counters.counted
        result["result"] = overlap.to_dict()
        result["success"] = True
        result["duration_seconds"] = time.time() - start_time

        logger.info(
            "✅ %s: %d records, %d overlapping, %d respondents, %.2fs",
            partition_key,
            counters.records,
            counters.counted,
            overlap.stats.respondents,
            result["duration_seconds"],
        )
        return result

    except Exception as e:
        result["error"] = f"{type(e).__name__}: {str(e)}"
        result["duration_seconds"] = time.time() - start_time
        logger.error("❌ %s: %s", partition_key, result["error"])
        return result


__all__ = ["worker_process_partition"]
