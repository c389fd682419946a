#!/usr/bin/env python3
"""
OUS Demographics - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for the ocean use survey (OUS)
demographic overlap computation. Single source of truth for parallel
fan-out, planning area simplification, survey property names and file paths.

Configuration Sections (ordered by importance for tuning):
1. parallel: Partition count, pool backend and run timeout
2. planning_area: Sketch simplification settings
3. survey_fields: Property names in the survey export
4. baseline: Precalculated totals settings
5. file_paths: Input/output file locations (bottom - rarely changed)

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

import os
from typing import Dict, Any, TypeVar, Callable, Optional

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "OUS_MAX_WORKERS")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default

    Example:
        >>> _env_or_default("OUS_TIMEOUT_SECONDS", 900, int)
        900  # If env var not set
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


def _env_bool(key: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Treats "true", "1", "yes" as True (case-insensitive).
    Any other value or unset returns default.
    """
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 ENVIRONMENT VARIABLE OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════
# OUS_PARALLEL_ENABLED   - "true" or "false" (default: "true")
# OUS_MAX_WORKERS        - int, number of respondent-safe partitions (default: 6)
# OUS_TIMEOUT_SECONDS    - int, bound on the whole parallel run (default: 900)
# OUS_BACKEND            - joblib backend, "loky" or "threading" (default: "loky")
# OUS_SIMPLIFY_TOLERANCE - float, sketch simplification in degrees (default: 0.00005)
#
# Example usage:
#   export OUS_MAX_WORKERS=4
#   export OUS_TIMEOUT_SECONDS=300
#   python -m ous_demographics.main baseline --shapes data/ous_all_report_ready.geojson
# ═══════════════════════════════════════════════════════════════════════════

# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MASTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # ⚡ PARALLEL PROCESSING
    # ═══════════════════════════════════════════════════════════════════════
    "parallel": {
        # Master toggle - set False to run one partition on a one-worker pool
        "enabled": _env_bool("OUS_PARALLEL_ENABLED", True),
        # Number of respondent-safe partitions and worker processes.
        # Matches the core count of the hosting runtime.
        "max_workers": _env_or_default("OUS_MAX_WORKERS", 6, int),
        # Fewer records than this run as a single partition
        "min_records_for_parallel": 6,
        # Bound on the whole run (seconds). Workers are torn down on expiry.
        "timeout_seconds": _env_or_default("OUS_TIMEOUT_SECONDS", 900, int),
        # Joblib backend ("loky" = process-based, safe for CPU-bound geometry)
        "backend": _env_or_default("OUS_BACKEND", "loky"),
        # Verbosity level for joblib progress output (0-10)
        "verbose": 0,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # ✏️ PLANNING AREA (SKETCH) SIMPLIFICATION
    # ═══════════════════════════════════════════════════════════════════════
    # Sketches are simplified once before dispatch. 0.00005 degrees keeps
    # roughly 1/6 of the vertices of a typical hand-drawn sketch.
    "planning_area": {
        "simplify_tolerance": _env_or_default(
            "OUS_SIMPLIFY_TOLERANCE", 0.00005, float
        ),
        "preserve_topology": True,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🏷️ SURVEY PROPERTY NAMES
    # ═══════════════════════════════════════════════════════════════════════
    # MODIFICATION POINT: Map to the column names of your survey export
    "survey_fields": {
        "respondent_id": "resp_id",
        "weight": "weight",
        "atoll": "atoll",
        "island": "island",
        "sector": "sector",
        "gear": "gear",
        "people_count": "number_of_ppl",
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📊 BASELINE PRECALCULATION
    # ═══════════════════════════════════════════════════════════════════════
    "baseline": {
        # Datasource the metric group classes point back to
        "datasource_id": "ous_all_report_ready.fgb",
        # Display names for atoll codes in the survey export
        "atoll_display_names": {
            "Addu City": "Addu City",
            "K": "Kaafu",
            "F": "Faafu",
            "HDh": "Haa Dhaalu",
            "N": "Noonu",
            "R": "Raa",
            "Sh": "Shaviyani",
            "AA": "Alifu Alifu",
            "B": "Baa",
            "GA": "Gaafu Alifu",
            "HA": "Haa Alifu",
            "Lh": "Lhaviyani",
            "ADh": "Alifu Dhaalu",
            "M": "Meemu",
            "Th": "Thaa",
            "Dh": "Dhaalu",
            "L": "Laamu",
            "GDh": "Gaafu Dhaalu",
            "Gn": "Gnaviyani",
            "V": "Vaavu",
        },
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📂 FILE PATHS (Rarely changed - at bottom)
    # ═══════════════════════════════════════════════════════════════════════
    # MODIFICATION POINT: Update these paths for your project
    "file_paths": {
        "survey_shapes": "data/dist/ous_all_report_ready.geojson",
        "sorted_shapes": "data/dist/ous_all_report_ready_sorted.geojson",
        "baseline_totals": "data/bin/ousDemographicPrecalcTotals.json",
        "baseline_metric_groups": "data/bin/ousDemographicMetricGroups.json",
        "output_dir": "Output",
        "log_dir": "logs",
    },
}
