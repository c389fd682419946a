#!/usr/bin/env python3
"""
OUS Demographics - Main Entry Point

Counts ocean use survey respondents (and the people they represent) whose
shapes overlap a planning area, or across the whole survey for the baseline.

Usage:
    python -m ous_demographics.main overlap --shapes shapes.geojson --sketch sketch.geojson
    python -m ous_demographics.main baseline --shapes shapes.geojson
    python -m ous_demographics.main sort --shapes shapes.geojson --output sorted.geojson

    Or via the installed console script:
    ous-demographics baseline --shapes shapes.geojson
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

# Fix Windows console encoding for emoji support
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from ous_demographics.config import CONFIG
from ous_demographics.config_types import AppConfig
from ous_demographics.baseline import (
    build_metric_groups,
    compute_baseline,
    write_baseline,
)
from ous_demographics.data_loader import (
    load_planning_area,
    load_survey_records,
    sort_survey_file,
    write_result_json,
)
from ous_demographics.parallel.overlap_orchestrator import (
    OverlapComputationError,
    overlap_ous_demographic,
)

# ═══════════════════════════════════════════════════════════════════════════
# 🎯 MODULE-LEVEL CONFIG (Single Source of Truth)
# ═══════════════════════════════════════════════════════════════════════════
APP_CONFIG = AppConfig.from_dict(CONFIG)


# ═══════════════════════════════════════════════════════════════════════════
# 📋 LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def setup_logging(
    mode: str, log_dir: Optional[Path] = None
) -> Tuple[logging.Logger, Path]:
    """Configure logging with file and console handlers.

    Handlers are attached to the "OUS" logger so every module logger
    (OUS.Engine, OUS.Parallel.Orchestrator, ...) reaches them.

    Args:
        mode: Command name, used as the run folder prefix
        log_dir: Parent log directory (defaults to file_paths.log_dir)

    Returns:
        Tuple of (logger, run_log_folder)

    Folder naming convention:
        {mode}_{MMDD}_{HHMM}, e.g. overlap_0129_1028
    """
    log_dir = Path(log_dir) if log_dir is not None else APP_CONFIG.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    # Compact timestamp: MMDD_HHMM
    timestamp = datetime.now().strftime("%m%d_%H%M")

    run_log_folder = log_dir / f"{mode}_{timestamp}"
    run_log_folder.mkdir(parents=True, exist_ok=True)

    log_path = run_log_folder / "main.log"

    logger = logging.getLogger("OUS")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()

    # File handler
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger, run_log_folder


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 COMMANDS
# ═══════════════════════════════════════════════════════════════════════════


def run_overlap(args: argparse.Namespace) -> int:
    """Overlap one sketch (or sketch collection) with the survey shapes."""
    records = load_survey_records(args.shapes, APP_CONFIG.survey_fields)
    planning_area = load_planning_area(args.sketch)

    result = overlap_ous_demographic(
        records,
        planning_area=planning_area,
        config=APP_CONFIG,
        timeout_seconds=args.timeout,
    )

    output = args.output or (
        APP_CONFIG.output_dir / f"ousDemographicOverlap_{planning_area.sketch_id}.json"
    )
    write_result_json(result, output)
    return 0


def run_baseline(args: argparse.Namespace) -> int:
    """Precalculate survey-wide totals and metric groups."""
    records = load_survey_records(args.shapes, APP_CONFIG.survey_fields)
    result = compute_baseline(records, APP_CONFIG)
    groups = build_metric_groups(result.stats, APP_CONFIG)
    write_baseline(
        result,
        groups,
        args.totals or APP_CONFIG.file_paths.baseline_totals,
        args.groups or APP_CONFIG.file_paths.baseline_metric_groups,
    )
    return 0


def run_sort(args: argparse.Namespace) -> int:
    """Sort the survey export by respondent ID."""
    sort_survey_file(
        args.shapes,
        args.output or APP_CONFIG.file_paths.sorted_shapes,
        APP_CONFIG.survey_fields,
    )
    return 0


COMMANDS = {
    "overlap": run_overlap,
    "baseline": run_baseline,
    "sort": run_sort,
}


# ═══════════════════════════════════════════════════════════════════════════
# 🧭 ARGUMENT PARSING
# ═══════════════════════════════════════════════════════════════════════════


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ous-demographics",
        description="Ocean use survey demographic overlap",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help=f"Log directory (default: {APP_CONFIG.file_paths.log_dir})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    overlap = subparsers.add_parser(
        "overlap", help="Overlap a sketch or sketch collection with the survey"
    )
    overlap.add_argument(
        "--shapes",
        default=APP_CONFIG.file_paths.survey_shapes,
        help="Survey shapes file (GeoJSON/FlatGeobuf)",
    )
    overlap.add_argument(
        "--sketch", required=True, help="Sketch or sketch collection GeoJSON"
    )
    overlap.add_argument("--output", default=None, help="Result JSON path")
    overlap.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=f"Run timeout in seconds (default: {APP_CONFIG.parallel.timeout_seconds})",
    )

    baseline = subparsers.add_parser(
        "baseline", help="Precalculate survey-wide totals and metric groups"
    )
    baseline.add_argument(
        "--shapes",
        default=APP_CONFIG.file_paths.survey_shapes,
        help="Survey shapes file (GeoJSON/FlatGeobuf)",
    )
    baseline.add_argument(
        "--totals",
        default=None,
        help=f"Totals JSON path (default: {APP_CONFIG.file_paths.baseline_totals})",
    )
    baseline.add_argument(
        "--groups",
        default=None,
        help=(
            "Metric groups JSON path "
            f"(default: {APP_CONFIG.file_paths.baseline_metric_groups})"
        ),
    )

    sort = subparsers.add_parser("sort", help="Sort survey shapes by respondent ID")
    sort.add_argument(
        "--shapes",
        default=APP_CONFIG.file_paths.survey_shapes,
        help="Survey shapes file",
    )
    sort.add_argument(
        "--output",
        default=None,
        help=f"Sorted GeoJSON path (default: {APP_CONFIG.file_paths.sorted_shapes})",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    logger, run_log_folder = setup_logging(args.command, args.log_dir)

    start_time = time.time()
    logger.info("=" * 60)
    logger.info(f"🌊 OUS DEMOGRAPHICS: {args.command}")
    logger.info(f"   Log folder: {run_log_folder}")
    logger.info("=" * 60)

    try:
        exit_code = COMMANDS[args.command](args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"❌ Input error: {e}")
        return 2
    except OverlapComputationError as e:
        logger.error(f"❌ Overlap computation failed: {e}")
        return 1

    logger.info(f"✅ Done in {time.time() - start_time:.1f}s")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
