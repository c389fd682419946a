"""
═══════════════════════════════════════════════════════════════════════════════
📋 UNIFIED CONFIGURATION TYPES
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Responsibility: Define all configuration dataclasses for the OUS demographics
application. Replaces scattered CONFIG dictionary access with typed, validated
config objects.

Usage:
    from ous_demographics.config import CONFIG
    from ous_demographics.config_types import AppConfig

    # Create once at application startup
    app_config = AppConfig.from_dict(CONFIG)

    # Use throughout the application
    n_partitions = app_config.parallel.max_workers

For Navigation: Use VS Code outline (Ctrl+Shift+O)

NAVIGATION GUIDE
----------------
# ═════ 1. FILE PATHS CONFIGURATION
# ═════ 2. PARALLEL PROCESSING CONFIGURATION
# ═════ 3. PLANNING AREA CONFIGURATION
# ═════ 4. SURVEY FIELDS CONFIGURATION
# ═════ 5. BASELINE CONFIGURATION
# ═════ 6. APP CONFIG (MASTER FACADE)

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Union


# ═══════════════════════════════════════════════════════════════════════════════
# 📁 1. FILE PATHS CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FilePathsConfig:
    """
    File path configuration for inputs and outputs.

    Attributes:
        survey_shapes: Path to the survey shapes export (GeoJSON/FlatGeobuf).
        sorted_shapes: Destination of the respondent-sorted export.
        baseline_totals: Destination of the precalculated baseline metrics.
        baseline_metric_groups: Destination of the generated metric groups.
        output_dir: Directory for output files.
        log_dir: Directory for log files.
    """

    survey_shapes: str = "data/dist/ous_all_report_ready.geojson"
    sorted_shapes: str = "data/dist/ous_all_report_ready_sorted.geojson"
    baseline_totals: str = "data/bin/ousDemographicPrecalcTotals.json"
    baseline_metric_groups: str = "data/bin/ousDemographicMetricGroups.json"
    output_dir: str = "Output"
    log_dir: str = "logs"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FilePathsConfig":
        """Create FilePathsConfig from CONFIG['file_paths'] dictionary."""
        defaults = cls()
        return cls(
            survey_shapes=d.get("survey_shapes", defaults.survey_shapes),
            sorted_shapes=d.get("sorted_shapes", defaults.sorted_shapes),
            baseline_totals=d.get("baseline_totals", defaults.baseline_totals),
            baseline_metric_groups=d.get(
                "baseline_metric_groups", defaults.baseline_metric_groups
            ),
            output_dir=d.get("output_dir", "Output"),
            log_dir=d.get("log_dir", "logs"),
        )

    @property
    def output_path(self) -> Path:
        """Get output directory as relative Path object."""
        return Path(self.output_dir)

    @property
    def log_path(self) -> Path:
        """Get log directory as relative Path object."""
        return Path(self.log_dir)


# ═══════════════════════════════════════════════════════════════════════════════
# ⚡ 2. PARALLEL PROCESSING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ParallelConfig:
    """
    Configuration for parallel/multicore processing.

    Attributes:
        enabled: Master toggle for parallel processing.
        max_workers: Number of respondent-safe partitions (and workers).
        min_records_for_parallel: Minimum records to justify partitioning.
        timeout_seconds: Bound on the whole parallel run.
        backend: Joblib backend ("loky" = process-based).
        verbose: Verbosity level (0-10).
    """

    enabled: bool = True
    max_workers: int = 6
    min_records_for_parallel: int = 6
    timeout_seconds: float = 900
    backend: str = "loky"
    verbose: int = 0

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be > 0, got {self.timeout_seconds}"
            )
        valid_backends = ("loky", "threading", "multiprocessing")
        if self.backend not in valid_backends:
            raise ValueError(
                f"backend must be one of {valid_backends}, got '{self.backend}'"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ParallelConfig":
        """Create ParallelConfig from CONFIG['parallel'] dictionary."""
        return cls(
            enabled=d.get("enabled", True),
            max_workers=d.get("max_workers", 6),
            min_records_for_parallel=d.get("min_records_for_parallel", 6),
            timeout_seconds=d.get("timeout_seconds", 900),
            backend=d.get("backend", "loky"),
            verbose=d.get("verbose", 0),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# ✏️ 3. PLANNING AREA CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PlanningAreaConfig:
    """
    Sketch simplification applied once before dispatch.

    Attributes:
        simplify_tolerance: Douglas-Peucker tolerance in coordinate units
            (degrees for lon/lat sketches). 0 disables simplification.
        preserve_topology: Keep rings valid while simplifying.
    """

    simplify_tolerance: float = 0.00005
    preserve_topology: bool = True

    def __post_init__(self) -> None:
        if self.simplify_tolerance < 0:
            raise ValueError(
                f"simplify_tolerance must be >= 0, got {self.simplify_tolerance}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PlanningAreaConfig":
        """Create PlanningAreaConfig from CONFIG['planning_area'] dictionary."""
        return cls(
            simplify_tolerance=d.get("simplify_tolerance", 0.00005),
            preserve_topology=d.get("preserve_topology", True),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🏷️ 4. SURVEY FIELDS CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SurveyFieldsConfig:
    """Property names of the survey export, keyed by record attribute."""

    respondent_id: str = "resp_id"
    weight: str = "weight"
    atoll: str = "atoll"
    island: str = "island"
    sector: str = "sector"
    gear: str = "gear"
    people_count: str = "number_of_ppl"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SurveyFieldsConfig":
        """Create SurveyFieldsConfig from CONFIG['survey_fields'] dictionary."""
        defaults = cls()
        return cls(
            respondent_id=d.get("respondent_id", defaults.respondent_id),
            weight=d.get("weight", defaults.weight),
            atoll=d.get("atoll", defaults.atoll),
            island=d.get("island", defaults.island),
            sector=d.get("sector", defaults.sector),
            gear=d.get("gear", defaults.gear),
            people_count=d.get("people_count", defaults.people_count),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📊 5. BASELINE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BaselineConfig:
    """
    Settings for the survey-wide baseline precalculation.

    Attributes:
        datasource_id: Datasource referenced by generated metric group classes.
        atoll_display_names: Atoll code -> display name.
    """

    datasource_id: str = "ous_all_report_ready.fgb"
    atoll_display_names: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BaselineConfig":
        """Create BaselineConfig from CONFIG['baseline'] dictionary."""
        return cls(
            datasource_id=d.get("datasource_id", "ous_all_report_ready.fgb"),
            atoll_display_names=dict(d.get("atoll_display_names", {})),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🎯 6. APP CONFIG (MASTER FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AppConfig:
    """
    Master configuration object for the OUS demographics application.

    Create it once at application startup using AppConfig.from_dict(CONFIG)
    and pass it to all functions that need settings.

    Attributes:
        file_paths: File path configuration.
        parallel: Parallel processing configuration.
        planning_area: Sketch simplification configuration.
        survey_fields: Survey export property names.
        baseline: Baseline precalculation settings.

    Example:
        from ous_demographics.config import CONFIG
        from ous_demographics.config_types import AppConfig

        app_config = AppConfig.from_dict(CONFIG)
        result = overlap_ous_demographic(records, sketch, config=app_config)
    """

    file_paths: FilePathsConfig = field(default_factory=FilePathsConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    planning_area: PlanningAreaConfig = field(default_factory=PlanningAreaConfig)
    survey_fields: SurveyFieldsConfig = field(default_factory=SurveyFieldsConfig)
    baseline: BaselineConfig = field(default_factory=BaselineConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "AppConfig":
        """
        Create AppConfig from the CONFIG dictionary.

        Missing sections fall back to dataclass defaults, so partial dicts
        (e.g. {"parallel": {"max_workers": 1}}) are accepted.

        Args:
            config_dict: The CONFIG dictionary from config.py.

        Returns:
            AppConfig instance with all settings populated.
        """
        return cls(
            file_paths=FilePathsConfig.from_dict(config_dict.get("file_paths", {})),
            parallel=ParallelConfig.from_dict(config_dict.get("parallel", {})),
            planning_area=PlanningAreaConfig.from_dict(
                config_dict.get("planning_area", {})
            ),
            survey_fields=SurveyFieldsConfig.from_dict(
                config_dict.get("survey_fields", {})
            ),
            baseline=BaselineConfig.from_dict(config_dict.get("baseline", {})),
        )

    @property
    def log_dir(self) -> Path:
        """Get log directory as Path object."""
        return self.file_paths.log_path

    @property
    def output_dir(self) -> Path:
        """Get output directory as Path object."""
        return self.file_paths.output_path


def normalize_config(config: Union[Dict[str, Any], AppConfig, None]) -> AppConfig:
    """
    Normalize config to AppConfig for internal use.

    Accepts a raw CONFIG dictionary, an AppConfig object, or None (use the
    module-level CONFIG defaults).
    """
    if isinstance(config, AppConfig):
        return config
    if config is None:
        from ous_demographics.config import CONFIG

        return AppConfig.from_dict(CONFIG)
    return AppConfig.from_dict(config)
