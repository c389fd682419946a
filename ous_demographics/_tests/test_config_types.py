#!/usr/bin/env python3
"""
Configuration Tests: typed config dataclasses and environment overrides.

Tests that entry points accept both:
1. Dict[str, Any] (raw CONFIG sections)
2. Typed AppConfig objects
"""

import pytest

from ous_demographics.config import CONFIG, _env_bool, _env_or_default
from ous_demographics.config_types import (
    AppConfig,
    ParallelConfig,
    PlanningAreaConfig,
    SurveyFieldsConfig,
    normalize_config,
)


class TestAppConfig:
    """Test AppConfig construction."""

    def test_from_master_config(self):
        app_config = AppConfig.from_dict(CONFIG)

        assert app_config.parallel.backend in ("loky", "threading", "multiprocessing")
        assert app_config.survey_fields.respondent_id == "resp_id"
        assert app_config.baseline.atoll_display_names["Lh"] == "Lhaviyani"
        assert app_config.file_paths.baseline_totals.endswith(".json")

    def test_holds_only_typed_sections(self):
        from dataclasses import fields

        assert [f.name for f in fields(AppConfig)] == [
            "file_paths",
            "parallel",
            "planning_area",
            "survey_fields",
            "baseline",
        ]
        assert AppConfig.from_dict({"parallel": {"max_workers": 2}}) == AppConfig(
            parallel=ParallelConfig(max_workers=2)
        )

    def test_partial_dict_uses_defaults(self):
        app_config = AppConfig.from_dict({"parallel": {"max_workers": 3}})

        assert app_config.parallel.max_workers == 3
        assert app_config.parallel.timeout_seconds == 900
        assert app_config.planning_area.simplify_tolerance == 0.00005
        assert app_config.survey_fields.people_count == "number_of_ppl"

    def test_normalize_config_variants(self):
        app_config = AppConfig.from_dict({})

        assert normalize_config(app_config) is app_config
        assert normalize_config({"parallel": {"max_workers": 2}}).parallel.max_workers == 2
        assert isinstance(normalize_config(None), AppConfig)


class TestValidation:
    """Invalid settings raise ValueError at construction."""

    def test_max_workers_must_be_positive(self):
        with pytest.raises(ValueError, match="max_workers"):
            ParallelConfig(max_workers=0)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError, match="timeout_seconds"):
            ParallelConfig(timeout_seconds=0)

    def test_backend_must_be_known(self):
        with pytest.raises(ValueError, match="backend"):
            AppConfig.from_dict({"parallel": {"backend": "dask"}})

    def test_negative_tolerance(self):
        with pytest.raises(ValueError, match="simplify_tolerance"):
            PlanningAreaConfig(simplify_tolerance=-1)

    def test_configs_are_frozen(self):
        config = SurveyFieldsConfig()
        with pytest.raises(AttributeError):
            config.respondent_id = "other"


class TestEnvironmentOverrides:
    """Test the environment helpers used by CONFIG."""

    def test_env_or_default_converts_type(self, monkeypatch):
        monkeypatch.setenv("OUS_MAX_WORKERS", "4")
        assert _env_or_default("OUS_MAX_WORKERS", 6, int) == 4

    def test_env_or_default_falls_back(self, monkeypatch):
        monkeypatch.delenv("OUS_MAX_WORKERS", raising=False)
        assert _env_or_default("OUS_MAX_WORKERS", 6, int) == 6

    @pytest.mark.parametrize(
        "value,expected", [("true", True), ("YES", True), ("1", True), ("off", False)]
    )
    def test_env_bool(self, monkeypatch, value, expected):
        monkeypatch.setenv("OUS_PARALLEL_ENABLED", value)
        assert _env_bool("OUS_PARALLEL_ENABLED", not expected) is expected
