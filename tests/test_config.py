"""Tests for engine settings and the environment loader."""

from __future__ import annotations

from aecview.config import (
    BOUNDARY_BAND_M,
    DEFAULT_MAX_WORKERS,
    DEVICE_RADIUS_M,
    EngineSettings,
    load_settings,
)


class TestEngineSettings:
    """Defaults."""

    def test_defaults_match_constants(self):
        settings = EngineSettings()
        assert settings.device_radius_m == DEVICE_RADIUS_M == 1.0
        assert settings.boundary_band_m == BOUNDARY_BAND_M == 0.3
        assert settings.max_workers == DEFAULT_MAX_WORKERS == 3
        assert settings.host_wall_tolerance_m == 0.05
        assert settings.log_level is None


class TestLoadSettings:
    """AECVIEW_* environment overrides."""

    def test_empty_environment(self):
        assert load_settings({}) == EngineSettings()

    def test_overrides(self):
        settings = load_settings({
            "AECVIEW_DEVICE_RADIUS_M": "1.5",
            "AECVIEW_MAX_WORKERS": "8",
            "AECVIEW_LOG_LEVEL": "debug",
        })
        assert settings.device_radius_m == 1.5
        assert settings.max_workers == 8
        assert settings.log_level == "debug"

    def test_unparsable_value_keeps_default(self):
        settings = load_settings({
            "AECVIEW_MAX_WORKERS": "lots",
            "AECVIEW_DEPTH_WINDOW_M": "2.5",
        })
        assert settings.max_workers == DEFAULT_MAX_WORKERS
        assert settings.depth_window_m == 2.5

    def test_blank_values_ignored(self):
        settings = load_settings({"AECVIEW_BOUNDARY_BAND_M": "  "})
        assert settings.boundary_band_m == BOUNDARY_BAND_M

    def test_unrelated_variables_ignored(self):
        settings = load_settings({"DEVICE_RADIUS_M": "9", "AECVIEW_UNKNOWN": "1"})
        assert settings == EngineSettings()

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("AECVIEW_WALL_SLICE_M", "0.75")
        assert load_settings().wall_slice_m == 0.75
