"""Settings loading tests."""

from __future__ import annotations

from larder.config import Settings, get_settings
from larder.models.request import PlanOptions


def test_defaults():
    settings = get_settings()

    assert settings.log_level == "INFO"
    assert settings.log_format == "plain"
    assert settings.lead_time_minutes == 15
    assert settings.variety_window_days == 7
    assert settings.stability_band_pct == 10.0
    assert settings.max_horizon_days == 14


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("LARDER_STABILITY_BAND_PCT", "25")
    monkeypatch.setenv("LARDER_MAX_HORIZON_DAYS", "7")
    monkeypatch.setenv("LARDER_LEAD_TIME_MINUTES", "not-a-number")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.stability_band_pct == 25.0
    assert settings.max_horizon_days == 7
    assert settings.lead_time_minutes == 15


def test_env_file_values(tmp_path):
    (tmp_path / ".env").write_text("LARDER_LOG_FORMAT=json\n# comment\nLARDER_HISTORY_LIMIT=5\n")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.log_format == "json"
    assert settings.history_limit == 5


def test_environment_wins_over_env_file(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("LARDER_LOG_LEVEL=DEBUG\n")
    monkeypatch.setenv("LARDER_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()

    assert get_settings().log_level == "WARNING"


def test_plan_options_fall_back_to_settings():
    settings = Settings(variety_window_days=3, stability_band_pct=5.0)

    resolved = PlanOptions(stability_band_pct=20.0).resolved(settings)

    assert resolved.variety_window_days == 3
    assert resolved.stability_band_pct == 20.0
