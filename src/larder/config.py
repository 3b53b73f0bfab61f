"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global engine settings loaded from environment variables or .env files."""

    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    lead_time_minutes: int = Field(
        default=15,
        ge=0,
        description="Minutes added to the current moment before a dinner window may start.",
    )
    variety_window_days: int = Field(
        default=7,
        ge=0,
        description="Default lookback used to build the consumption recency profile.",
    )
    stability_band_pct: float = Field(
        default=10.0,
        ge=0,
        description="Default percentage improvement a new winner must clear to replace a proposed day.",
    )
    max_horizon_days: int = Field(
        default=14,
        ge=1,
        description="Maximum number of dates a single planning request may cover.",
    )
    history_limit: int = Field(
        default=50,
        ge=1,
        description="Maximum number of consumption records read for variety profiles.",
    )

    model_config = ConfigDict(frozen=True)


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (log_level := _env("LARDER_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("LARDER_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (lead_time := _env("LARDER_LEAD_TIME_MINUTES")):
        try:
            payload["lead_time_minutes"] = int(lead_time)
        except ValueError:
            pass
    if (variety_window := _env("LARDER_VARIETY_WINDOW_DAYS")):
        try:
            payload["variety_window_days"] = int(variety_window)
        except ValueError:
            pass
    if (band_pct := _env("LARDER_STABILITY_BAND_PCT")):
        try:
            payload["stability_band_pct"] = float(band_pct)
        except ValueError:
            pass
    if (max_days := _env("LARDER_MAX_HORIZON_DAYS")):
        try:
            payload["max_horizon_days"] = int(max_days)
        except ValueError:
            pass
    if (history_limit := _env("LARDER_HISTORY_LIMIT")):
        try:
            payload["history_limit"] = int(history_limit)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
