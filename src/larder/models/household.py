"""Household configuration models."""

from __future__ import annotations

from datetime import time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class HouseholdConfig(BaseModel):
    """Timezone, dinner window bounds and kitchen equipment for one household."""

    timezone: str = Field(default="UTC")
    dinner_earliest_local: time = Field(default=time(17, 30))
    dinner_latest_local: time = Field(default=time(20, 0))
    has_oven: bool = Field(default=True)
    has_stovetop: bool = Field(default=True)
    has_blender: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone '{value}'") from exc
        return value

    @model_validator(mode="after")
    def _window_is_ordered(self) -> "HouseholdConfig":
        if self.dinner_latest_local <= self.dinner_earliest_local:
            raise ValueError("dinner_latest_local must be after dinner_earliest_local")
        return self

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def equipment(self) -> dict[str, bool]:
        """Return the equipment flags keyed by the names recipes use."""
        return {
            "oven": self.has_oven,
            "stovetop": self.has_stovetop,
            "blender": self.has_blender,
        }
