"""Planning request models."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from larder.config import Settings
from larder.models.inventory import CalendarBlock


class HorizonMode(str, Enum):
    NEXT_MEAL = "next_meal"
    NEXT_N_DINNERS = "next_n_dinners"
    DATE_RANGE = "date_range"


class Horizon(BaseModel):
    """Which dates a planning request covers."""

    mode: HorizonMode = Field(default=HorizonMode.NEXT_MEAL)
    n_dinners: Optional[int] = Field(default=None, ge=1)
    start_date_local: Optional[date] = Field(default=None)
    end_date_local: Optional[date] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _range_fields(self) -> "Horizon":
        if self.mode is HorizonMode.DATE_RANGE and (
            self.start_date_local is None or self.end_date_local is None
        ):
            raise ValueError("date_range horizons require start_date_local and end_date_local")
        return self


class IntentOverride(BaseModel):
    """Per-date steering supplied by the household."""

    date_local: date
    must_include: list[str] = Field(default_factory=list)
    must_exclude: list[str] = Field(default_factory=list)
    preferred_recipe_slugs: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class PlanOptions(BaseModel):
    """Knobs for a horizon computation; unset values fall back to settings."""

    exclude_recipe_slugs: list[str] = Field(default_factory=list)
    variety_window_days: Optional[int] = Field(default=None, ge=0)
    stability_band_pct: Optional[float] = Field(default=None, ge=0)
    force_recompute: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    def resolved(self, settings: Settings) -> "PlanOptions":
        """Return a copy with every default filled in from settings."""
        return self.model_copy(
            update={
                "variety_window_days": (
                    self.variety_window_days
                    if self.variety_window_days is not None
                    else settings.variety_window_days
                ),
                "stability_band_pct": (
                    self.stability_band_pct
                    if self.stability_band_pct is not None
                    else settings.stability_band_pct
                ),
            }
        )


class PlanRequest(BaseModel):
    """A single planning request for one household."""

    household_id: str = Field(min_length=1)
    now: datetime
    horizon: Horizon = Field(default_factory=Horizon)
    calendar_blocks: list[CalendarBlock] = Field(default_factory=list)
    intent_overrides: list[IntentOverride] = Field(default_factory=list)
    options: PlanOptions = Field(default_factory=PlanOptions)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _aware_now(self) -> "PlanRequest":
        if self.now.tzinfo is None:
            raise ValueError("now must be timezone-aware")
        return self


class ExistingPlanDay(BaseModel):
    """Recorded winner of a previously proposed plan day."""

    recipe_slug: str
    final_score: float

    model_config = ConfigDict(frozen=True)


class ExistingPlan(BaseModel):
    """The prior non-terminal plan used for stability banding."""

    stable_key: Optional[str] = Field(default=None)
    days: dict[date, ExistingPlanDay] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)
