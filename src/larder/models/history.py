"""Consumption history and variety rule models."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class ConsumptionRecord(BaseModel):
    """A meal that was cooked (or is planned) and the ingredients it used."""

    date_local: date
    recipe_slug: str
    ingredients_used: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class VarietyRule(BaseModel):
    """Repeat-avoidance policy for one ingredient category."""

    category: str
    ingredients: tuple[str, ...] = Field(default_factory=tuple)
    avoid_repeat_days: int = Field(ge=0)
    penalty_per_occurrence: float = Field(ge=0)

    model_config = ConfigDict(frozen=True)
