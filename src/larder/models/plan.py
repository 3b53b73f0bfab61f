"""Planner output models: candidates, reasoning traces, plan days and plan sets."""

from __future__ import annotations

import math
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from larder.models.inventory import QuantityConfidence
from larder.models.request import ExistingPlan, ExistingPlanDay, Horizon


class TimeInterval(BaseModel):
    """Contiguous interval with its duration in whole minutes."""

    start: datetime
    end: datetime
    minutes: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)


class Allocation(BaseModel):
    """Consumption instruction for one inventory lot."""

    lot_id: str
    canonical_name: str
    unit: str
    consumed_quantity: Optional[float] = Field(default=None, ge=0)
    consumed_unknown: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _unknown_has_no_quantity(self) -> "Allocation":
        if self.consumed_unknown and self.consumed_quantity is not None:
            raise ValueError("unknown-quantity allocations cannot carry a consumed quantity")
        if not self.consumed_unknown and self.consumed_quantity is None:
            raise ValueError("known allocations require a consumed quantity")
        return self


class MissingIngredient(BaseModel):
    """Residual requirement the household has to buy."""

    canonical_name: str
    quantity: float = Field(ge=0)
    unit: str

    model_config = ConfigDict(frozen=True)


class ScoringWeights(BaseModel):
    """Fixed scoring constants, passed explicitly to the scorer and echoed in traces."""

    waste_weight: float = Field(default=1.0)
    grocery_penalty_per_item: float = Field(default=10.0)
    time_penalty_factor: float = Field(default=0.2)

    model_config = ConfigDict(frozen=True)


class ScoreBreakdown(BaseModel):
    """Score components of an eligible candidate."""

    waste: float
    grocery_penalty: float
    time_penalty: float
    variety_penalty: float = Field(default=0.0)
    final: float

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _final_is_composed(self) -> "ScoreBreakdown":
        expected = self.waste - self.grocery_penalty - self.time_penalty - self.variety_penalty
        if not math.isclose(self.final, expected, rel_tol=0.0, abs_tol=1e-9):
            raise ValueError(
                f"final score {self.final} does not equal composed score {expected}"
            )
        return self


class VarietyPenaltyApplied(BaseModel):
    """One variety penalty line with its structured reason."""

    ingredient: str
    last_consumed_date: date
    days_since: int
    penalty_points: float
    reason: str

    model_config = ConfigDict(frozen=True)


class EligibleRecipe(BaseModel):
    """A recipe that passed every hard constraint and was scored."""

    status: Literal["eligible"] = "eligible"
    recipe: str
    name: str
    total_minutes: int
    scores: ScoreBreakdown
    allocations: list[Allocation] = Field(default_factory=list)
    missing_ingredients: list[MissingIngredient] = Field(default_factory=list)
    variety_penalties: list[VarietyPenaltyApplied] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def missing_count(self) -> int:
        return len(self.missing_ingredients)


class RejectedRecipe(BaseModel):
    """A recipe rejected by a hard constraint; never scored."""

    status: Literal["rejected"] = "rejected"
    recipe: str
    total_minutes: int
    reason: str

    model_config = ConfigDict(frozen=True)

    @property
    def category(self) -> str:
        return self.reason.split(":", 1)[0]


CandidateOutcome = Annotated[Union[EligibleRecipe, RejectedRecipe], Field(discriminator="status")]


class InventorySnapshotEntry(BaseModel):
    lot_id: str
    canonical_name: str
    quantity: Optional[float]
    quantity_confidence: QuantityConfidence
    unit: str
    expiration_date: Optional[date]
    urgency: int

    model_config = ConfigDict(frozen=True)


class BusyBlockTrace(BaseModel):
    start: datetime
    end: datetime
    source: str
    title: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class TimeConstraints(BaseModel):
    """Dinner window, calendar blocks and the interval chosen for cooking."""

    dinner_window: TimeInterval
    busy_blocks: list[BusyBlockTrace] = Field(default_factory=list)
    free_intervals: list[TimeInterval] = Field(default_factory=list)
    selected_interval: TimeInterval
    available_minutes: int

    model_config = ConfigDict(frozen=True)


class RecencySummary(BaseModel):
    days_looked_back: int
    meals_found: int
    ingredients_consumed: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ReasoningTrace(BaseModel):
    """Full, reproducible explanation of one day's decision."""

    version: str
    plan_date: date
    generated_at: datetime
    timezone: str
    inventory_snapshot: list[InventorySnapshotEntry] = Field(default_factory=list)
    time_constraints: TimeConstraints
    candidates: list[CandidateOutcome] = Field(default_factory=list)
    ranking: list[str] = Field(default_factory=list)
    winner: str
    tie_breaker: Optional[str] = None
    preferred_override: Optional[str] = None
    expiring_ingredients: list[str] = Field(default_factory=list)
    recent_consumption: Optional[RecencySummary] = None
    scoring_details: ScoringWeights
    why: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def eligible_recipes(self) -> list[EligibleRecipe]:
        return [item for item in self.candidates if isinstance(item, EligibleRecipe)]

    @property
    def rejected_recipes(self) -> list[RejectedRecipe]:
        return [item for item in self.candidates if isinstance(item, RejectedRecipe)]

    def candidate(self, slug: str) -> Optional[CandidateOutcome]:
        for item in self.candidates:
            if item.recipe == slug:
                return item
        return None

    @property
    def winner_scores(self) -> ScoreBreakdown:
        winner = self.candidate(self.winner)
        if not isinstance(winner, EligibleRecipe):
            raise ValueError(f"winner '{self.winner}' is not an eligible candidate")
        return winner.scores


class PlanDay(BaseModel):
    """Chosen dinner for one date."""

    date_local: date
    recipe_slug: str
    recipe_name: str
    total_minutes: int
    feasible_window: TimeInterval
    inventory_to_consume: list[Allocation] = Field(default_factory=list)
    grocery_addons: list[MissingIngredient] = Field(default_factory=list)
    trace: ReasoningTrace

    model_config = ConfigDict(frozen=True)

    @property
    def final_score(self) -> float:
        return self.trace.winner_scores.final


class StabilityDecision(BaseModel):
    """Whether an already proposed day kept its recipe."""

    date_local: date
    decision: Literal["kept", "changed"]
    kept_recipe: Optional[str] = None
    new_best_recipe: str
    old_recipe: str
    old_score: float
    new_score: float
    threshold: float
    band_pct: float
    within_band: bool
    reason: str

    model_config = ConfigDict(frozen=True)


class GroceryItem(BaseModel):
    canonical_name: str
    display_name: str
    total_quantity: float
    unit: str
    category: str

    model_config = ConfigDict(frozen=True)


class GroceryList(BaseModel):
    """Deduplicated, categorised grocery gaps across a horizon."""

    items: list[GroceryItem] = Field(default_factory=list)
    summary: str = "No items needed."

    model_config = ConfigDict(frozen=True)


class PlanSetStatus(str, Enum):
    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    OVERRIDDEN = "overridden"


class InputsSummary(BaseModel):
    horizon: Horizon
    planning_dates: list[date] = Field(default_factory=list)
    intent_overrides_count: int = 0
    inventory_lot_count: int = 0
    calendar_blocks_count: int = 0

    model_config = ConfigDict(frozen=True)


class PlanSet(BaseModel):
    """Ordered per-day winners of one horizon computation."""

    stable_key: str
    household_id: str
    horizon: Horizon
    status: PlanSetStatus = PlanSetStatus.PROPOSED
    days: list[PlanDay] = Field(default_factory=list)
    grocery_list: GroceryList = Field(default_factory=GroceryList)
    stability_decisions: list[StabilityDecision] = Field(default_factory=list)
    variety_penalties: dict[date, list[VarietyPenaltyApplied]] = Field(default_factory=dict)
    inputs_summary: InputsSummary
    recent_consumption: Optional[RecencySummary] = None

    model_config = ConfigDict(frozen=True)

    @property
    def recipe_slugs(self) -> list[str]:
        return [day.recipe_slug for day in self.days]

    def day(self, date_local: date) -> Optional[PlanDay]:
        for plan_day in self.days:
            if plan_day.date_local == date_local:
                return plan_day
        return None

    def to_existing_plan(self) -> ExistingPlan:
        """Project the set onto the per-date lookup used for stability banding."""
        return ExistingPlan(
            stable_key=self.stable_key,
            days={
                plan_day.date_local: ExistingPlanDay(
                    recipe_slug=plan_day.recipe_slug,
                    final_score=plan_day.final_score,
                )
                for plan_day in self.days
            },
        )
