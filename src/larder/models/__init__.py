"""Pydantic models defining shared data contracts."""

from larder.models.history import ConsumptionRecord, VarietyRule
from larder.models.household import HouseholdConfig
from larder.models.inventory import CalendarBlock, InventoryLot, QuantityConfidence
from larder.models.plan import (
    Allocation,
    CandidateOutcome,
    EligibleRecipe,
    GroceryItem,
    GroceryList,
    InputsSummary,
    InventorySnapshotEntry,
    MissingIngredient,
    PlanDay,
    PlanSet,
    PlanSetStatus,
    ReasoningTrace,
    RecencySummary,
    RejectedRecipe,
    ScoreBreakdown,
    ScoringWeights,
    StabilityDecision,
    TimeConstraints,
    TimeInterval,
    VarietyPenaltyApplied,
)
from larder.models.recipe import IngredientRequirement, RecipeDefinition
from larder.models.request import (
    ExistingPlan,
    ExistingPlanDay,
    Horizon,
    HorizonMode,
    IntentOverride,
    PlanOptions,
    PlanRequest,
)

__all__ = [
    "ConsumptionRecord",
    "VarietyRule",
    "HouseholdConfig",
    "CalendarBlock",
    "InventoryLot",
    "QuantityConfidence",
    "Allocation",
    "CandidateOutcome",
    "EligibleRecipe",
    "GroceryItem",
    "GroceryList",
    "InputsSummary",
    "InventorySnapshotEntry",
    "MissingIngredient",
    "PlanDay",
    "PlanSet",
    "PlanSetStatus",
    "ReasoningTrace",
    "RecencySummary",
    "RejectedRecipe",
    "ScoreBreakdown",
    "ScoringWeights",
    "StabilityDecision",
    "TimeConstraints",
    "TimeInterval",
    "VarietyPenaltyApplied",
    "IngredientRequirement",
    "RecipeDefinition",
    "ExistingPlan",
    "ExistingPlanDay",
    "Horizon",
    "HorizonMode",
    "IntentOverride",
    "PlanOptions",
    "PlanRequest",
]
