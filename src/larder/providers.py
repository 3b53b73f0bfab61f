"""Caller-side read interfaces and the JSON planning bundle."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from larder.errors import InvalidInput
from larder.models.history import ConsumptionRecord
from larder.models.household import HouseholdConfig
from larder.models.inventory import InventoryLot
from larder.models.recipe import IngredientRequirement, RecipeDefinition
from larder.models.request import ExistingPlan, IntentOverride, PlanRequest
from larder.planner.utils import canonicalize_ingredient_name

HouseholdProvider = Callable[[str], Optional[HouseholdConfig]]
RecipeCatalogProvider = Callable[[], Sequence[RecipeDefinition]]
InventoryProvider = Callable[[str], Sequence[InventoryLot]]
HistoryProvider = Callable[[str, int], Sequence[ConsumptionRecord]]
ExistingPlanProvider = Callable[[str], Optional[ExistingPlan]]


def _no_history(household_id: str, limit: int) -> Sequence[ConsumptionRecord]:
    return []


def _no_existing_plan(household_id: str) -> Optional[ExistingPlan]:
    return None


@dataclass(frozen=True)
class PlanningProviders:
    """Read interfaces the orchestrator consults once per request."""

    household: HouseholdProvider
    recipes: RecipeCatalogProvider
    inventory: InventoryProvider
    history: HistoryProvider = _no_history
    existing_plan: ExistingPlanProvider = _no_existing_plan


def _canonical_list(values: List[str]) -> List[str]:
    return [canonicalize_ingredient_name(value) for value in values]


class PlanningBundle(BaseModel):
    """One JSON document carrying a request and everything its providers return."""

    household: HouseholdConfig
    recipes: List[RecipeDefinition] = Field(default_factory=list)
    inventory: List[InventoryLot] = Field(default_factory=list)
    history: List[ConsumptionRecord] = Field(default_factory=list)
    existing_plan: Optional[ExistingPlan] = Field(default=None)
    request: PlanRequest

    model_config = ConfigDict(frozen=True)

    @field_validator("recipes", mode="after")
    @classmethod
    def _canonical_recipes(cls, recipes: List[RecipeDefinition]) -> List[RecipeDefinition]:
        return [
            recipe.model_copy(
                update={
                    "ingredients": [
                        IngredientRequirement(
                            canonical_name=canonicalize_ingredient_name(item.canonical_name),
                            quantity=item.quantity,
                            unit=item.unit,
                            optional=item.optional,
                        )
                        for item in recipe.ingredients
                    ]
                }
            )
            for recipe in recipes
        ]

    @field_validator("inventory", mode="after")
    @classmethod
    def _canonical_inventory(cls, lots: List[InventoryLot]) -> List[InventoryLot]:
        return [
            lot.model_copy(update={"canonical_name": canonicalize_ingredient_name(lot.canonical_name)})
            for lot in lots
        ]

    @field_validator("history", mode="after")
    @classmethod
    def _canonical_history(cls, records: List[ConsumptionRecord]) -> List[ConsumptionRecord]:
        return [
            record.model_copy(update={"ingredients_used": _canonical_list(record.ingredients_used)})
            for record in records
        ]

    @field_validator("request", mode="after")
    @classmethod
    def _canonical_overrides(cls, request: PlanRequest) -> PlanRequest:
        overrides: List[IntentOverride] = [
            override.model_copy(
                update={
                    "must_include": _canonical_list(override.must_include),
                    "must_exclude": _canonical_list(override.must_exclude),
                }
            )
            for override in request.intent_overrides
        ]
        return request.model_copy(update={"intent_overrides": overrides})

    def providers(self) -> PlanningProviders:
        """Expose the bundle through the provider callables."""
        household_id = self.request.household_id

        def household(requested: str) -> Optional[HouseholdConfig]:
            return self.household if requested == household_id else None

        def inventory(requested: str) -> Sequence[InventoryLot]:
            return list(self.inventory) if requested == household_id else []

        def history(requested: str, limit: int) -> Sequence[ConsumptionRecord]:
            if requested != household_id:
                return []
            newest_first = sorted(self.history, key=lambda record: record.date_local, reverse=True)
            return newest_first[:limit]

        def existing_plan(requested: str) -> Optional[ExistingPlan]:
            return self.existing_plan if requested == household_id else None

        return PlanningProviders(
            household=household,
            recipes=lambda: list(self.recipes),
            inventory=inventory,
            history=history,
            existing_plan=existing_plan,
        )


def parse_bundle(payload: Dict[str, Any]) -> PlanningBundle:
    try:
        return PlanningBundle.model_validate(payload)
    except ValidationError as exc:
        raise InvalidInput(
            "Planning bundle failed validation",
            {"errors": json.loads(exc.json(include_url=False))},
        ) from exc


def load_bundle(path: Path) -> PlanningBundle:
    """Read and validate a planning bundle from a JSON file."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise InvalidInput(f"Bundle file {path} not found", {"path": str(path)}) from exc
    except json.JSONDecodeError as exc:
        raise InvalidInput(f"Bundle file {path} is not valid JSON", {"path": str(path), "error": str(exc)}) from exc
    if not isinstance(payload, dict):
        raise InvalidInput("Bundle must be a JSON object", {"path": str(path)})
    return parse_bundle(payload)
