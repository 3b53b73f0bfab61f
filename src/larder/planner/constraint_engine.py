"""Hard eligibility rules applied to recipes before scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from larder.models.household import HouseholdConfig
from larder.models.recipe import RecipeDefinition
from larder.models.request import IntentOverride

from .utils import normalize_name

KNOWN_EQUIPMENT = ("oven", "stovetop", "blender")


@dataclass(frozen=True)
class RuleResult:
    """Outcome of applying an individual rule to a recipe."""

    name: str
    passed: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class EquipmentCheck:
    ok: bool
    missing: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EligibilitySnapshot:
    """Per-day facts shared across rule evaluations."""

    plan_date: date
    household: HouseholdConfig
    available_minutes: int
    excluded_slugs: FrozenSet[str] = frozenset()
    intent: Optional[IntentOverride] = None


def check_equipment(required: Iterable[str], household: HouseholdConfig) -> EquipmentCheck:
    """Report every required item the household has no working flag for."""
    flags = household.equipment()
    missing: List[str] = []
    for item in required:
        name = normalize_name(item)
        if not flags.get(name, False) and name not in missing:
            missing.append(name)
    return EquipmentCheck(ok=not missing, missing=tuple(missing))


class ConstraintRule:
    """Base class contract for all eligibility rules."""

    name: str
    hard: bool = True

    def evaluate(self, recipe: RecipeDefinition, snapshot: EligibilitySnapshot) -> RuleResult:
        raise NotImplementedError


class ExclusionRule(ConstraintRule):
    name = "excluded_recipe"

    def evaluate(self, recipe: RecipeDefinition, snapshot: EligibilitySnapshot) -> RuleResult:
        if recipe.slug in snapshot.excluded_slugs:
            return RuleResult(self.name, False, f"excluded_recipe:{recipe.slug}")
        return RuleResult(self.name, True)


class EquipmentRule(ConstraintRule):
    name = "missing_equipment"

    def evaluate(self, recipe: RecipeDefinition, snapshot: EligibilitySnapshot) -> RuleResult:
        check = check_equipment(recipe.equipment_required, snapshot.household)
        if check.ok:
            return RuleResult(self.name, True)
        return RuleResult(self.name, False, f"missing_equipment:{','.join(check.missing)}")


class TimeWindowRule(ConstraintRule):
    name = "insufficient_time"

    def evaluate(self, recipe: RecipeDefinition, snapshot: EligibilitySnapshot) -> RuleResult:
        if recipe.total_minutes <= snapshot.available_minutes:
            return RuleResult(self.name, True)
        return RuleResult(
            self.name,
            False,
            (
                f"insufficient_time:requires {recipe.total_minutes} min, "
                f"only {snapshot.available_minutes} min available"
            ),
        )


class IntentExcludeRule(ConstraintRule):
    name = "intent_excluded"

    def evaluate(self, recipe: RecipeDefinition, snapshot: EligibilitySnapshot) -> RuleResult:
        if snapshot.intent is None or not snapshot.intent.must_exclude:
            return RuleResult(self.name, True)
        names = set(recipe.required_ingredient_names())
        hits = [item for item in snapshot.intent.must_exclude if item in names]
        if not hits:
            return RuleResult(self.name, True)
        return RuleResult(self.name, False, f"intent_excluded:{','.join(hits)}")


class IntentIncludeRule(ConstraintRule):
    name = "intent_missing"

    def evaluate(self, recipe: RecipeDefinition, snapshot: EligibilitySnapshot) -> RuleResult:
        if snapshot.intent is None or not snapshot.intent.must_include:
            return RuleResult(self.name, True)
        names = set(recipe.required_ingredient_names())
        if any(item in names for item in snapshot.intent.must_include):
            return RuleResult(self.name, True)
        return RuleResult(
            self.name, False, f"intent_missing:{','.join(snapshot.intent.must_include)}"
        )


class ConstraintEngine:
    """Evaluate candidate recipes against hard rules, stopping at the first failure."""

    def __init__(self, hard_rules: Sequence[ConstraintRule]) -> None:
        self._hard_rules = tuple(hard_rules)

    @property
    def rules(self) -> Tuple[ConstraintRule, ...]:
        return self._hard_rules

    def first_failure(
        self, recipe: RecipeDefinition, snapshot: EligibilitySnapshot
    ) -> Optional[RuleResult]:
        """Return the first failing rule result, or ``None`` when the recipe is eligible."""
        for rule in self._hard_rules:
            result = rule.evaluate(recipe, snapshot)
            if not result.passed:
                return result
        return None


def default_engine() -> ConstraintEngine:
    return ConstraintEngine(
        hard_rules=[
            ExclusionRule(),
            EquipmentRule(),
            TimeWindowRule(),
            IntentExcludeRule(),
            IntentIncludeRule(),
        ]
    )
