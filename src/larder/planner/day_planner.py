"""Single-day planner: eligibility, allocation, scoring and winner selection."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import AbstractSet, Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from larder.errors import NoEligibleRecipe
from larder.models.household import HouseholdConfig
from larder.models.inventory import CalendarBlock, InventoryLot
from larder.models.plan import (
    CandidateOutcome,
    EligibleRecipe,
    InventorySnapshotEntry,
    PlanDay,
    ReasoningTrace,
    RejectedRecipe,
    ScoringWeights,
)
from larder.models.recipe import RecipeDefinition
from larder.models.request import IntentOverride

from .allocation import LotArena, allocate
from .constraint_engine import ConstraintEngine, EligibilitySnapshot, default_engine
from .explanations import generate_why
from .scoring import DEFAULT_WEIGHTS, compute_score, compute_urgency, compute_waste_score
from .tie_break import determine_tie_breaker, rank_candidates
from .time_window import DEFAULT_LEAD_TIME_MINUTES, resolve_time_constraints
from .variety import RecencyProfile, calculate_variety_penalties, summarise_profile

logger = logging.getLogger(__name__)

ENGINE_VERSION = "1.0"
TOP_REJECTION_CATEGORIES = 3


@dataclass(frozen=True)
class DayPlanningInputs:
    """Everything the planner reads for one date; nothing else is consulted."""

    plan_date: date
    household: HouseholdConfig
    recipes: Tuple[RecipeDefinition, ...]
    lots: Tuple[InventoryLot, ...]
    now: datetime
    calendar_blocks: Tuple[CalendarBlock, ...] = field(default_factory=tuple)
    excluded_slugs: FrozenSet[str] = frozenset()
    intent: Optional[IntentOverride] = None
    profile: Optional[RecencyProfile] = None
    expiring: AbstractSet[str] = frozenset()
    weights: ScoringWeights = DEFAULT_WEIGHTS
    lead_time_minutes: int = DEFAULT_LEAD_TIME_MINUTES


def usable_lots(lots: Sequence[InventoryLot], today: date) -> List[InventoryLot]:
    """Drop expired lots and depleted known-quantity lots from a snapshot."""
    usable: List[InventoryLot] = []
    for lot in lots:
        if compute_urgency(lot.expiration_date, today) < 0:
            continue
        if not lot.is_unknown_quantity and not (lot.quantity or 0) > 0:
            continue
        usable.append(lot)
    return usable


def summarise_rejections(rejected: Sequence[RejectedRecipe]) -> List[Dict[str, Any]]:
    """Top rejection categories by count, ties broken by category name."""
    counts = Counter(item.category for item in rejected)
    ranked = sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
    return [{"reason": reason, "count": count} for reason, count in ranked[:TOP_REJECTION_CATEGORIES]]


def _evaluate_candidate(
    recipe: RecipeDefinition,
    inputs: DayPlanningInputs,
    arena: LotArena,
    original: Dict[str, InventoryLot],
) -> EligibleRecipe:
    result = allocate(recipe.ingredients, arena)
    waste = compute_waste_score(result.allocations, original, inputs.plan_date, inputs.weights)

    penalties = ()
    variety_total = 0.0
    if inputs.profile is not None:
        variety = calculate_variety_penalties(
            recipe.required_ingredient_names(),
            recipe.tags,
            inputs.profile,
            inputs.plan_date,
            inputs.expiring,
        )
        penalties = variety.penalties
        variety_total = variety.total

    scores = compute_score(
        waste,
        len(result.missing),
        recipe.total_minutes,
        variety_penalty=variety_total,
        weights=inputs.weights,
    )
    return EligibleRecipe(
        recipe=recipe.slug,
        name=recipe.name,
        total_minutes=recipe.total_minutes,
        scores=scores,
        allocations=list(result.allocations),
        missing_ingredients=list(result.missing),
        variety_penalties=list(penalties),
    )


def _preferred_winner(
    ranked: Sequence[EligibleRecipe], intent: Optional[IntentOverride]
) -> Optional[EligibleRecipe]:
    if intent is None or not intent.preferred_recipe_slugs:
        return None
    by_slug = {candidate.recipe: candidate for candidate in ranked}
    for slug in intent.preferred_recipe_slugs:
        if slug in by_slug:
            return by_slug[slug]
    return None


def plan_day(inputs: DayPlanningInputs, engine: Optional[ConstraintEngine] = None) -> PlanDay:
    """Choose tonight's recipe for one date and build its reasoning trace.

    Raises ``NoFeasibleTimeWindow`` when no free interval remains and
    ``NoEligibleRecipe`` when every recipe fails a hard rule.
    """
    engine = engine or default_engine()
    log_extra = {"plan_date": inputs.plan_date.isoformat()}

    constraints = resolve_time_constraints(
        inputs.plan_date,
        inputs.household,
        inputs.now,
        inputs.calendar_blocks,
        inputs.lead_time_minutes,
    )

    snapshot = usable_lots(inputs.lots, inputs.plan_date)
    original = {lot.id: lot for lot in snapshot}
    arena = LotArena(snapshot)

    eligibility = EligibilitySnapshot(
        plan_date=inputs.plan_date,
        household=inputs.household,
        available_minutes=constraints.available_minutes,
        excluded_slugs=frozenset(inputs.excluded_slugs),
        intent=inputs.intent,
    )

    candidates: List[CandidateOutcome] = []
    eligible: List[EligibleRecipe] = []
    rejected: List[RejectedRecipe] = []
    for recipe in inputs.recipes:
        failure = engine.first_failure(recipe, eligibility)
        if failure is not None:
            outcome = RejectedRecipe(
                recipe=recipe.slug,
                total_minutes=recipe.total_minutes,
                reason=failure.reason or failure.name,
            )
            rejected.append(outcome)
            candidates.append(outcome)
            continue
        candidate = _evaluate_candidate(recipe, inputs, arena, original)
        eligible.append(candidate)
        candidates.append(candidate)

    if not eligible:
        logger.info("no eligible recipe for %s", inputs.plan_date, extra=log_extra)
        raise NoEligibleRecipe(
            {
                "plan_date": inputs.plan_date.isoformat(),
                "free_interval_minutes": constraints.available_minutes,
                "total_candidates_evaluated": len(candidates),
                "rejection_reasons": summarise_rejections(rejected),
                "all_rejections": [
                    {"recipe": item.recipe, "reason": item.reason} for item in rejected
                ],
            }
        )

    ranked = rank_candidates(eligible)
    runner_up = ranked[1] if len(ranked) > 1 else None
    tie_breaker = determine_tie_breaker(ranked[0], runner_up)

    preferred = _preferred_winner(ranked, inputs.intent)
    winner = preferred or ranked[0]
    preferred_override = preferred.recipe if preferred is not None else None

    recipe = next(item for item in inputs.recipes if item.slug == winner.recipe)
    trace = ReasoningTrace(
        version=ENGINE_VERSION,
        plan_date=inputs.plan_date,
        generated_at=inputs.now,
        timezone=inputs.household.timezone,
        inventory_snapshot=[
            InventorySnapshotEntry(
                lot_id=lot.id,
                canonical_name=lot.canonical_name,
                quantity=lot.quantity,
                quantity_confidence=lot.quantity_confidence,
                unit=lot.unit,
                expiration_date=lot.expiration_date,
                urgency=compute_urgency(lot.expiration_date, inputs.plan_date),
            )
            for lot in snapshot
        ],
        time_constraints=constraints,
        candidates=candidates,
        ranking=[candidate.recipe for candidate in ranked],
        winner=winner.recipe,
        tie_breaker=tie_breaker,
        preferred_override=preferred_override,
        expiring_ingredients=sorted(inputs.expiring),
        recent_consumption=summarise_profile(inputs.profile) if inputs.profile is not None else None,
        scoring_details=inputs.weights,
        why=generate_why(
            winner,
            original,
            inputs.plan_date,
            constraints.available_minutes,
            preferred_override,
        ),
    )

    logger.info(
        "planned %s for %s (score %.2f)",
        winner.recipe,
        inputs.plan_date,
        winner.scores.final,
        extra=log_extra,
    )
    return PlanDay(
        date_local=inputs.plan_date,
        recipe_slug=recipe.slug,
        recipe_name=recipe.name,
        total_minutes=recipe.total_minutes,
        feasible_window=constraints.selected_interval,
        inventory_to_consume=list(winner.allocations),
        grocery_addons=list(winner.missing_ingredients),
        trace=trace,
    )
