"""Horizon orchestration: multi-day planning with shadow inventory and stability."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from functools import partial
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from larder.config import Settings, get_settings
from larder.errors import InvalidInput, PlanNotFound, PlanningError
from larder.metrics import (
    HORIZON_LATENCY,
    PLAN_SETS_COMPUTED,
    PLAN_SETS_REUSED,
    PLANNING_FAILURES,
    STABILITY_DECISIONS,
)
from larder.models.history import ConsumptionRecord
from larder.models.household import HouseholdConfig
from larder.models.inventory import InventoryLot
from larder.models.plan import (
    EligibleRecipe,
    InputsSummary,
    PlanDay,
    PlanSet,
    ScoringWeights,
    StabilityDecision,
    VarietyPenaltyApplied,
)
from larder.models.recipe import RecipeDefinition
from larder.models.request import ExistingPlan, Horizon, HorizonMode, PlanRequest
from larder.providers import PlanningProviders
from larder.store import InMemoryPlanStore

from .day_planner import DayPlanningInputs, plan_day
from .grocery import consolidate_grocery_list
from .horizon import (
    compute_planning_dates,
    intent_override_for,
    local_today,
    normalize_horizon,
    with_preferred_slug,
)
from .scoring import DEFAULT_WEIGHTS
from .shadow import (
    ShadowInventoryItem,
    advance_shadow_inventory,
    apply_shadow_consumption,
    create_shadow_inventory,
    get_expiring_ingredients,
    shadow_snapshot,
)
from .stability import (
    apply_stability_band,
    compute_calendar_digest,
    compute_inventory_digest,
    stable_key_for_request,
)
from .variety import build_recency_profile, planned_consumption_record, summarise_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HorizonInputs:
    """One consistent snapshot of everything a horizon computation reads."""

    household: HouseholdConfig
    recipes: Tuple[RecipeDefinition, ...]
    lots: Tuple[InventoryLot, ...]
    history: Tuple[ConsumptionRecord, ...] = field(default_factory=tuple)
    existing_plan: Optional[ExistingPlan] = None


def load_inputs(
    request: PlanRequest,
    providers: PlanningProviders,
    settings: Optional[Settings] = None,
    include_existing_plan: bool = True,
) -> HorizonInputs:
    """Read every provider once for the request."""
    settings = settings or get_settings()
    household = providers.household(request.household_id)
    if household is None:
        raise InvalidInput(
            f"Household {request.household_id} not found",
            {"household_id": request.household_id},
        )
    return HorizonInputs(
        household=household,
        recipes=tuple(providers.recipes()),
        lots=tuple(providers.inventory(request.household_id)),
        history=tuple(providers.history(request.household_id, settings.history_limit)),
        existing_plan=providers.existing_plan(request.household_id) if include_existing_plan else None,
    )


def request_stable_key(
    request: PlanRequest, inputs: HorizonInputs, settings: Optional[Settings] = None
) -> str:
    """Idempotency key of a request against a given input snapshot."""
    settings = settings or get_settings()
    dates = compute_planning_dates(
        request.horizon, inputs.household.zone, request.now, settings.max_horizon_days
    )
    return stable_key_for_request(
        request.household_id,
        normalize_horizon(request.horizon, dates),
        request.intent_overrides,
        request.options.resolved(settings),
        compute_inventory_digest(inputs.lots),
        compute_calendar_digest(request.calendar_blocks),
    )


def _winner_penalties(day: PlanDay) -> List[VarietyPenaltyApplied]:
    winner = day.trace.candidate(day.recipe_slug)
    if isinstance(winner, EligibleRecipe):
        return list(winner.variety_penalties)
    return []


def _replan_preferring(day_inputs: DayPlanningInputs, slug: str) -> PlanDay:
    intent = with_preferred_slug(day_inputs.plan_date, day_inputs.intent, slug)
    return plan_day(replace(day_inputs, intent=intent))


def _recipe_by_slug(recipes: Iterable[RecipeDefinition], slug: str) -> RecipeDefinition:
    for recipe in recipes:
        if recipe.slug == slug:
            return recipe
    raise InvalidInput(f"Recipe {slug} is not in the catalog", {"recipe_slug": slug})


def plan_horizon(
    request: PlanRequest,
    inputs: HorizonInputs,
    settings: Optional[Settings] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> PlanSet:
    """Plan every date of the request's horizon in chronological order.

    Each day sees the shadow inventory left by earlier days, a recency
    profile that includes them, and excludes their recipes. Where
    ``inputs.existing_plan`` has a day, the stability band decides whether
    its recipe survives.
    """
    settings = settings or get_settings()
    options = request.options.resolved(settings)
    household = inputs.household
    dates = compute_planning_dates(request.horizon, household.zone, request.now, settings.max_horizon_days)
    horizon = normalize_horizon(request.horizon, dates)
    stable_key = stable_key_for_request(
        request.household_id,
        horizon,
        request.intent_overrides,
        options,
        compute_inventory_digest(inputs.lots),
        compute_calendar_digest(request.calendar_blocks),
    )
    log_extra = {"household_id": request.household_id, "stable_key": stable_key}
    logger.info("planning %d date(s) from %s", len(dates), dates[0], extra=log_extra)

    shadow = create_shadow_inventory(inputs.lots, local_today(request.now, household.zone))
    planned: List[ConsumptionRecord] = []
    used_slugs: List[str] = []
    global_excludes = frozenset(options.exclude_recipe_slugs)

    days: List[PlanDay] = []
    decisions: List[StabilityDecision] = []
    penalties: Dict[date, List[VarietyPenaltyApplied]] = {}

    for plan_date in dates:
        advance_shadow_inventory(shadow, plan_date)
        profile = build_recency_profile(
            list(inputs.history) + planned, options.variety_window_days, plan_date
        )
        intent = intent_override_for(plan_date, request.intent_overrides)
        excluded = global_excludes | frozenset(used_slugs)
        day_inputs = DayPlanningInputs(
            plan_date=plan_date,
            household=household,
            recipes=tuple(inputs.recipes),
            lots=tuple(shadow_snapshot(shadow, plan_date)),
            now=request.now,
            calendar_blocks=tuple(request.calendar_blocks),
            excluded_slugs=excluded,
            intent=intent,
            profile=profile,
            expiring=frozenset(get_expiring_ingredients(shadow)),
            weights=weights,
            lead_time_minutes=settings.lead_time_minutes,
        )
        day = plan_day(day_inputs)

        existing_day = inputs.existing_plan.days.get(plan_date) if inputs.existing_plan else None
        if existing_day is not None:
            day, decision = apply_stability_band(
                plan_date,
                existing_day,
                day,
                options.stability_band_pct,
                excluded,
                partial(_replan_preferring, day_inputs),
            )
            decisions.append(decision)
            STABILITY_DECISIONS.labels(decision=decision.decision).inc()

        days.append(day)
        used_slugs.append(day.recipe_slug)
        penalties[plan_date] = _winner_penalties(day)
        apply_shadow_consumption(shadow, day.inventory_to_consume)
        planned.append(
            planned_consumption_record(_recipe_by_slug(inputs.recipes, day.recipe_slug), plan_date)
        )

    history_profile = build_recency_profile(inputs.history, options.variety_window_days, dates[0])
    return PlanSet(
        stable_key=stable_key,
        household_id=request.household_id,
        horizon=horizon,
        days=days,
        grocery_list=consolidate_grocery_list(
            missing for day in days for missing in day.grocery_addons
        ),
        stability_decisions=decisions,
        variety_penalties=penalties,
        inputs_summary=InputsSummary(
            horizon=horizon,
            planning_dates=dates,
            intent_overrides_count=len(request.intent_overrides),
            inventory_lot_count=len(inputs.lots),
            calendar_blocks_count=len(request.calendar_blocks),
        ),
        recent_consumption=summarise_profile(history_profile),
    )


def compute_plan_set(
    request: PlanRequest,
    providers: PlanningProviders,
    store: Optional[InMemoryPlanStore] = None,
    settings: Optional[Settings] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> PlanSet:
    """Resolve a request to a plan set, reusing a proposed set with the same key.

    ``force_recompute`` skips both the reuse check and stability banding.
    A fresh plan set is saved to ``store`` when one is given.
    """
    settings = settings or get_settings()
    force = request.options.force_recompute
    mode = request.horizon.mode.value
    try:
        with HORIZON_LATENCY.time():
            inputs = load_inputs(request, providers, settings, include_existing_plan=not force)
            if store is not None and not force:
                stable_key = request_stable_key(request, inputs, settings)
                existing = store.find_proposed(request.household_id, stable_key)
                if existing is not None:
                    PLAN_SETS_REUSED.inc()
                    logger.info(
                        "reusing proposed plan set",
                        extra={"household_id": request.household_id, "stable_key": stable_key},
                    )
                    return existing
            plan_set = plan_horizon(request, inputs, settings, weights)
    except PlanningError as exc:
        PLANNING_FAILURES.labels(code=exc.code).inc()
        logger.warning(
            "planning failed: %s",
            exc.message,
            extra={"household_id": request.household_id},
        )
        raise

    PLAN_SETS_COMPUTED.labels(mode=mode).inc()
    if store is not None:
        store.save(plan_set)
    return plan_set


def plan_tonight(
    request: PlanRequest,
    providers: PlanningProviders,
    settings: Optional[Settings] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> PlanDay:
    """Plan only the next dinner, without stability banding or persistence."""
    single = request.model_copy(update={"horizon": Horizon(mode=HorizonMode.NEXT_MEAL)})
    settings = settings or get_settings()
    try:
        inputs = load_inputs(single, providers, settings, include_existing_plan=False)
        plan_set = plan_horizon(single, inputs, settings, weights)
    except PlanningError as exc:
        PLANNING_FAILURES.labels(code=exc.code).inc()
        raise
    return plan_set.days[0]


def _replay_prior_days(
    shadow: List[ShadowInventoryItem],
    plan_set: PlanSet,
    target: date,
    recipes: Sequence[RecipeDefinition],
) -> List[ConsumptionRecord]:
    records: List[ConsumptionRecord] = []
    for day in plan_set.days:
        if day.date_local >= target:
            continue
        apply_shadow_consumption(shadow, day.inventory_to_consume)
        records.append(
            planned_consumption_record(_recipe_by_slug(recipes, day.recipe_slug), day.date_local)
        )
    return records


def swap_day(
    plan_set: PlanSet,
    date_local: date,
    request: PlanRequest,
    inputs: HorizonInputs,
    exclude_recipe_slugs: Sequence[str] = (),
    settings: Optional[Settings] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> PlanSet:
    """Replace one day's recipe with the best alternative.

    The old recipe and every other recipe of the set are excluded. Shadow
    inventory and the recency profile reflect the days before ``date_local``.
    """
    settings = settings or get_settings()
    options = request.options.resolved(settings)
    old_day = plan_set.day(date_local)
    if old_day is None:
        raise PlanNotFound(
            f"No plan day for {date_local.isoformat()} in plan set",
            {"stable_key": plan_set.stable_key, "date_local": date_local.isoformat()},
        )

    excluded = (
        frozenset(options.exclude_recipe_slugs)
        | frozenset(exclude_recipe_slugs)
        | frozenset(plan_set.recipe_slugs)
    )

    shadow = create_shadow_inventory(inputs.lots, local_today(request.now, inputs.household.zone))
    prior = _replay_prior_days(shadow, plan_set, date_local, inputs.recipes)
    advance_shadow_inventory(shadow, date_local)
    profile = build_recency_profile(list(inputs.history) + prior, options.variety_window_days, date_local)

    try:
        new_day = plan_day(
            DayPlanningInputs(
                plan_date=date_local,
                household=inputs.household,
                recipes=tuple(inputs.recipes),
                lots=tuple(shadow_snapshot(shadow, date_local)),
                now=request.now,
                calendar_blocks=tuple(request.calendar_blocks),
                excluded_slugs=excluded,
                intent=intent_override_for(date_local, request.intent_overrides),
                profile=profile,
                expiring=frozenset(get_expiring_ingredients(shadow)),
                weights=weights,
                lead_time_minutes=settings.lead_time_minutes,
            )
        )
    except PlanningError as exc:
        PLANNING_FAILURES.labels(code=exc.code).inc()
        raise

    logger.info(
        "swapped %s for %s on %s",
        old_day.recipe_slug,
        new_day.recipe_slug,
        date_local,
        extra={"household_id": plan_set.household_id, "stable_key": plan_set.stable_key},
    )
    days = [new_day if day.date_local == date_local else day for day in plan_set.days]
    penalties = dict(plan_set.variety_penalties)
    penalties[date_local] = _winner_penalties(new_day)
    return plan_set.model_copy(
        update={
            "days": days,
            "variety_penalties": penalties,
            "grocery_list": consolidate_grocery_list(
                missing for day in days for missing in day.grocery_addons
            ),
            "stability_decisions": [
                decision for decision in plan_set.stability_decisions if decision.date_local != date_local
            ],
        }
    )
