"""Single-day planning tests."""

from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest

from larder.errors import NoEligibleRecipe
from larder.models.history import ConsumptionRecord
from larder.models.household import HouseholdConfig
from larder.models.plan import EligibleRecipe, RejectedRecipe
from larder.models.request import IntentOverride
from larder.planner.day_planner import ENGINE_VERSION, DayPlanningInputs, plan_day
from larder.planner.variety import build_recency_profile

PLAN_DATE = date(2025, 3, 10)
NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def _inputs(household, recipes, lots, **kwargs) -> DayPlanningInputs:
    defaults = {
        "plan_date": PLAN_DATE,
        "household": household,
        "recipes": tuple(recipes),
        "lots": tuple(lots),
        "now": NOW,
    }
    defaults.update(kwargs)
    return DayPlanningInputs(**defaults)


def test_expiring_salmon_wins(household, catalog, pantry):
    day = plan_day(_inputs(household, catalog, pantry))

    assert day.recipe_slug == "salmon-rice"
    assert day.total_minutes == 30
    assert day.final_score == pytest.approx(-1.0)
    assert day.trace.ranking == ["salmon-rice", "veggie-omelette", "pasta-pomodoro", "chickpea-curry"]
    assert day.trace.tie_breaker is None
    assert day.trace.version == ENGINE_VERSION
    assert day.grocery_addons == []
    assert {item.lot_id for item in day.inventory_to_consume} == {"lot-salmon", "lot-rice", "lot-oil"}


def test_trace_records_every_candidate(household, catalog, pantry):
    day = plan_day(_inputs(household, catalog, pantry))
    trace = day.trace

    assert [candidate.recipe for candidate in trace.candidates] == [recipe.slug for recipe in catalog]
    rejected = trace.candidate("smoothie-bowl")
    assert isinstance(rejected, RejectedRecipe)
    assert rejected.reason == "missing_equipment:blender"
    assert all(isinstance(item, EligibleRecipe) for item in trace.eligible_recipes)
    assert trace.time_constraints.available_minutes == 150
    assert len(trace.inventory_snapshot) == len(pantry)
    assert trace.why[0].startswith("Uses items expiring soon: salmon fillet (urgency=5)")
    assert "All required ingredients available in inventory" in trace.why


def test_partial_coverage_becomes_grocery_addon(household, make_lot, make_recipe):
    recipe = make_recipe("dressing", [("olive oil", 30, "ml")])
    lots = [make_lot("oil", "olive oil", 20, "ml")]

    day = plan_day(_inputs(household, [recipe], lots))

    assert day.inventory_to_consume[0].consumed_quantity == 20
    assert [(item.canonical_name, item.quantity, item.unit) for item in day.grocery_addons] == [
        ("olive oil", 10, "ml")
    ]
    assert "Requires 1 missing ingredient" in day.trace.why


def test_unknown_quantity_counts_as_covered(household, make_lot, make_recipe):
    recipe = make_recipe("scramble", [("eggs", 4, "pcs")])

    day = plan_day(_inputs(household, [recipe], [make_lot("eggs", "eggs", None, "pcs")]))

    assert day.grocery_addons == []
    assert day.inventory_to_consume[0].consumed_unknown is True


def test_short_window_rejects_long_recipe(make_recipe):
    household = HouseholdConfig(
        timezone="UTC",
        dinner_earliest_local=time(18, 0),
        dinner_latest_local=time(18, 15),
    )
    slow = make_recipe("slow-curry", [("onion", 1, "pcs")], prep=10, cook=25)
    quick = make_recipe("quick-toast", [("bread", 2, "pcs")], prep=5, cook=5)

    day = plan_day(_inputs(household, [slow, quick], []))

    assert day.recipe_slug == "quick-toast"
    assert day.trace.candidate("slow-curry").reason == (
        "insufficient_time:requires 35 min, only 15 min available"
    )


def test_no_eligible_recipe_details(household, make_recipe):
    recipes = [
        make_recipe("a", [("onion", 1, "pcs")], equipment=["blender"]),
        make_recipe("b", [("onion", 1, "pcs")], equipment=["blender"]),
        make_recipe("c", [("onion", 1, "pcs")], prep=200),
        make_recipe("d", [("onion", 1, "pcs")]),
    ]

    with pytest.raises(NoEligibleRecipe) as excinfo:
        plan_day(_inputs(household, recipes, [], excluded_slugs=frozenset({"d"})))

    details = excinfo.value.details
    assert details["plan_date"] == "2025-03-10"
    assert details["free_interval_minutes"] == 150
    assert details["total_candidates_evaluated"] == 4
    assert excinfo.value.rejection_reasons == [
        {"reason": "missing_equipment", "count": 2},
        {"reason": "excluded_recipe", "count": 1},
        {"reason": "insufficient_time", "count": 1},
    ]
    assert {"recipe": "d", "reason": "excluded_recipe:d"} in details["all_rejections"]


def test_preferred_recipe_overrides_ranking(household, catalog, pantry):
    intent = IntentOverride(
        date_local=PLAN_DATE, preferred_recipe_slugs=["smoothie-bowl", "pasta-pomodoro"]
    )

    day = plan_day(_inputs(household, catalog, pantry, intent=intent))

    assert day.recipe_slug == "pasta-pomodoro"
    assert day.trace.preferred_override == "pasta-pomodoro"
    assert day.trace.ranking[0] == "salmon-rice"
    assert day.trace.why[0] == "Preferred recipe pasta-pomodoro requested for this date"


def test_must_include_limits_candidates(household, catalog, pantry):
    intent = IntentOverride(date_local=PLAN_DATE, must_include=["canned chickpeas"])

    day = plan_day(_inputs(household, catalog, pantry, intent=intent))

    assert day.recipe_slug == "chickpea-curry"
    assert day.trace.candidate("salmon-rice").reason == "intent_missing:canned chickpeas"


def test_variety_penalty_lowers_score(household, catalog, pantry):
    history = [
        ConsumptionRecord(
            date_local=date(2025, 3, 9),
            recipe_slug="salmon-teriyaki",
            ingredients_used=["salmon fillet"],
            tags=["asian"],
        )
    ]
    profile = build_recency_profile(history, 7, PLAN_DATE)

    day = plan_day(_inputs(household, catalog, pantry, profile=profile))

    salmon = day.trace.candidate("salmon-rice")
    assert salmon.scores.variety_penalty == pytest.approx(18.0)
    assert day.recipe_slug == "veggie-omelette"
    assert day.trace.recent_consumption.meals_found == 1


def test_expired_lots_are_left_out(household, make_lot, make_recipe):
    recipe = make_recipe("yogurt-bowl", [("yogurt", 200, "g")])
    lots = [make_lot("old", "yogurt", 500, "g", expires_in=-1)]

    day = plan_day(_inputs(household, [recipe], lots))

    assert day.trace.inventory_snapshot == []
    assert day.grocery_addons[0].quantity == 200


def test_rerun_is_deterministic(household, catalog, pantry):
    inputs = _inputs(household, catalog, pantry)

    first = plan_day(inputs)
    second = plan_day(inputs)

    assert first.model_dump(mode="json") == second.model_dump(mode="json")
