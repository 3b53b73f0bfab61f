"""Grocery consolidation, horizon dates and ingredient name tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from larder.errors import InvalidInput
from larder.models.plan import MissingIngredient
from larder.models.request import Horizon, HorizonMode, IntentOverride
from larder.planner.grocery import consolidate_grocery_list, format_quantity
from larder.planner.horizon import (
    compute_planning_dates,
    intent_override_for,
    normalize_horizon,
    with_preferred_slug,
)
from larder.planner.utils import canonicalize_ingredient_name, ingredient_category

UTC = ZoneInfo("UTC")
NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def _missing(name: str, quantity: float, unit: str) -> MissingIngredient:
    return MissingIngredient(canonical_name=name, quantity=quantity, unit=unit)


def test_grocery_list_merges_and_orders_by_category():
    grocery = consolidate_grocery_list(
        [
            _missing("pasta", 200, "g"),
            _missing("lemon", 1, "pcs"),
            _missing("salmon fillet", 2, "pcs"),
            _missing("lemon", 2, "pcs"),
            _missing("bell pepper", 1, "pcs"),
        ]
    )

    assert [(item.canonical_name, item.total_quantity, item.category) for item in grocery.items] == [
        ("bell pepper", 1, "produce"),
        ("lemon", 3, "produce"),
        ("salmon fillet", 2, "protein"),
        ("pasta", 200, "pantry"),
    ]
    assert grocery.items[0].display_name == "Bell Pepper"
    assert grocery.summary == "Pick up Bell Pepper, Lemon and 2 more items."


def test_grocery_list_keeps_units_apart():
    grocery = consolidate_grocery_list([_missing("milk", 200, "ml"), _missing("milk", 1, "l")])

    assert len(grocery.items) == 2
    assert grocery.summary == "Pick up Milk and Milk."


def test_empty_grocery_list():
    assert consolidate_grocery_list([]).summary == "No items needed."


@pytest.mark.parametrize(
    ("quantity", "unit", "expected"),
    [(1500, "g", "1.5 kg"), (2000, "ml", "2 L"), (250, "g", "250 g"), (2.5, "pcs", "2.5 pcs")],
)
def test_format_quantity(quantity, unit, expected):
    assert format_quantity(quantity, unit) == expected


def test_next_meal_is_today():
    assert compute_planning_dates(Horizon(mode=HorizonMode.NEXT_MEAL), UTC, NOW) == [date(2025, 3, 10)]


def test_next_meal_uses_household_local_date():
    early_utc = datetime(2025, 3, 10, 2, 0, tzinfo=timezone.utc)

    dates = compute_planning_dates(
        Horizon(mode=HorizonMode.NEXT_MEAL), ZoneInfo("America/Los_Angeles"), early_utc
    )

    assert dates == [date(2025, 3, 9)]


def test_next_n_dinners_are_consecutive():
    dates = compute_planning_dates(Horizon(mode=HorizonMode.NEXT_N_DINNERS, n_dinners=3), UTC, NOW)

    assert dates == [date(2025, 3, 10), date(2025, 3, 11), date(2025, 3, 12)]


def test_next_n_dinners_capped_at_max_days():
    dates = compute_planning_dates(
        Horizon(mode=HorizonMode.NEXT_N_DINNERS, n_dinners=30), UTC, NOW, max_days=14
    )

    assert len(dates) == 14


def test_date_range_inclusive():
    horizon = Horizon(
        mode=HorizonMode.DATE_RANGE,
        start_date_local=date(2025, 3, 12),
        end_date_local=date(2025, 3, 14),
    )

    dates = compute_planning_dates(horizon, UTC, NOW)

    assert dates == [date(2025, 3, 12), date(2025, 3, 13), date(2025, 3, 14)]
    assert normalize_horizon(horizon, dates) == horizon


def test_relative_horizons_normalize_to_their_first_date():
    dinners = Horizon(mode=HorizonMode.NEXT_N_DINNERS, n_dinners=3)
    tomorrow = NOW + timedelta(days=1)

    today_form = normalize_horizon(dinners, compute_planning_dates(dinners, UTC, NOW))
    tomorrow_form = normalize_horizon(dinners, compute_planning_dates(dinners, UTC, tomorrow))

    assert today_form.start_date_local == date(2025, 3, 10)
    assert tomorrow_form.start_date_local == date(2025, 3, 11)
    assert today_form != tomorrow_form


@pytest.mark.parametrize(
    ("start", "end"),
    [(date(2025, 3, 14), date(2025, 3, 12)), (date(2025, 3, 1), date(2025, 3, 31))],
)
def test_date_range_out_of_bounds(start, end):
    horizon = Horizon(mode=HorizonMode.DATE_RANGE, start_date_local=start, end_date_local=end)

    with pytest.raises(InvalidInput):
        compute_planning_dates(horizon, UTC, NOW, max_days=14)


def test_date_range_requires_both_bounds():
    with pytest.raises(ValueError):
        Horizon(mode=HorizonMode.DATE_RANGE, start_date_local=date(2025, 3, 12))


def test_intent_override_lookup_and_preferred_slug():
    override = IntentOverride(
        date_local=date(2025, 3, 11), preferred_recipe_slugs=["a", "b"], must_exclude=["garlic"]
    )

    assert intent_override_for(date(2025, 3, 10), [override]) is None
    assert intent_override_for(date(2025, 3, 11), [override]) is override

    preferred = with_preferred_slug(date(2025, 3, 11), override, "b")
    assert preferred.preferred_recipe_slugs == ["b", "a"]
    assert preferred.must_exclude == ["garlic"]
    assert with_preferred_slug(date(2025, 3, 10), None, "c").preferred_recipe_slugs == ["c"]


@pytest.mark.parametrize(
    ("raw", "canonical"),
    [
        ("Salmon Fillets", "salmon fillet"),
        ("  spaghetti ", "pasta"),
        ("Egg", "eggs"),
        ("quinoa", "quinoa"),
    ],
)
def test_canonicalize_ingredient_name(raw, canonical):
    assert canonicalize_ingredient_name(raw) == canonical


def test_unknown_ingredient_category_is_other():
    assert ingredient_category("dragon fruit") == "other"
