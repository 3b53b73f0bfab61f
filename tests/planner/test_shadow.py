"""Shadow inventory projection tests."""

from __future__ import annotations

from datetime import date, timedelta

from larder.models.plan import Allocation
from larder.planner.shadow import (
    advance_shadow_inventory,
    apply_shadow_consumption,
    create_shadow_inventory,
    get_expiring_ingredients,
    shadow_snapshot,
)

TODAY = date(2025, 3, 10)


def test_create_computes_days_until_expiry(make_lot):
    shadow = create_shadow_inventory(
        [make_lot("a", "spinach", 100, "g", expires_in=2), make_lot("b", "salt", 1, "kg")],
        TODAY,
    )

    assert [item.expires_in_days for item in shadow] == [2, None]


def test_consumption_floors_at_zero_and_skips_unknown(make_lot):
    shadow = create_shadow_inventory(
        [make_lot("rice", "cooked rice", 100, "g"), make_lot("eggs", "eggs", None, "pcs")],
        TODAY,
    )

    apply_shadow_consumption(
        shadow,
        [
            Allocation(lot_id="rice", canonical_name="cooked rice", unit="g", consumed_quantity=150),
            Allocation(lot_id="eggs", canonical_name="eggs", unit="pcs", consumed_unknown=True),
            Allocation(lot_id="ghost", canonical_name="ghost", unit="g", consumed_quantity=1),
        ],
    )

    assert shadow[0].quantity == 0.0
    assert shadow[1].quantity is None


def test_expiring_ingredients_follow_advanced_date(make_lot):
    shadow = create_shadow_inventory(
        [
            make_lot("spinach", "spinach", 100, "g", expires_in=4),
            make_lot("milk", "milk", 1000, "ml", expires_in=-1),
        ],
        TODAY,
    )

    assert get_expiring_ingredients(shadow) == set()

    advance_shadow_inventory(shadow, TODAY + timedelta(days=2))

    assert get_expiring_ingredients(shadow) == {"spinach"}


def test_snapshot_drops_expired_and_depleted_lots(make_lot):
    shadow = create_shadow_inventory(
        [
            make_lot("spinach", "spinach", 100, "g", expires_in=1),
            make_lot("rice", "cooked rice", 100, "g"),
            make_lot("eggs", "eggs", None, "pcs"),
            make_lot("pasta", "pasta", 500, "g"),
        ],
        TODAY,
    )
    shadow[1].quantity = 0.0

    lots = shadow_snapshot(shadow, TODAY + timedelta(days=2))

    assert [lot.id for lot in lots] == ["eggs", "pasta"]
    assert lots[1].quantity == 500
