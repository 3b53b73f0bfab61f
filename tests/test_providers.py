"""Planning bundle parsing and provider tests."""

from __future__ import annotations

import json
from datetime import date, timedelta
from typing import Any, Dict

import pytest

from larder.errors import InvalidInput
from larder.providers import PlanningProviders, load_bundle, parse_bundle


def _bundle_payload(**kwargs) -> Dict[str, Any]:
    defaults: Dict[str, Any] = {
        "household": {"timezone": "UTC", "has_oven": True, "has_stovetop": True},
        "recipes": [
            {
                "slug": "salmon-rice",
                "name": "Salmon Rice",
                "prep_time_minutes": 10,
                "cook_time_minutes": 20,
                "equipment_required": ["oven"],
                "ingredients": [
                    {"canonical_name": "Salmon Fillets", "quantity": 2, "unit": "pcs"},
                    {"canonical_name": "rice", "quantity": 200, "unit": "g"},
                ],
                "tags": ["asian"],
            }
        ],
        "inventory": [
            {
                "id": "lot-1",
                "canonical_name": "salmon filet",
                "quantity": 2,
                "unit": "pcs",
                "expiration_date": "2025-03-11",
                "created_at": "2025-03-01T09:00:00+00:00",
            },
            {
                "id": "lot-2",
                "canonical_name": "Egg",
                "unit": "pcs",
                "created_at": "2025-03-01T09:00:00+00:00",
            },
        ],
        "history": [
            {"date_local": "2025-03-08", "recipe_slug": "omelette", "ingredients_used": ["EGG"]}
        ],
        "request": {
            "household_id": "hh-1",
            "now": "2025-03-10T12:00:00+00:00",
            "intent_overrides": [{"date_local": "2025-03-10", "must_include": ["Salmon Fillets"]}],
        },
    }
    defaults.update(kwargs)
    return defaults


def test_bundle_canonicalises_names():
    bundle = parse_bundle(_bundle_payload())

    assert [item.canonical_name for item in bundle.recipes[0].ingredients] == [
        "salmon fillet",
        "cooked rice",
    ]
    assert [lot.canonical_name for lot in bundle.inventory] == ["salmon fillet", "eggs"]
    assert bundle.inventory[1].is_unknown_quantity
    assert bundle.history[0].ingredients_used == ["eggs"]
    assert bundle.request.intent_overrides[0].must_include == ["salmon fillet"]


def test_bundle_providers_answer_only_for_request_household():
    providers = parse_bundle(_bundle_payload()).providers()

    assert isinstance(providers, PlanningProviders)
    assert providers.household("hh-1") is not None
    assert providers.household("hh-2") is None
    assert len(providers.inventory("hh-1")) == 2
    assert providers.inventory("hh-2") == []
    assert len(providers.history("hh-1", 0)) == 0
    assert providers.existing_plan("hh-1") is None


def test_bundle_history_keeps_most_recent_records():
    first = date(2025, 1, 1)
    history = [
        {"date_local": (first + timedelta(days=offset)).isoformat(), "recipe_slug": f"meal-{offset}"}
        for offset in range(60)
    ]
    providers = parse_bundle(_bundle_payload(history=history)).providers()

    recent = providers.history("hh-1", 50)

    assert len(recent) == 50
    assert recent[0].date_local == date(2025, 3, 1)
    assert recent[-1].date_local == date(2025, 1, 11)


def test_invalid_bundle_reports_validation_errors():
    payload = _bundle_payload(household={"timezone": "Mars/Olympus"})

    with pytest.raises(InvalidInput) as excinfo:
        parse_bundle(payload)

    assert excinfo.value.code == "INVALID_INPUT"
    assert excinfo.value.details["errors"]


def test_naive_request_time_rejected():
    payload = _bundle_payload()
    payload["request"] = dict(payload["request"], now="2025-03-10T12:00:00")

    with pytest.raises(InvalidInput):
        parse_bundle(payload)


def test_known_lot_requires_quantity():
    payload = _bundle_payload()
    payload["inventory"] = [dict(payload["inventory"][0], quantity=None, quantity_confidence="exact")]

    with pytest.raises(InvalidInput):
        parse_bundle(payload)


def test_load_bundle_from_file(tmp_path):
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps(_bundle_payload()), encoding="utf-8")

    bundle = load_bundle(path)

    assert bundle.request.household_id == "hh-1"


@pytest.mark.parametrize("content", [None, "{not json", "[1, 2]"])
def test_load_bundle_errors(tmp_path, content):
    path = tmp_path / "bundle.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")

    with pytest.raises(InvalidInput):
        load_bundle(path)
