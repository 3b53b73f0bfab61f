"""Shared pytest fixtures for the Larder test suite."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import Callable, Dict, List, Optional

import pytest

from larder.config import get_settings
from larder.models.history import ConsumptionRecord
from larder.models.household import HouseholdConfig
from larder.models.inventory import InventoryLot
from larder.models.recipe import IngredientRequirement, RecipeDefinition
from larder.models.request import PlanRequest
from larder.providers import PlanningProviders

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()
CREATED = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

LARDER_ENV_VARS = (
    "LARDER_LOG_LEVEL",
    "LARDER_LOG_FORMAT",
    "LARDER_LEAD_TIME_MINUTES",
    "LARDER_VARIETY_WINDOW_DAYS",
    "LARDER_STABILITY_BAND_PCT",
    "LARDER_MAX_HORIZON_DAYS",
    "LARDER_HISTORY_LIMIT",
)


def build_lot(
    lot_id: str,
    name: str,
    quantity: Optional[float],
    unit: str,
    expires_in: Optional[int] = None,
    confidence: Optional[str] = None,
    created_offset_minutes: int = 0,
) -> InventoryLot:
    payload: Dict[str, object] = {
        "id": lot_id,
        "canonical_name": name,
        "quantity": quantity,
        "unit": unit,
        "expiration_date": TODAY + timedelta(days=expires_in) if expires_in is not None else None,
        "created_at": CREATED + timedelta(minutes=created_offset_minutes),
    }
    if confidence is not None:
        payload["quantity_confidence"] = confidence
    return InventoryLot.model_validate(payload)


def build_recipe(
    slug: str,
    ingredients: List[tuple],
    prep: int = 5,
    cook: int = 10,
    equipment: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
) -> RecipeDefinition:
    return RecipeDefinition(
        slug=slug,
        name=slug.replace("-", " ").title(),
        prep_time_minutes=prep,
        cook_time_minutes=cook,
        equipment_required=equipment or ["stovetop"],
        ingredients=[
            IngredientRequirement(
                canonical_name=item[0],
                quantity=item[1],
                unit=item[2],
                optional=item[3] if len(item) > 3 else False,
            )
            for item in ingredients
        ],
        tags=tags or [],
    )


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Ensure each test starts from default settings."""

    for name in LARDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def household() -> HouseholdConfig:
    return HouseholdConfig(
        timezone="UTC",
        dinner_earliest_local=time(17, 30),
        dinner_latest_local=time(20, 0),
        has_oven=True,
        has_stovetop=True,
        has_blender=False,
    )


@pytest.fixture()
def make_lot() -> Callable[..., InventoryLot]:
    return build_lot


@pytest.fixture()
def make_recipe() -> Callable[..., RecipeDefinition]:
    return build_recipe


@pytest.fixture()
def catalog() -> List[RecipeDefinition]:
    return [
        build_recipe(
            "salmon-rice",
            [
                ("salmon fillet", 2, "pcs"),
                ("cooked rice", 200, "g"),
                ("olive oil", 10, "ml"),
                ("lemon", 1, "pcs", True),
            ],
            prep=10,
            cook=20,
            equipment=["oven"],
            tags=["asian"],
        ),
        build_recipe(
            "chickpea-curry",
            [
                ("canned chickpeas", 400, "g"),
                ("canned tomatoes", 400, "g"),
                ("onion", 1, "pcs"),
            ],
            prep=10,
            cook=25,
            tags=["indian"],
        ),
        build_recipe(
            "pasta-pomodoro",
            [
                ("pasta", 200, "g"),
                ("canned tomatoes", 400, "g"),
                ("garlic", 2, "pcs"),
            ],
            prep=5,
            cook=15,
            tags=["italian"],
        ),
        build_recipe(
            "veggie-omelette",
            [("eggs", 3, "pcs"), ("bell pepper", 1, "pcs")],
            prep=5,
            cook=10,
        ),
        build_recipe(
            "smoothie-bowl",
            [("frozen mixed vegetables", 100, "g")],
            prep=5,
            cook=0,
            equipment=["blender"],
        ),
    ]


@pytest.fixture()
def pantry() -> List[InventoryLot]:
    return [
        build_lot("lot-salmon", "salmon fillet", 2, "pcs", expires_in=1),
        build_lot("lot-rice", "cooked rice", 500, "g", expires_in=20),
        build_lot("lot-oil", "olive oil", 500, "ml"),
        build_lot("lot-chickpeas", "canned chickpeas", 800, "g", expires_in=200),
        build_lot("lot-tomatoes", "canned tomatoes", 1200, "g", expires_in=300),
        build_lot("lot-onion", "onion", 3, "pcs", expires_in=10),
        build_lot("lot-pasta", "pasta", 1000, "g", expires_in=365),
        build_lot("lot-garlic", "garlic", 10, "pcs", expires_in=14),
        build_lot("lot-eggs", "eggs", None, "pcs"),
        build_lot("lot-pepper", "bell pepper", 2, "pcs", expires_in=3),
    ]


@pytest.fixture()
def history() -> List[ConsumptionRecord]:
    return []


@pytest.fixture()
def providers(household, catalog, pantry, history) -> PlanningProviders:
    return PlanningProviders(
        household=lambda household_id: household if household_id == "hh-1" else None,
        recipes=lambda: list(catalog),
        inventory=lambda household_id: list(pantry),
        history=lambda household_id, limit: list(history)[:limit],
    )


@pytest.fixture()
def plan_request() -> PlanRequest:
    return PlanRequest.model_validate(
        {
            "household_id": "hh-1",
            "now": NOW.isoformat(),
            "horizon": {"mode": "next_n_dinners", "n_dinners": 3},
        }
    )


__all__ = ["NOW", "TODAY", "CREATED", "build_lot", "build_recipe"]
