"""Recency profiles and variety penalties for repeated ingredients and cuisines."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import AbstractSet, Dict, Iterable, List, Optional, Tuple

from larder.models.history import ConsumptionRecord, VarietyRule
from larder.models.plan import RecencySummary, VarietyPenaltyApplied
from larder.models.recipe import RecipeDefinition

DEFAULT_CATEGORY = "other"
CONSECUTIVE_CUISINE_PENALTY = 8.0
CUISINE_TAGS = frozenset(
    {
        "italian",
        "mexican",
        "asian",
        "chinese",
        "japanese",
        "indian",
        "thai",
        "mediterranean",
        "american",
        "french",
        "greek",
    }
)

VARIETY_RULES: Tuple[VarietyRule, ...] = (
    VarietyRule(
        category="pantry_legumes",
        ingredients=(
            "canned chickpeas",
            "chickpeas",
            "red lentils",
            "lentils",
            "canned black beans",
            "black beans",
            "canned kidney beans",
            "kidney beans",
        ),
        avoid_repeat_days=7,
        penalty_per_occurrence=15,
    ),
    VarietyRule(
        category="proteins",
        ingredients=(
            "salmon fillet",
            "chicken breast",
            "beef",
            "ground beef",
            "tofu",
            "shrimp",
            "pork",
            "eggs",
        ),
        avoid_repeat_days=4,
        penalty_per_occurrence=10,
    ),
    VarietyRule(
        category="produce",
        ingredients=(
            "tomato",
            "onion",
            "garlic",
            "lemon",
            "cucumber",
            "lettuce",
            "green onions",
            "bell pepper",
            "carrot",
            "celery",
            "mushrooms",
            "spinach",
            "broccoli",
            "zucchini",
        ),
        avoid_repeat_days=0,
        penalty_per_occurrence=0,
    ),
    VarietyRule(
        category="pantry_staples",
        ingredients=(
            "olive oil",
            "vegetable oil",
            "butter",
            "soy sauce",
            "vegetable broth",
            "salt",
            "pepper",
            "dried basil",
        ),
        avoid_repeat_days=0,
        penalty_per_occurrence=0,
    ),
    VarietyRule(
        category=DEFAULT_CATEGORY,
        ingredients=(),
        avoid_repeat_days=3,
        penalty_per_occurrence=5,
    ),
)


@dataclass
class UsageEntry:
    last_date: date
    count: int = 0


@dataclass
class RecencyProfile:
    """Most recent use and occurrence count per ingredient and per tag."""

    days_looked_back: int
    reference_date: date
    meals_found: int = 0
    ingredients: Dict[str, UsageEntry] = field(default_factory=dict)
    tags: Dict[str, UsageEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class VarietyPenaltyResult:
    total: float = 0.0
    penalties: Tuple[VarietyPenaltyApplied, ...] = field(default_factory=tuple)


def variety_category(ingredient: str, rules: Iterable[VarietyRule] = VARIETY_RULES) -> str:
    for rule in rules:
        if ingredient in rule.ingredients:
            return rule.category
    return DEFAULT_CATEGORY


def variety_rule(category: str, rules: Iterable[VarietyRule] = VARIETY_RULES) -> Optional[VarietyRule]:
    for rule in rules:
        if rule.category == category:
            return rule
    return None


def is_cuisine_tag(tag: str) -> bool:
    return "cuisine" in tag or tag.lower() in CUISINE_TAGS


def _track(index: Dict[str, UsageEntry], key: str, when: date) -> None:
    entry = index.get(key)
    if entry is None:
        index[key] = UsageEntry(last_date=when, count=1)
        return
    entry.count += 1
    if when > entry.last_date:
        entry.last_date = when


def build_recency_profile(
    records: Iterable[ConsumptionRecord], window_days: int, reference_date: date
) -> RecencyProfile:
    """Profile the records dated between ``window_days`` before and on the reference date."""
    profile = RecencyProfile(days_looked_back=window_days, reference_date=reference_date)
    for record in records:
        days_before = (reference_date - record.date_local).days
        if days_before < 0 or days_before > window_days:
            continue
        profile.meals_found += 1
        for ingredient in dict.fromkeys(record.ingredients_used):
            _track(profile.ingredients, ingredient, record.date_local)
        for tag in dict.fromkeys(record.tags):
            _track(profile.tags, tag, record.date_local)
    return profile


def calculate_variety_penalties(
    ingredients: Iterable[str],
    tags: Iterable[str],
    profile: RecencyProfile,
    planning_date: date,
    expiring: AbstractSet[str] = frozenset(),
    rules: Tuple[VarietyRule, ...] = VARIETY_RULES,
) -> VarietyPenaltyResult:
    """Penalise recently used ingredients and same-cuisine meals on consecutive days.

    Ingredients in ``expiring`` are never penalised: using up food that is
    about to spoil takes precedence over variety.
    """
    penalties: List[VarietyPenaltyApplied] = []

    for ingredient in dict.fromkeys(ingredients):
        usage = profile.ingredients.get(ingredient)
        if usage is None or ingredient in expiring:
            continue
        rule = variety_rule(variety_category(ingredient, rules), rules)
        if rule is None or rule.avoid_repeat_days == 0:
            continue
        days_since = (planning_date - usage.last_date).days
        if days_since < rule.avoid_repeat_days:
            penalties.append(
                VarietyPenaltyApplied(
                    ingredient=ingredient,
                    last_consumed_date=usage.last_date,
                    days_since=days_since,
                    penalty_points=rule.penalty_per_occurrence * usage.count,
                    reason=f"{ingredient} consumed {days_since} days ago",
                )
            )

    for tag in dict.fromkeys(tags):
        if not is_cuisine_tag(tag):
            continue
        usage = profile.tags.get(tag)
        if usage is None:
            continue
        days_since = (planning_date - usage.last_date).days
        if days_since == 1:
            penalties.append(
                VarietyPenaltyApplied(
                    ingredient=f"tag:{tag}",
                    last_consumed_date=usage.last_date,
                    days_since=days_since,
                    penalty_points=CONSECUTIVE_CUISINE_PENALTY,
                    reason=f"Consecutive {tag} meals",
                )
            )

    total = sum(penalty.penalty_points for penalty in penalties)
    return VarietyPenaltyResult(total=total, penalties=tuple(penalties))


def summarise_profile(profile: RecencyProfile) -> RecencySummary:
    return RecencySummary(
        days_looked_back=profile.days_looked_back,
        meals_found=profile.meals_found,
        ingredients_consumed=sorted(profile.ingredients),
    )


def planned_consumption_record(recipe: RecipeDefinition, date_local: date) -> ConsumptionRecord:
    """Record a chosen recipe as consumed so later days of a horizon see it."""
    return ConsumptionRecord(
        date_local=date_local,
        recipe_slug=recipe.slug,
        ingredients_used=recipe.required_ingredient_names(),
        tags=list(recipe.tags),
    )
