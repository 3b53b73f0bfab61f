"""Consolidated grocery list built from per-day missing ingredients."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from larder.models.plan import GroceryItem, GroceryList, MissingIngredient

from .utils import ingredient_category

CATEGORY_ORDER = ("produce", "protein", "dairy", "frozen", "pantry", "other")


def display_name(canonical_name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in canonical_name.split(" "))


def format_quantity(quantity: float, unit: str) -> str:
    if unit == "g" and quantity >= 1000:
        return f"{_trim(quantity / 1000)} kg"
    if unit == "ml" and quantity >= 1000:
        return f"{_trim(quantity / 1000)} L"
    return f"{_trim(quantity)} {unit}"


def _trim(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def summarise(items: List[GroceryItem]) -> str:
    if not items:
        return "No items needed."
    if len(items) == 1:
        item = items[0]
        return f"Pick up {item.display_name} ({format_quantity(item.total_quantity, item.unit)})."
    if len(items) == 2:
        return f"Pick up {items[0].display_name} and {items[1].display_name}."
    remaining = len(items) - 2
    return (
        f"Pick up {items[0].display_name}, {items[1].display_name} and "
        f"{remaining} more item{'s' if remaining > 1 else ''}."
    )


def consolidate_grocery_list(missing: Iterable[MissingIngredient]) -> GroceryList:
    """Deduplicate by name and unit, sum quantities, and sort by category then name."""
    totals: Dict[Tuple[str, str], float] = {}
    for entry in missing:
        key = (entry.canonical_name, entry.unit)
        totals[key] = totals.get(key, 0.0) + entry.quantity

    items = [
        GroceryItem(
            canonical_name=name,
            display_name=display_name(name),
            total_quantity=quantity,
            unit=unit,
            category=ingredient_category(name),
        )
        for (name, unit), quantity in totals.items()
    ]
    items.sort(
        key=lambda item: (CATEGORY_ORDER.index(item.category), item.display_name.lower(), item.unit)
    )
    return GroceryList(items=items, summary=summarise(items))
