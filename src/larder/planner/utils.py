"""Shared helpers for planner modules."""

from __future__ import annotations

from typing import Dict

SYNONYMS: Dict[str, str] = {
    # vegetables
    "peas": "frozen peas",
    "frozen pea": "frozen peas",
    "green peas": "frozen peas",
    "tomatoes": "tomato",
    "cherry tomatoes": "tomato",
    "roma tomatoes": "tomato",
    "onions": "onion",
    "yellow onion": "onion",
    "white onion": "onion",
    "red onion": "onion",
    "garlic cloves": "garlic",
    "garlic clove": "garlic",
    "cucumbers": "cucumber",
    "lettuce leaves": "lettuce",
    "romaine lettuce": "lettuce",
    "iceberg lettuce": "lettuce",
    # proteins
    "chicken breasts": "chicken breast",
    "chicken thighs": "chicken breast",
    "salmon fillets": "salmon fillet",
    "salmon filet": "salmon fillet",
    "salmon filets": "salmon fillet",
    "egg": "eggs",
    "canned tuna fish": "canned tuna",
    "tuna": "canned tuna",
    "tuna fish": "canned tuna",
    # grains and pasta
    "spaghetti": "pasta",
    "penne": "pasta",
    "fusilli": "pasta",
    "macaroni": "pasta",
    "rice": "cooked rice",
    "white rice": "cooked rice",
    "jasmine rice": "cooked rice",
    "basmati rice": "cooked rice",
    "bread slices": "bread",
    "toast": "bread",
    "sliced bread": "bread",
    "tortillas": "tortilla wraps",
    "flour tortillas": "tortilla wraps",
    "wraps": "tortilla wraps",
    # canned goods
    "diced tomatoes": "canned tomatoes",
    "crushed tomatoes": "canned tomatoes",
    "tomato sauce": "canned tomatoes",
    "tinned tomatoes": "canned tomatoes",
    "chickpeas": "canned chickpeas",
    "garbanzo beans": "canned chickpeas",
    "black beans": "canned black beans",
    "lentils": "red lentils",
    # dairy and fats
    "olive oil extra virgin": "olive oil",
    "evoo": "olive oil",
    "cooking oil": "vegetable oil",
    "canola oil": "vegetable oil",
    "sunflower oil": "vegetable oil",
    "unsalted butter": "butter",
    "salted butter": "butter",
    "cheese": "shredded cheese",
    "cheddar": "shredded cheese",
    "mozzarella": "shredded cheese",
    "mayo": "mayonnaise",
    # condiments
    "soy": "soy sauce",
    "dried herbs": "dried basil",
    "basil": "dried basil",
    "stock": "vegetable broth",
    "veggie broth": "vegetable broth",
    "chicken broth": "vegetable broth",
    "broth": "vegetable broth",
    # frozen
    "mixed vegetables": "frozen mixed vegetables",
    "frozen vegetables": "frozen mixed vegetables",
    "frozen veggies": "frozen mixed vegetables",
    "mixed veggies": "frozen mixed vegetables",
    "frozen mixed veggies": "frozen mixed vegetables",
    # misc
    "scallions": "green onions",
    "spring onions": "green onions",
    "lemons": "lemon",
}

INGREDIENT_CATEGORIES: Dict[str, str] = {
    "salmon fillet": "protein",
    "chicken breast": "protein",
    "eggs": "protein",
    "canned tuna": "protein",
    "butter": "dairy",
    "shredded cheese": "dairy",
    "milk": "dairy",
    "cream": "dairy",
    "yogurt": "dairy",
    "tomato": "produce",
    "onion": "produce",
    "garlic": "produce",
    "lemon": "produce",
    "cucumber": "produce",
    "lettuce": "produce",
    "green onions": "produce",
    "bell pepper": "produce",
    "carrot": "produce",
    "celery": "produce",
    "mushrooms": "produce",
    "spinach": "produce",
    "broccoli": "produce",
    "zucchini": "produce",
    "frozen peas": "frozen",
    "frozen mixed vegetables": "frozen",
    "pasta": "pantry",
    "cooked rice": "pantry",
    "bread": "pantry",
    "tortilla wraps": "pantry",
    "canned tomatoes": "pantry",
    "canned chickpeas": "pantry",
    "canned black beans": "pantry",
    "red lentils": "pantry",
    "olive oil": "pantry",
    "vegetable oil": "pantry",
    "soy sauce": "pantry",
    "vegetable broth": "pantry",
    "mayonnaise": "pantry",
    "dried basil": "pantry",
    "salt": "pantry",
    "pepper": "pantry",
}


def normalize_name(value: str) -> str:
    """Normalize free-text names for comparison."""
    return " ".join(value.lower().split())


def canonicalize_ingredient_name(value: str) -> str:
    """Map a raw ingredient name onto the canonical name recipes use."""
    normalized = normalize_name(value)
    return SYNONYMS.get(normalized, normalized)


def ingredient_category(canonical_name: str) -> str:
    """Return the shopping category for a canonical ingredient name."""
    return INGREDIENT_CATEGORIES.get(canonical_name, "other")
