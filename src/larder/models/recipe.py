"""Recipe catalog models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IngredientRequirement(BaseModel):
    """One ingredient line of a recipe."""

    canonical_name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: str = Field(min_length=1)
    optional: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


class RecipeDefinition(BaseModel):
    """Static recipe definition from the household catalog."""

    slug: str = Field(min_length=1)
    name: str
    prep_time_minutes: int = Field(default=0, ge=0)
    cook_time_minutes: int = Field(default=0, ge=0)
    equipment_required: list[str] = Field(default_factory=list)
    ingredients: list[IngredientRequirement] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    instructions_md: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @property
    def total_minutes(self) -> int:
        return self.prep_time_minutes + self.cook_time_minutes

    def required_ingredient_names(self) -> list[str]:
        """Distinct non-optional ingredient names in recipe order."""
        names: list[str] = []
        for ingredient in self.ingredients:
            if ingredient.optional or ingredient.canonical_name in names:
                continue
            names.append(ingredient.canonical_name)
        return names
