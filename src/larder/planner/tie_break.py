"""Deterministic ranking of eligible candidates."""

from __future__ import annotations

from typing import Iterable, List, Optional

from larder.models.plan import EligibleRecipe

LOWEST_MISSING = "lowest_missing_ingredients"
HIGHEST_WASTE = "highest_waste_score"
SHORTEST_TIME = "shortest_cook_time"
ALPHABETICAL = "alphabetical_slug"


def ranking_key(candidate: EligibleRecipe) -> tuple:
    return (
        -candidate.scores.final,
        candidate.missing_count,
        -candidate.scores.waste,
        candidate.total_minutes,
        candidate.recipe,
    )


def rank_candidates(candidates: Iterable[EligibleRecipe]) -> List[EligibleRecipe]:
    return sorted(candidates, key=ranking_key)


def determine_tie_breaker(
    winner: EligibleRecipe, runner_up: Optional[EligibleRecipe]
) -> Optional[str]:
    """Name the first rule after final score that separated the top two.

    Returns ``None`` when there is no runner-up or the final scores differ.
    """
    if runner_up is None or winner.scores.final != runner_up.scores.final:
        return None
    if winner.missing_count != runner_up.missing_count:
        return LOWEST_MISSING
    if winner.scores.waste != runner_up.scores.waste:
        return HIGHEST_WASTE
    if winner.total_minutes != runner_up.total_minutes:
        return SHORTEST_TIME
    return ALPHABETICAL
