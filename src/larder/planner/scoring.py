"""Urgency and waste scoring for eligible recipe candidates."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional

from larder.models.inventory import InventoryLot
from larder.models.plan import Allocation, ScoreBreakdown, ScoringWeights

DEFAULT_WEIGHTS = ScoringWeights()


def compute_urgency(expiration_date: Optional[date], today: date) -> int:
    """Step function of days-to-expiry: expired -1, then 5, 3, 1, 0."""
    if expiration_date is None:
        return 0
    days = (expiration_date - today).days
    if days < 0:
        return -1
    if days <= 1:
        return 5
    if days <= 3:
        return 3
    if days <= 7:
        return 1
    return 0


def compute_waste_score(
    allocations: Iterable[Allocation],
    original_lots: Mapping[str, InventoryLot],
    today: date,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Sum urgency-weighted fractions of each lot's pre-allocation quantity."""
    score = 0.0
    for allocation in allocations:
        if allocation.consumed_unknown or allocation.consumed_quantity is None:
            continue
        lot = original_lots.get(allocation.lot_id)
        if lot is None or lot.quantity is None:
            continue
        urgency = compute_urgency(lot.expiration_date, today)
        if urgency <= 0:
            continue
        fraction = allocation.consumed_quantity / lot.quantity if lot.quantity > 0 else 0.0
        score += urgency * fraction * weights.waste_weight
    return score


def compute_score(
    waste: float,
    missing_count: int,
    total_minutes: int,
    variety_penalty: float = 0.0,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoreBreakdown:
    grocery_penalty = missing_count * weights.grocery_penalty_per_item
    time_penalty = total_minutes * weights.time_penalty_factor
    return ScoreBreakdown(
        waste=waste,
        grocery_penalty=grocery_penalty,
        time_penalty=time_penalty,
        variety_penalty=variety_penalty,
        final=waste - grocery_penalty - time_penalty - variety_penalty,
    )


__all__ = ["DEFAULT_WEIGHTS", "ScoringWeights", "compute_urgency", "compute_waste_score", "compute_score"]
