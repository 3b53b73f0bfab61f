"""Rule-based explanations attached to each day's winner."""

from __future__ import annotations

from datetime import date
from typing import List, Mapping, Optional

from larder.models.inventory import InventoryLot
from larder.models.plan import EligibleRecipe

from .scoring import compute_urgency

URGENT_THRESHOLD = 3


def generate_why(
    winner: EligibleRecipe,
    original_lots: Mapping[str, InventoryLot],
    today: date,
    available_minutes: int,
    preferred_override: Optional[str] = None,
) -> List[str]:
    reasons: List[str] = []

    if preferred_override is not None:
        reasons.append(f"Preferred recipe {preferred_override} requested for this date")

    urgent: List[str] = []
    for allocation in winner.allocations:
        lot = original_lots.get(allocation.lot_id)
        if lot is None:
            continue
        urgency = compute_urgency(lot.expiration_date, today)
        if urgency >= URGENT_THRESHOLD:
            urgent.append(f"{lot.canonical_name} (urgency={urgency})")
    if urgent:
        reasons.append(f"Uses items expiring soon: {', '.join(urgent)}")

    missing = winner.missing_count
    if missing == 0:
        reasons.append("All required ingredients available in inventory")
    else:
        reasons.append(f"Requires {missing} missing ingredient{'s' if missing > 1 else ''}")

    reasons.append(
        f"Fits in your available window ({winner.total_minutes} min recipe, "
        f"{available_minutes} min available)"
    )

    if winner.variety_penalties:
        reasons.append(
            f"Variety penalty of {winner.scores.variety_penalty:g} points applied for recent repeats"
        )
    return reasons
