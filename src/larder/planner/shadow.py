"""Disposable inventory copy that projects consumption across a horizon."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Set

from larder.models.inventory import InventoryLot, QuantityConfidence
from larder.models.plan import Allocation

EXPIRY_URGENCY_THRESHOLD_DAYS = 2


@dataclass
class ShadowInventoryItem:
    id: str
    canonical_name: str
    quantity: Optional[float]
    quantity_confidence: QuantityConfidence
    unit: str
    expiration_date: Optional[date]
    created_at: datetime
    expires_in_days: Optional[int] = None

    def to_lot(self) -> InventoryLot:
        return InventoryLot(
            id=self.id,
            canonical_name=self.canonical_name,
            quantity=self.quantity,
            quantity_confidence=self.quantity_confidence,
            unit=self.unit,
            expiration_date=self.expiration_date,
            created_at=self.created_at,
        )


def _days_until(expiration_date: Optional[date], reference_date: date) -> Optional[int]:
    if expiration_date is None:
        return None
    return (expiration_date - reference_date).days


def create_shadow_inventory(
    lots: Iterable[InventoryLot], reference_date: date
) -> List[ShadowInventoryItem]:
    return [
        ShadowInventoryItem(
            id=lot.id,
            canonical_name=lot.canonical_name,
            quantity=lot.quantity,
            quantity_confidence=lot.quantity_confidence,
            unit=lot.unit,
            expiration_date=lot.expiration_date,
            created_at=lot.created_at,
            expires_in_days=_days_until(lot.expiration_date, reference_date),
        )
        for lot in lots
    ]


def advance_shadow_inventory(items: Iterable[ShadowInventoryItem], reference_date: date) -> None:
    """Re-base ``expires_in_days`` on the day about to be planned."""
    for item in items:
        item.expires_in_days = _days_until(item.expiration_date, reference_date)


def apply_shadow_consumption(
    items: List[ShadowInventoryItem], allocations: Iterable[Allocation]
) -> None:
    """Decrement shadow quantities, floored at zero; unknown allocations are no-ops."""
    by_id = {item.id: item for item in items}
    for allocation in allocations:
        item = by_id.get(allocation.lot_id)
        if item is None or item.quantity is None or allocation.consumed_quantity is None:
            continue
        item.quantity = max(0.0, item.quantity - allocation.consumed_quantity)


def get_expiring_ingredients(items: Iterable[ShadowInventoryItem]) -> Set[str]:
    return {
        item.canonical_name
        for item in items
        if item.expires_in_days is not None
        and 0 <= item.expires_in_days <= EXPIRY_URGENCY_THRESHOLD_DAYS
    }


def shadow_snapshot(items: Iterable[ShadowInventoryItem], plan_date: date) -> List[InventoryLot]:
    """Project the shadow copy into lots usable on plan_date.

    Expired lots and depleted known-quantity lots are dropped.
    """
    lots: List[InventoryLot] = []
    for item in items:
        if item.expiration_date is not None and item.expiration_date < plan_date:
            continue
        if item.quantity_confidence is not QuantityConfidence.UNKNOWN and not (item.quantity or 0) > 0:
            continue
        lots.append(item.to_lot())
    return lots
