"""Expiry-aware FIFO allocation of recipe requirements onto inventory lots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from larder.errors import InvariantViolation
from larder.models.inventory import InventoryLot, QuantityConfidence
from larder.models.plan import Allocation, MissingIngredient
from larder.models.recipe import IngredientRequirement

_CONFIDENCE_RANK = {QuantityConfidence.EXACT: 0, QuantityConfidence.ESTIMATE: 1}


class LotArena:
    """Immutable id-indexed view of lots and their remaining quantities.

    Allocation never mutates an arena; it returns a new one carrying the
    decremented quantities. Lots keep their snapshot order.
    """

    __slots__ = ("_lots", "_order", "_remaining")

    def __init__(
        self,
        lots: Sequence[InventoryLot],
        remaining: Optional[Mapping[str, Optional[float]]] = None,
    ) -> None:
        self._lots: Dict[str, InventoryLot] = {}
        order: List[str] = []
        for lot in lots:
            if lot.id in self._lots:
                raise InvariantViolation(f"duplicate lot id '{lot.id}' in snapshot", {"lot_id": lot.id})
            self._lots[lot.id] = lot
            order.append(lot.id)
        self._order = tuple(order)
        base = {lot_id: self._lots[lot_id].quantity for lot_id in self._order}
        if remaining:
            base.update(remaining)
        self._remaining = base

    @property
    def lots(self) -> Tuple[InventoryLot, ...]:
        return tuple(self._lots[lot_id] for lot_id in self._order)

    def lot(self, lot_id: str) -> InventoryLot:
        return self._lots[lot_id]

    def remaining(self, lot_id: str) -> Optional[float]:
        return self._remaining[lot_id]

    def matching(self, canonical_name: str, unit: str) -> List[InventoryLot]:
        return [
            lot
            for lot in self.lots
            if lot.canonical_name == canonical_name and lot.unit == unit
        ]

    def with_remaining(self, updates: Mapping[str, float]) -> "LotArena":
        """Return a new arena with the given remaining quantities."""
        for lot_id, quantity in updates.items():
            if quantity < 0:
                raise InvariantViolation(
                    f"lot '{lot_id}' would go negative ({quantity})",
                    {"lot_id": lot_id, "remaining": quantity},
                )
        merged = dict(self._remaining)
        merged.update(updates)
        return LotArena(self.lots, merged)


@dataclass(frozen=True)
class AllocationResult:
    allocations: Tuple[Allocation, ...] = field(default_factory=tuple)
    missing: Tuple[MissingIngredient, ...] = field(default_factory=tuple)
    arena: Optional[LotArena] = None


def fifo_sort_key(lot: InventoryLot) -> tuple:
    """Earliest expiry (nulls last), exact before estimate, oldest first, then id."""
    return (
        lot.expiration_date is None,
        lot.expiration_date or date.max,
        _CONFIDENCE_RANK.get(lot.quantity_confidence, 2),
        lot.created_at,
        lot.id,
    )


def allocate_requirement(
    requirement: IngredientRequirement, arena: LotArena
) -> Tuple[List[Allocation], Optional[MissingIngredient], LotArena]:
    """Allocate one requirement, returning its allocations, residual and the new arena."""
    candidates = arena.matching(requirement.canonical_name, requirement.unit)

    for lot in candidates:
        if lot.is_unknown_quantity:
            allocation = Allocation(
                lot_id=lot.id,
                canonical_name=lot.canonical_name,
                unit=lot.unit,
                consumed_quantity=None,
                consumed_unknown=True,
            )
            return [allocation], None, arena

    known = [
        lot
        for lot in candidates
        if (arena.remaining(lot.id) or 0.0) > 0
    ]
    known.sort(key=fifo_sort_key)

    allocations: List[Allocation] = []
    updates: Dict[str, float] = {}
    needed = requirement.quantity
    for lot in known:
        if needed <= 0:
            break
        available = arena.remaining(lot.id) or 0.0
        take = min(needed, available)
        allocations.append(
            Allocation(
                lot_id=lot.id,
                canonical_name=lot.canonical_name,
                unit=lot.unit,
                consumed_quantity=take,
            )
        )
        updates[lot.id] = available - take
        needed -= take

    if needed < 0:
        raise InvariantViolation(
            f"allocation overshot requirement for '{requirement.canonical_name}'",
            {"canonical_name": requirement.canonical_name, "residual": needed},
        )

    missing = None
    if needed > 0:
        missing = MissingIngredient(
            canonical_name=requirement.canonical_name,
            quantity=needed,
            unit=requirement.unit,
        )
    return allocations, missing, arena.with_remaining(updates)


def allocate(requirements: Iterable[IngredientRequirement], arena: LotArena) -> AllocationResult:
    """Allocate every non-optional requirement in recipe order."""
    allocations: List[Allocation] = []
    missing: List[MissingIngredient] = []
    for requirement in requirements:
        if requirement.optional:
            continue
        lines, residual, arena = allocate_requirement(requirement, arena)
        allocations.extend(lines)
        if residual is not None:
            missing.append(residual)
    return AllocationResult(allocations=tuple(allocations), missing=tuple(missing), arena=arena)
