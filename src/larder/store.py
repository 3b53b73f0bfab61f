"""In-memory plan-set registry, consumption log and inventory commit boundary."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from larder.config import get_settings
from larder.errors import PlanNotFound
from larder.models.history import ConsumptionRecord
from larder.models.inventory import InventoryLot
from larder.models.plan import PlanDay, PlanSet, PlanSetStatus
from larder.models.recipe import RecipeDefinition
from larder.models.request import ExistingPlan

logger = logging.getLogger(__name__)


@dataclass
class StoredPlanSet:
    plan_set_id: str
    plan_set: PlanSet


class InMemoryPlanStore:
    """Plan sets and consumption records for any number of households.

    Not thread-safe; callers serialise access per household.
    """

    def __init__(self, history_limit: Optional[int] = None) -> None:
        if history_limit is None:
            history_limit = get_settings().history_limit
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self._history_limit = history_limit
        self._plan_sets: List[StoredPlanSet] = []
        self._consumption: Dict[str, List[ConsumptionRecord]] = {}
        self._ids = itertools.count(1)

    def save(self, plan_set: PlanSet) -> str:
        """Register a plan set, superseding any proposed set with the same key."""
        for stored in self._plan_sets:
            current = stored.plan_set
            if (
                current.household_id == plan_set.household_id
                and current.stable_key == plan_set.stable_key
                and current.status is PlanSetStatus.PROPOSED
            ):
                stored.plan_set = current.model_copy(update={"status": PlanSetStatus.OVERRIDDEN})
        plan_set_id = f"ps-{next(self._ids)}"
        self._plan_sets.append(StoredPlanSet(plan_set_id=plan_set_id, plan_set=plan_set))
        logger.debug(
            "stored plan set %s",
            plan_set_id,
            extra={"household_id": plan_set.household_id, "stable_key": plan_set.stable_key},
        )
        return plan_set_id

    def get(self, plan_set_id: str) -> PlanSet:
        return self._entry(plan_set_id).plan_set

    def find_proposed(self, household_id: str, stable_key: str) -> Optional[PlanSet]:
        for stored in reversed(self._plan_sets):
            plan_set = stored.plan_set
            if (
                plan_set.household_id == household_id
                and plan_set.stable_key == stable_key
                and plan_set.status is PlanSetStatus.PROPOSED
            ):
                return plan_set
        return None

    def latest_proposed(self, household_id: str) -> Optional[PlanSet]:
        for stored in reversed(self._plan_sets):
            plan_set = stored.plan_set
            if plan_set.household_id == household_id and plan_set.status is PlanSetStatus.PROPOSED:
                return plan_set
        return None

    def existing_plan(self, household_id: str) -> Optional[ExistingPlan]:
        """Per-date winners of the most recent proposed plan set, for stability banding."""
        latest = self.latest_proposed(household_id)
        return latest.to_existing_plan() if latest is not None else None

    def confirm(self, plan_set_id: str) -> PlanSet:
        stored = self._entry(plan_set_id)
        if stored.plan_set.status is not PlanSetStatus.PROPOSED:
            raise PlanNotFound(
                f"Plan set {plan_set_id} is not awaiting confirmation",
                {"plan_set_id": plan_set_id, "status": stored.plan_set.status.value},
            )
        stored.plan_set = stored.plan_set.model_copy(update={"status": PlanSetStatus.CONFIRMED})
        return stored.plan_set

    def invalidate(self, household_id: str, reason: str) -> int:
        """Mark every proposed set of a household as overridden."""
        count = 0
        for stored in self._plan_sets:
            plan_set = stored.plan_set
            if plan_set.household_id == household_id and plan_set.status is PlanSetStatus.PROPOSED:
                stored.plan_set = plan_set.model_copy(update={"status": PlanSetStatus.OVERRIDDEN})
                count += 1
        if count:
            logger.info(
                "invalidated %d proposed plan set(s): %s",
                count,
                reason,
                extra={"household_id": household_id},
            )
        return count

    def record_consumption(self, household_id: str, record: ConsumptionRecord) -> None:
        """Append a cooked meal, keeping only the newest ``history_limit`` records."""
        records = self._consumption.setdefault(household_id, [])
        records.append(record)
        del records[: -self._history_limit]

    def consumption_history(self, household_id: str, limit: int) -> List[ConsumptionRecord]:
        """Most recent records first, bounded by ``limit``."""
        records = self._consumption.get(household_id, [])
        return list(reversed(records))[:limit]

    def _entry(self, plan_set_id: str) -> StoredPlanSet:
        for stored in self._plan_sets:
            if stored.plan_set_id == plan_set_id:
                return stored
        raise PlanNotFound(f"Plan set {plan_set_id} not found", {"plan_set_id": plan_set_id})


@dataclass(frozen=True)
class CommitResult:
    lots: Tuple[InventoryLot, ...]
    drift: Tuple[str, ...] = field(default_factory=tuple)


def commit_plan_day(lots: Sequence[InventoryLot], plan_day: PlanDay) -> CommitResult:
    """Apply a cooked day's consumption to the real inventory.

    This is the persistence boundary: a decrement larger than what the lot
    now holds is clamped at zero, logged as a drift warning and returned in
    ``drift``. Unknown-quantity allocations leave lots untouched.
    """
    consumed: Dict[str, float] = {}
    for allocation in plan_day.inventory_to_consume:
        if allocation.consumed_unknown or allocation.consumed_quantity is None:
            continue
        consumed[allocation.lot_id] = consumed.get(allocation.lot_id, 0.0) + allocation.consumed_quantity

    updated: List[InventoryLot] = []
    drift: List[str] = []
    for lot in lots:
        amount = consumed.pop(lot.id, None)
        if amount is None or lot.quantity is None:
            updated.append(lot)
            continue
        remaining = lot.quantity - amount
        if remaining < 0:
            note = (
                f"lot {lot.id} ({lot.canonical_name}) held {lot.quantity:g} {lot.unit}, "
                f"plan consumed {amount:g}; clamped to 0"
            )
            logger.warning(note, extra={"plan_date": plan_day.date_local.isoformat()})
            drift.append(note)
            remaining = 0.0
        updated.append(lot.model_copy(update={"quantity": remaining}))

    for lot_id in consumed:
        note = f"lot {lot_id} no longer in inventory; consumption skipped"
        logger.warning(note, extra={"plan_date": plan_day.date_local.isoformat()})
        drift.append(note)

    return CommitResult(lots=tuple(updated), drift=tuple(drift))


def consumption_record_for_day(plan_day: PlanDay, recipe: RecipeDefinition) -> ConsumptionRecord:
    """Durable consumption record for a cooked plan day."""
    if recipe.slug != plan_day.recipe_slug:
        raise ValueError(f"recipe {recipe.slug} does not match plan day {plan_day.recipe_slug}")
    return ConsumptionRecord(
        date_local=plan_day.date_local,
        recipe_slug=recipe.slug,
        ingredients_used=recipe.required_ingredient_names(),
        tags=list(recipe.tags),
    )
