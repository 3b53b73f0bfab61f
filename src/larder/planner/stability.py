"""Idempotency keys and the stability band that suppresses plan churn."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import AbstractSet, Any, Callable, Iterable, List, Optional, Sequence, Tuple

from larder.models.inventory import CalendarBlock, InventoryLot
from larder.models.plan import PlanDay, StabilityDecision
from larder.models.request import ExistingPlanDay, Horizon, IntentOverride, PlanOptions

logger = logging.getLogger(__name__)

INVENTORY_DIGEST_LENGTH = 16
CALENDAR_DIGEST_LENGTH = 16
STABLE_KEY_LENGTH = 32

ReplanWithPreferred = Callable[[str], PlanDay]


def _sha256(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def _row_order(row: dict) -> str:
    return json.dumps(row, sort_keys=True, separators=(",", ":"))


def compute_inventory_digest(lots: Iterable[InventoryLot]) -> str:
    """Order-independent digest over id, name, quantity, unit and expiry of every lot."""
    rows = [
        {
            "id": lot.id,
            "name": lot.canonical_name,
            "qty": lot.quantity,
            "unit": lot.unit,
            "exp": lot.expiration_date.isoformat() if lot.expiration_date else None,
        }
        for lot in lots
    ]
    return _sha256(sorted(rows, key=_row_order))[:INVENTORY_DIGEST_LENGTH]


def compute_calendar_digest(blocks: Iterable[CalendarBlock]) -> str:
    """Order-independent digest over start, end, source and title of every block."""
    rows = [
        {
            "starts_at": block.starts_at.isoformat(),
            "ends_at": block.ends_at.isoformat(),
            "source": block.source,
            "title": block.title,
        }
        for block in blocks
    ]
    return _sha256(sorted(rows, key=_row_order))[:CALENDAR_DIGEST_LENGTH]


def _canonical_overrides(overrides: Iterable[IntentOverride]) -> List[dict]:
    rows = [
        {
            "date_local": override.date_local.isoformat(),
            "must_include": sorted(override.must_include),
            "must_exclude": sorted(override.must_exclude),
            "preferred_recipe_slugs": list(override.preferred_recipe_slugs),
        }
        for override in overrides
    ]
    return sorted(rows, key=_row_order)


def _canonical_options(options: PlanOptions) -> dict:
    return {
        "exclude_recipe_slugs": sorted(set(options.exclude_recipe_slugs)),
        "variety_window_days": options.variety_window_days,
        "stability_band_pct": options.stability_band_pct,
    }


def stable_key_for_request(
    household_id: str,
    horizon: Horizon,
    overrides: Sequence[IntentOverride],
    options: PlanOptions,
    inventory_digest: str,
    calendar_digest: str,
) -> str:
    """Hash the canonical request inputs into the plan set's idempotency key.

    ``force_recompute`` is not part of the key: a forced recompute of
    identical inputs resolves to the same key.
    """
    payload = {
        "household_id": household_id,
        "horizon": horizon.model_dump(mode="json"),
        "intent_overrides": _canonical_overrides(overrides),
        "options": _canonical_options(options),
        "inventory_digest": inventory_digest,
        "calendar_digest": calendar_digest,
    }
    return _sha256(payload)[:STABLE_KEY_LENGTH]


@dataclass(frozen=True)
class BandEvaluation:
    threshold: float
    within_band: bool


def evaluate_stability_band(old_score: float, new_score: float, band_pct: float) -> BandEvaluation:
    threshold = old_score * (1 + band_pct / 100)
    return BandEvaluation(threshold=threshold, within_band=new_score <= threshold)


def apply_stability_band(
    plan_date: date,
    existing: ExistingPlanDay,
    fresh: PlanDay,
    band_pct: float,
    excluded_slugs: AbstractSet[str],
    replan: ReplanWithPreferred,
) -> Tuple[PlanDay, StabilityDecision]:
    """Keep the previously proposed recipe unless the new winner clears the band.

    ``replan`` re-runs the day with the given slug preferred; its plan day
    (and trace) replaces ``fresh`` when the old recipe is kept.
    """
    new_score = fresh.final_score
    band = evaluate_stability_band(existing.final_score, new_score, band_pct)

    def decide(decision: str, kept: Optional[str], reason: str) -> StabilityDecision:
        return StabilityDecision(
            date_local=plan_date,
            decision=decision,
            kept_recipe=kept,
            new_best_recipe=fresh.recipe_slug,
            old_recipe=existing.recipe_slug,
            old_score=existing.final_score,
            new_score=new_score,
            threshold=band.threshold,
            band_pct=band_pct,
            within_band=band.within_band,
            reason=reason,
        )

    if fresh.recipe_slug == existing.recipe_slug:
        return fresh, decide(
            "kept",
            existing.recipe_slug,
            f"Recipe {existing.recipe_slug} is still the best choice",
        )

    if not band.within_band:
        return fresh, decide(
            "changed",
            None,
            f"New score {new_score:.1f} exceeds threshold {band.threshold:.1f}",
        )

    if existing.recipe_slug in excluded_slugs:
        return fresh, decide(
            "changed",
            None,
            f"Old recipe {existing.recipe_slug} is excluded, using new recipe",
        )

    rerun = replan(existing.recipe_slug)
    if rerun.recipe_slug != existing.recipe_slug:
        logger.info(
            "previous recipe %s is no longer eligible",
            existing.recipe_slug,
            extra={"plan_date": plan_date.isoformat()},
        )
        return fresh, decide(
            "changed",
            None,
            f"Old recipe {existing.recipe_slug} is no longer eligible, using new recipe",
        )

    return rerun, decide(
        "kept",
        existing.recipe_slug,
        (
            f"New score {new_score:.1f} not significantly better than existing "
            f"{existing.final_score:.1f} (threshold {band.threshold:.1f})"
        ),
    )
