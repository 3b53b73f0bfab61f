"""Horizon date computation and per-date intent overrides."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from larder.errors import InvalidInput
from larder.models.request import Horizon, HorizonMode, IntentOverride

logger = logging.getLogger(__name__)

DEFAULT_MAX_HORIZON_DAYS = 14


def local_today(now: datetime, zone: ZoneInfo) -> date:
    return now.astimezone(zone).date()


def compute_planning_dates(
    horizon: Horizon,
    zone: ZoneInfo,
    now: datetime,
    max_days: int = DEFAULT_MAX_HORIZON_DAYS,
) -> List[date]:
    """Return the chronological dates a horizon covers."""
    today = local_today(now, zone)

    if horizon.mode is HorizonMode.NEXT_MEAL:
        return [today]

    if horizon.mode is HorizonMode.NEXT_N_DINNERS:
        count = horizon.n_dinners or 1
        if count > max_days:
            logger.warning("capping next_n_dinners from %s to %s", count, max_days)
            count = max_days
        return [today + timedelta(days=offset) for offset in range(count)]

    start, end = horizon.start_date_local, horizon.end_date_local
    if start is None or end is None:
        raise InvalidInput("date_range horizons require start_date_local and end_date_local")
    day_count = (end - start).days + 1
    if day_count < 1 or day_count > max_days:
        raise InvalidInput(
            f"date_range must cover between 1 and {max_days} days",
            {"start_date_local": start.isoformat(), "end_date_local": end.isoformat()},
        )
    return [start + timedelta(days=offset) for offset in range(day_count)]


def normalize_horizon(horizon: Horizon, dates: Sequence[date]) -> Horizon:
    """Canonical horizon for hashing and for the plan set record."""
    if horizon.mode is HorizonMode.NEXT_MEAL:
        return Horizon(mode=HorizonMode.NEXT_MEAL, start_date_local=dates[0])
    if horizon.mode is HorizonMode.NEXT_N_DINNERS:
        return Horizon(
            mode=HorizonMode.NEXT_N_DINNERS,
            n_dinners=len(dates),
            start_date_local=dates[0],
        )
    return Horizon(
        mode=HorizonMode.DATE_RANGE,
        start_date_local=dates[0],
        end_date_local=dates[-1],
    )


def intent_override_for(
    plan_date: date, overrides: Iterable[IntentOverride]
) -> Optional[IntentOverride]:
    for override in overrides:
        if override.date_local == plan_date:
            return override
    return None


def with_preferred_slug(
    plan_date: date, override: Optional[IntentOverride], slug: str
) -> IntentOverride:
    """Return an override that prefers ``slug`` ahead of any existing preferences."""
    if override is None:
        return IntentOverride(date_local=plan_date, preferred_recipe_slugs=[slug])
    preferred = [slug] + [item for item in override.preferred_recipe_slugs if item != slug]
    return override.model_copy(update={"preferred_recipe_slugs": preferred})
