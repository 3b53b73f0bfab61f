"""Dinner window resolution against household calendar blocks."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from larder.errors import NoFeasibleTimeWindow
from larder.models.household import HouseholdConfig
from larder.models.inventory import CalendarBlock
from larder.models.plan import BusyBlockTrace, TimeConstraints, TimeInterval

logger = logging.getLogger(__name__)

DEFAULT_LEAD_TIME_MINUTES = 15


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, truncated."""
    seconds = (end - start).total_seconds()
    return int(seconds // 60) if seconds >= 0 else -int(-seconds // 60)


def make_interval(start: datetime, end: datetime) -> TimeInterval:
    return TimeInterval(start=start, end=end, minutes=max(minutes_between(start, end), 0))


def dinner_bounds(plan_date: date, household: HouseholdConfig) -> tuple[datetime, datetime]:
    """Earliest and latest dinner moments on plan_date in the household timezone."""
    zone = household.zone
    earliest = datetime.combine(plan_date, household.dinner_earliest_local, tzinfo=zone)
    latest = datetime.combine(plan_date, household.dinner_latest_local, tzinfo=zone)
    return earliest, latest


def resolve_dinner_window(
    plan_date: date,
    household: HouseholdConfig,
    now: datetime,
    lead_time_minutes: int = DEFAULT_LEAD_TIME_MINUTES,
) -> TimeInterval:
    """Return the search window ``[max(now + lead, earliest), latest]``.

    Raises ``NoFeasibleTimeWindow`` when the window is empty, which is the
    case once the lead-adjusted current moment passes the latest bound.
    """
    earliest, latest = dinner_bounds(plan_date, household)
    lead_adjusted = now.astimezone(household.zone) + timedelta(minutes=lead_time_minutes)
    start = lead_adjusted if lead_adjusted > earliest else earliest
    if start >= latest:
        raise NoFeasibleTimeWindow(
            {
                "reason": "dinner_window_passed",
                "plan_date": plan_date.isoformat(),
                "window_start": start.isoformat(),
                "window_end": latest.isoformat(),
            }
        )
    return make_interval(start, latest)


def blocks_overlapping(
    blocks: Iterable[CalendarBlock], start: datetime, end: datetime
) -> List[CalendarBlock]:
    """Blocks intersecting ``[start, end)``, sorted by start time."""
    relevant = [block for block in blocks if block.starts_at < end and block.ends_at > start]
    return sorted(relevant, key=lambda block: (block.starts_at, block.ends_at))


def subtract_blocks(window: TimeInterval, blocks: Sequence[CalendarBlock]) -> List[TimeInterval]:
    """Subtract busy blocks from the window, dropping zero-minute fragments."""
    zone = window.start.tzinfo
    free: List[TimeInterval] = []
    cursor = window.start

    for block in sorted(blocks, key=lambda item: item.starts_at):
        if block.ends_at <= window.start or block.starts_at >= window.end:
            continue
        block_start = max(block.starts_at.astimezone(zone), window.start)
        block_end = min(block.ends_at.astimezone(zone), window.end)

        if cursor < block_start:
            gap = make_interval(cursor, block_start)
            if gap.minutes > 0:
                free.append(gap)
        if block_end > cursor:
            cursor = block_end

    if cursor < window.end:
        tail = make_interval(cursor, window.end)
        if tail.minutes > 0:
            free.append(tail)
    return free


def pick_longest_then_earliest(intervals: Sequence[TimeInterval]) -> Optional[TimeInterval]:
    if not intervals:
        return None
    return min(intervals, key=lambda interval: (-interval.minutes, interval.start))


def resolve_time_constraints(
    plan_date: date,
    household: HouseholdConfig,
    now: datetime,
    blocks: Sequence[CalendarBlock],
    lead_time_minutes: int = DEFAULT_LEAD_TIME_MINUTES,
) -> TimeConstraints:
    """Resolve the day's window, its free intervals and the selected interval."""
    window = resolve_dinner_window(plan_date, household, now, lead_time_minutes)
    relevant = blocks_overlapping(blocks, window.start, window.end)
    free = subtract_blocks(window, relevant)
    selected = pick_longest_then_earliest(free)
    if selected is None:
        logger.info(
            "calendar blocks cover the dinner window",
            extra={"plan_date": plan_date.isoformat()},
        )
        raise NoFeasibleTimeWindow(
            {
                "reason": "calendar_blocks_cover_window",
                "plan_date": plan_date.isoformat(),
                "window_start": window.start.isoformat(),
                "window_end": window.end.isoformat(),
                "blocks": len(relevant),
            }
        )
    return TimeConstraints(
        dinner_window=window,
        busy_blocks=[
            BusyBlockTrace(
                start=block.starts_at,
                end=block.ends_at,
                source=block.source,
                title=block.title,
            )
            for block in relevant
        ],
        free_intervals=free,
        selected_interval=selected,
        available_minutes=selected.minutes,
    )
