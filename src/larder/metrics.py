"""Prometheus metrics definitions for Larder."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

PLAN_SETS_COMPUTED = Counter(
    "larder_plan_sets_computed_total",
    "Number of plan sets computed by the horizon orchestrator",
    ["mode"],
)

PLAN_SETS_REUSED = Counter(
    "larder_plan_sets_reused_total",
    "Number of planning requests answered with an existing proposed plan set",
)

PLANNING_FAILURES = Counter(
    "larder_planning_failures_total",
    "Number of planning runs that failed, by error code",
    ["code"],
)

STABILITY_DECISIONS = Counter(
    "larder_stability_decisions_total",
    "Stability band decisions recorded per planned date",
    ["decision"],
)

HORIZON_LATENCY = Histogram(
    "larder_horizon_planning_duration_seconds",
    "Wall-clock duration of a horizon planning computation",
)

__all__ = [
    "PLAN_SETS_COMPUTED",
    "PLAN_SETS_REUSED",
    "PLANNING_FAILURES",
    "STABILITY_DECISIONS",
    "HORIZON_LATENCY",
]
