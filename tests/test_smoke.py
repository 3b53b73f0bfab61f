"""Basic smoke tests for the package surface."""

import larder
from larder.models import PlanSet
from larder.planner.orchestrator import compute_plan_set


def test_package_exposes_version() -> None:
    assert isinstance(larder.__version__, str)


def test_compute_plan_set_returns_plan_set(plan_request, providers) -> None:
    plan_set = compute_plan_set(plan_request, providers)

    assert isinstance(plan_set, PlanSet)
    assert len(plan_set.days) == 3
