"""Error kinds raised by the planning engine."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class PlanningError(Exception):
    """Base class for failures surfaced to the caller of the engine."""

    code = "PLANNING_ERROR"

    def __init__(self, message: str, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class InvalidInput(PlanningError):
    """Malformed or missing household, ids, or request fields."""

    code = "INVALID_INPUT"


class NoFeasibleTimeWindow(PlanningError):
    """The dinner window is empty or fully blocked."""

    code = "NO_FEASIBLE_TIME_WINDOW"

    def __init__(self, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__("No feasible time window available for cooking.", details)


class NoEligibleRecipe(PlanningError):
    """Every recipe failed a hard constraint."""

    code = "NO_ELIGIBLE_RECIPE"

    def __init__(self, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(
            "No eligible recipe fits the time window and equipment constraints.",
            details,
        )

    @property
    def rejection_reasons(self) -> list[dict[str, Any]]:
        return list(self.details.get("rejection_reasons", []))


class InvariantViolation(PlanningError):
    """An internal invariant broke; the computation cannot be trusted."""

    code = "INVARIANT_VIOLATION"


class PlanNotFound(PlanningError):
    """A referenced plan set or plan day does not exist."""

    code = "PLAN_NOT_FOUND"


__all__ = [
    "PlanningError",
    "InvalidInput",
    "NoFeasibleTimeWindow",
    "NoEligibleRecipe",
    "InvariantViolation",
    "PlanNotFound",
]
