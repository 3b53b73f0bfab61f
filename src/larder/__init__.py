"""
Larder deterministic dinner-planning engine.

The package exposes the single-day planner, the multi-day horizon orchestrator and
the data contracts they exchange with the surrounding household system.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
