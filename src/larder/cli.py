"""Command-line interface for Larder."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, NoReturn

import typer

from larder.config import get_settings
from larder.errors import PlanningError
from larder.logging_utils import configure_logging
from larder.planner.orchestrator import (
    compute_plan_set,
    load_inputs,
    plan_tonight,
    request_stable_key,
)
from larder.providers import PlanningBundle, load_bundle

app = typer.Typer(help="Deterministic dinner-planning commands.")


@app.callback()
def _setup() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)


def _emit(payload: Dict[str, Any], pretty: bool) -> None:
    if pretty:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    else:
        typer.echo(json.dumps(payload))


def _load(bundle_path: Path) -> PlanningBundle:
    try:
        return load_bundle(bundle_path)
    except PlanningError as exc:
        _fail(exc)


def _fail(exc: PlanningError) -> NoReturn:
    typer.echo(json.dumps(exc.to_payload(), default=str), err=True)
    raise typer.Exit(code=1)


@app.command()
def plan(
    bundle_path: Path = typer.Argument(..., help="Planning bundle JSON file."),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """
    Compute the plan set for the bundle's request and horizon.
    """
    bundle = _load(bundle_path)
    try:
        plan_set = compute_plan_set(bundle.request, bundle.providers())
    except PlanningError as exc:
        _fail(exc)
    _emit(plan_set.model_dump(mode="json"), pretty)


@app.command()
def tonight(
    bundle_path: Path = typer.Argument(..., help="Planning bundle JSON file."),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """Plan only the next dinner for the bundle's household."""
    bundle = _load(bundle_path)
    try:
        day = plan_tonight(bundle.request, bundle.providers())
    except PlanningError as exc:
        _fail(exc)
    _emit(day.model_dump(mode="json"), pretty)


@app.command("stable-key")
def stable_key(
    bundle_path: Path = typer.Argument(..., help="Planning bundle JSON file."),
) -> None:
    """Print the idempotency key of the bundle's request."""
    bundle = _load(bundle_path)
    try:
        inputs = load_inputs(bundle.request, bundle.providers(), include_existing_plan=False)
        key = request_stable_key(bundle.request, inputs)
    except PlanningError as exc:
        _fail(exc)
    typer.echo(key)


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
