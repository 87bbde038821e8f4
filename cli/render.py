from __future__ import annotations

from typing import Any, Iterable

import typer

from models.events import EventType, ScenarioResult

_EVENT_COLORS = {
    EventType.error: typer.colors.YELLOW,
    EventType.failure: typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_result(result: ScenarioResult, show_events: bool = False) -> None:
    echo_heading("Scenario Result")
    echo_key_values(
        [
            ("name", result.name),
            ("success", result.success),
            ("expected_count", result.expected_count),
            ("actual_count", result.actual_count),
        ]
    )
    typer.secho(
        result.message,
        fg=typer.colors.GREEN if result.success else typer.colors.RED,
    )

    typer.echo()
    echo_heading("Findings")
    if result.findings:
        for check, finding in result.findings.items():
            typer.echo(f"  - {check}: {finding}")
    else:
        typer.echo("No findings recorded.")

    if not show_events:
        return

    typer.echo()
    echo_heading("Events")
    for event in result.events:
        line = f"  - [{event.type.value}] {event.message}"
        if event.exception:
            line = f"{line} ({event.exception})"
        typer.secho(line, fg=_EVENT_COLORS.get(event.type))
