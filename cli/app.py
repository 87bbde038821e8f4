from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from cli.config import load_config
from cli.render import render_result
from logging_config import configure_logging
from services.scenario import reconcile_reports, run_scenario

app = typer.Typer(
    help="Marine research scenario: daily map-reduce reports checked end to end.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level.upper() if log_level else None)


@app.command("run")
def run_command(
    base_url: Optional[str] = typer.Option(
        None,
        "--database-url",
        "-u",
        help="Database server URL (defaults to DATABASE_URL env or http://localhost:8080).",
    ),
    database: Optional[str] = typer.Option(
        None, "--database", "-d", help="Database name (defaults to DATABASE_NAME env)."
    ),
    days: Optional[int] = typer.Option(None, "--days", min=1, help="Number of daily batches to upload."),
    samples_per_day: Optional[int] = typer.Option(
        None, "--samples-per-day", min=1, help="Samples generated for every day."
    ),
    interval: Optional[float] = typer.Option(
        None, "--interval", min=0.0, help="Seconds to pause between daily uploads."
    ),
    attempts: Optional[int] = typer.Option(
        None, "--attempts", min=1, help="Attempt budget for every database call."
    ),
    precision: Optional[int] = typer.Option(
        None, "--precision", min=0, help="Decimals compared when reconciling averages."
    ),
    show_events: bool = typer.Option(
        False, "--events/--no-events", help="Print every reported event."
    ),
) -> None:
    """Upload measurements, export the daily report and verify it."""
    config = load_config(
        base_url=base_url,
        database=database,
        days=days,
        samples_per_day=samples_per_day,
        interval=interval,
        attempts=attempts,
        precision=precision,
    )
    typer.echo(f"Running scenario against {config.base_url}/databases/{config.database} ...")
    try:
        result = asyncio.run(
            run_scenario(
                config.base_url,
                config.database,
                config.scenario,
                timeout=config.timeout,
            )
        )
    except Exception as exc:  # noqa: BLE001 - surfaced as a CLI failure
        typer.secho(f"Scenario aborted: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    render_result(result, show_events=show_events)
    if not result.success:
        raise typer.Exit(code=1)


@app.command("reconcile")
def reconcile_command(
    expected: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Ingestion CSV (Time,Temperature,Salinity)."
    ),
    actual: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Exported daily report CSV."
    ),
    precision: Optional[int] = typer.Option(
        None, "--precision", min=0, help="Decimals compared when reconciling averages."
    ),
) -> None:
    """Compare raw samples against an exported daily report without a database."""
    try:
        result = reconcile_reports(
            expected.read_text(encoding="utf-8"),
            actual.read_text(encoding="utf-8"),
            precision=precision,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    render_result(result)
    if not result.success:
        raise typer.Exit(code=1)
