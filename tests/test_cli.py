from __future__ import annotations

from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from cli.app import app
from models.events import EventType, ScenarioEvent, ScenarioResult
from services.reconciler import MISSING_EXPECTED


class StubRunner:
    def __init__(self, result: ScenarioResult | None = None, error: Exception | None = None) -> None:
        self.result = result or ScenarioResult(
            name="MarineResearch",
            success=True,
            message="Results were received as expected",
            expected_count=3,
            actual_count=3,
            events=[
                ScenarioEvent(type=EventType.info, message="Try to add index (1 of 5)"),
                ScenarioEvent(type=EventType.success, message="Succeed to add index"),
            ],
        )
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, base_url, database, config, timeout=30.0):
        self.calls.append(
            {"base_url": base_url, "database": database, "config": config, "timeout": timeout}
        )
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture()
def runner(monkeypatch) -> CliRunner:
    monkeypatch.setattr("cli.app.configure_logging", lambda level=None: None)
    return CliRunner()


def _install_stub(monkeypatch, stub: StubRunner) -> None:
    monkeypatch.setattr("cli.app.run_scenario", stub)


def test_run_uses_settings_by_default(monkeypatch, runner: CliRunner) -> None:
    monkeypatch.setenv("DATABASE_URL", "http://raven.local:8080/")
    monkeypatch.setenv("SCENARIO_UPLOAD_DAYS", "7")
    stub = StubRunner()
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["run"])

    assert result.exit_code == 0
    assert "Results were received as expected" in result.stdout
    assert "No findings recorded." in result.stdout
    call = stub.calls[0]
    assert call["base_url"] == "http://raven.local:8080"
    assert call["database"] == "MarineResearch"
    assert call["config"].upload_days == 7


def test_run_options_override_settings(monkeypatch, runner: CliRunner) -> None:
    stub = StubRunner()
    _install_stub(monkeypatch, stub)

    result = runner.invoke(
        app,
        [
            "run",
            "-u", "http://other:9000",
            "-d", "Oceans",
            "--days", "2",
            "--samples-per-day", "8",
            "--interval", "0",
            "--attempts", "3",
            "--precision", "4",
            "--events",
        ],
    )

    assert result.exit_code == 0
    assert "Succeed to add index" in result.stdout
    config = stub.calls[0]["config"]
    assert stub.calls[0]["database"] == "Oceans"
    assert (config.upload_days, config.samples_per_day) == (2, 8)
    assert (config.upload_interval, config.retry_attempts, config.compare_precision) == (0.0, 3, 4)


def test_run_exits_non_zero_on_findings(monkeypatch, runner: CliRunner) -> None:
    stub = StubRunner(
        ScenarioResult(
            name="MarineResearch",
            success=False,
            message="Results were _not_ received as expected",
            findings={MISSING_EXPECTED: "0,"},
            expected_count=1,
            actual_count=0,
        )
    )
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["run"])

    assert result.exit_code == 1
    assert f"{MISSING_EXPECTED}: 0," in result.stdout


def test_run_reports_aborted_scenario(monkeypatch, runner: CliRunner) -> None:
    _install_stub(monkeypatch, StubRunner(error=RuntimeError("database unreachable")))

    result = runner.invoke(app, ["run"])

    assert result.exit_code == 1
    assert "Scenario aborted: database unreachable" in result.output


def test_reconcile_command(runner: CliRunner, tmp_path) -> None:
    expected = tmp_path / "expected.csv"
    actual = tmp_path / "actual.csv"
    expected.write_text(
        "Time,Temperature,Salinity\n"
        "2019-01-02T00:00:00+00:00,10.0,3.6\n"
        "2019-01-02T00:00:00+00:00,20.0,3.6\n"
    )
    actual.write_text("@id,Day,Temperature,Salinity\nr/1,2019-01-02T00:00:00,15.0,3.6\n")

    result = runner.invoke(app, ["reconcile", str(expected), str(actual)])

    assert result.exit_code == 0
    assert "success: True" in result.stdout


def test_reconcile_command_mismatch(runner: CliRunner, tmp_path) -> None:
    expected = tmp_path / "expected.csv"
    actual = tmp_path / "actual.csv"
    expected.write_text("Time,Temperature,Salinity\n2019-01-02T00:00:00+00:00,10.0,3.6\n")
    actual.write_text("@id,Day,Temperature,Salinity\n")

    result = runner.invoke(app, ["reconcile", str(expected), str(actual)])

    assert result.exit_code == 1
    assert MISSING_EXPECTED in result.stdout


def test_reconcile_command_rejects_bad_csv(runner: CliRunner, tmp_path) -> None:
    expected = tmp_path / "expected.csv"
    actual = tmp_path / "actual.csv"
    expected.write_text("Time,Temperature\n2019-01-02,10.0\n")
    actual.write_text("@id,Day,Temperature,Salinity\n")

    result = runner.invoke(app, ["reconcile", str(expected), str(actual)])

    assert result.exit_code == 2
