from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from services.scenario import ScenarioConfig
from settings import Settings, get_settings


@dataclass(frozen=True)
class CLIConfig:
    base_url: str
    database: str
    timeout: float
    scenario: ScenarioConfig


def scenario_config_from_settings(settings: Settings) -> ScenarioConfig:
    return ScenarioConfig(
        retry_attempts=settings.retry_attempts,
        upload_days=settings.upload_days,
        samples_per_day=settings.samples_per_day,
        upload_interval=settings.upload_interval,
        start_date=settings.start_date,
        compare_precision=settings.compare_precision,
        index_wait_timeout=settings.index_wait_timeout,
    )


def load_config(
    base_url: Optional[str] = None,
    database: Optional[str] = None,
    days: Optional[int] = None,
    samples_per_day: Optional[int] = None,
    interval: Optional[float] = None,
    attempts: Optional[int] = None,
    precision: Optional[int] = None,
) -> CLIConfig:
    """Merge command line overrides over the environment settings."""
    settings = get_settings()
    scenario = scenario_config_from_settings(settings)

    overrides = {
        "upload_days": days,
        "samples_per_day": samples_per_day,
        "upload_interval": interval,
        "retry_attempts": attempts,
        "compare_precision": precision,
    }
    applied = {key: value for key, value in overrides.items() if value is not None}
    if applied:
        scenario = replace(scenario, **applied)

    url = base_url or settings.database_url
    return CLIConfig(
        base_url=url.rstrip("/"),
        database=database or settings.database_name,
        timeout=settings.database_timeout,
        scenario=scenario,
    )
