from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Optional


_DATABASE_URL_ENV = "DATABASE_URL"
_DATABASE_NAME_ENV = "DATABASE_NAME"
_DATABASE_TIMEOUT_ENV = "DATABASE_TIMEOUT"
_RETRY_ATTEMPTS_ENV = "SCENARIO_RETRY_ATTEMPTS"
_UPLOAD_DAYS_ENV = "SCENARIO_UPLOAD_DAYS"
_SAMPLES_PER_DAY_ENV = "SCENARIO_SAMPLES_PER_DAY"
_UPLOAD_INTERVAL_ENV = "SCENARIO_UPLOAD_INTERVAL"
_START_DATE_ENV = "SCENARIO_START_DATE"
_PRECISION_ENV = "SCENARIO_COMPARE_PRECISION"
_INDEX_WAIT_TIMEOUT_ENV = "SCENARIO_INDEX_WAIT_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    database_url: str
    database_name: str
    database_timeout: float
    retry_attempts: int
    upload_days: int
    samples_per_day: int
    upload_interval: float
    start_date: date
    compare_precision: Optional[int]
    index_wait_timeout: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_non_negative_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _read_precision(default: Optional[int]) -> Optional[int]:
    value = os.getenv(_PRECISION_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _read_date(name: str, default: date) -> date:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=_read_str_env(_DATABASE_URL_ENV, "http://localhost:8080").rstrip("/"),
        database_name=_read_str_env(_DATABASE_NAME_ENV, "MarineResearch"),
        database_timeout=_read_non_negative_float(_DATABASE_TIMEOUT_ENV, 30.0) or 30.0,
        retry_attempts=_read_positive_int(_RETRY_ATTEMPTS_ENV, 5),
        upload_days=_read_positive_int(_UPLOAD_DAYS_ENV, 120),
        samples_per_day=_read_positive_int(_SAMPLES_PER_DAY_ENV, 4),
        upload_interval=_read_non_negative_float(_UPLOAD_INTERVAL_ENV, 60.0),
        start_date=_read_date(_START_DATE_ENV, date(2019, 1, 1)),
        compare_precision=_read_precision(None),
        index_wait_timeout=_read_non_negative_float(_INDEX_WAIT_TIMEOUT_ENV, 60.0),
        log_level=_read_log_level("INFO"),
    )
