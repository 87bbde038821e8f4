"""End-to-end orchestration of the daily report scenario."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar
from uuid import uuid4

import httpx

from database.client import DocumentDatabaseClient, Sleep
from models.events import ScenarioResult
from models.indexes import daily_report_index
from models.measurements import Measurement
from services.aggregator import Aggregator
from services.csv_codec import (
    read_daily_report_csv,
    read_measurements_csv,
    write_measurements_csv,
)
from services.generator import MeasurementGenerator, upload_days
from services.reconciler import Reconciler
from services.reporter import Reporter
from services.retry import RetryPredicate, retry, retry_all

T = TypeVar("T")

SCENARIO_NAME = "MarineResearch"

SUCCESS_MESSAGE = "Results were received as expected"
FAILURE_MESSAGE = "Results were _not_ received as expected"


@dataclass(frozen=True)
class ScenarioConfig:
    retry_attempts: int = 5
    upload_days: int = 120
    samples_per_day: int = 4
    upload_interval: float = 60.0
    start_date: date = date(2019, 1, 1)
    compare_precision: Optional[int] = None
    index_wait_timeout: float = 60.0
    poll_interval: float = 0.5

    def __post_init__(self) -> None:
        if self.retry_attempts < 1:
            raise ValueError("retry_attempts must be at least 1.")
        if self.upload_days < 1:
            raise ValueError("upload_days must be at least 1.")
        if self.samples_per_day < 1:
            raise ValueError("samples_per_day must be at least 1.")
        if self.upload_interval < 0 or self.index_wait_timeout < 0:
            raise ValueError("Delays and timeouts cannot be negative.")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive.")


@dataclass(frozen=True)
class ScenarioNames:
    collection: str
    output_collection: str
    index_name: str

    @classmethod
    def unique(cls, suffix: Optional[str] = None) -> ScenarioNames:
        token = suffix or uuid4().hex
        return cls(
            collection=f"C{token}",
            output_collection=f"DailyReport{token}",
            index_name=f"Index{token}",
        )


def daily_report_query(output_collection: str) -> str:
    return (
        f"from {output_collection} as c "
        "select { Day: c.Day, Temperature: c.Temperature, Salinity: c.Salinity }"
    )


class MarineResearchScenario:
    """Uploads daily sensor batches and verifies the map-reduce daily report."""

    def __init__(
        self,
        client: DocumentDatabaseClient,
        config: ScenarioConfig,
        reporter: Optional[Reporter] = None,
        generator: Optional[MeasurementGenerator] = None,
        sleep: Sleep = asyncio.sleep,
        is_retryable: RetryPredicate = retry_all,
        names: Optional[ScenarioNames] = None,
    ) -> None:
        self.client = client
        self.config = config
        self.reporter = reporter or Reporter(SCENARIO_NAME)
        self.generator = generator or MeasurementGenerator(config.samples_per_day)
        self.sleep = sleep
        self.is_retryable = is_retryable
        self.names = names or ScenarioNames.unique()
        self.aggregator = Aggregator()
        self.reconciler = Reconciler(config.compare_precision)

    async def run(self) -> ScenarioResult:
        await self.create_index()
        samples = await self.upload_measurements()
        await self.wait_for_index()
        actual = read_daily_report_csv(await self.export_daily_report())
        expected = self.aggregator.group_by_time(samples)
        return build_result(
            self.reporter, actual=actual, expected=expected, reconciler=self.reconciler
        )

    async def create_index(self) -> None:
        definition = daily_report_index(
            self.names.index_name, self.names.collection, self.names.output_collection
        )
        await self._retry(lambda: self.client.put_index(definition), "add index")

    async def upload_measurements(self) -> List[Measurement]:
        samples: List[Measurement] = []
        for day in upload_days(self.config.start_date, self.config.upload_days):
            daily = self.generator.daily(day)
            samples.extend(daily)
            payload = write_measurements_csv(daily)

            async def import_batch(payload: bytes = payload) -> int:
                operation_id = await self.client.next_operation_id()
                await self.client.import_csv(self.names.collection, payload, operation_id)
                await self.client.wait_for_operation(
                    operation_id,
                    interval=self.config.poll_interval,
                    sleep=self.sleep,
                )
                return operation_id

            operation_id = await self._retry(import_batch, "import csv")
            self.reporter.info(
                "Uploaded daily measurements",
                collection=self.names.collection,
                day=day.date().isoformat(),
                operation_id=operation_id,
            )
            await self.sleep(self.config.upload_interval)
        return samples

    async def wait_for_index(self) -> None:
        await self._retry(
            lambda: self.client.wait_for_non_stale_index(
                self.names.index_name,
                interval=self.config.poll_interval,
                timeout=self.config.index_wait_timeout,
                sleep=self.sleep,
            ),
            "wait for index",
        )

    async def export_daily_report(self) -> str:
        query = daily_report_query(self.names.output_collection)
        return await self._retry(
            lambda: self.client.stream_query_csv(query), "export daily result to csv"
        )

    async def _retry(self, action: Callable[[], Awaitable[T]], description: str) -> T:
        return await retry(
            self.config.retry_attempts,
            action,
            description,
            self.reporter,
            is_retryable=self.is_retryable,
        )


def build_result(
    reporter: Reporter,
    actual: Sequence[Measurement],
    expected: Sequence[Measurement],
    reconciler: Optional[Reconciler] = None,
) -> ScenarioResult:
    """Reconcile ``actual`` against aggregated ``expected`` and report the outcome."""
    findings = (reconciler or Reconciler()).check(actual, expected)
    if findings:
        reporter.failure(FAILURE_MESSAGE, findings=findings)
        message = FAILURE_MESSAGE
    else:
        reporter.success(SUCCESS_MESSAGE)
        message = SUCCESS_MESSAGE
    return ScenarioResult(
        name=reporter.name,
        success=not findings,
        message=message,
        findings=findings,
        expected_count=len(expected),
        actual_count=len(actual),
        events=list(reporter.events),
    )


def reconcile_reports(
    expected_csv: str, actual_csv: str, precision: Optional[int] = None
) -> ScenarioResult:
    """Compare raw ingestion samples against an exported daily report, offline."""
    reporter = Reporter(SCENARIO_NAME)
    expected = Aggregator().group_by_time(read_measurements_csv(expected_csv))
    actual = read_daily_report_csv(actual_csv)
    return build_result(reporter, actual, expected, Reconciler(precision))


async def run_scenario(
    base_url: str,
    database: str,
    config: ScenarioConfig,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleep = asyncio.sleep,
) -> ScenarioResult:
    """Open a database client, run the scenario once and close the client."""
    async with DocumentDatabaseClient(
        base_url, database, timeout=timeout, transport=transport
    ) as client:
        scenario = MarineResearchScenario(client, config, sleep=sleep)
        return await scenario.run()
