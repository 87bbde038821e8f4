"""CSV encoding of ingestion batches and decoding of exported reports."""

from __future__ import annotations

import csv
import io
import re
from datetime import datetime, timezone
from typing import Iterable, List

from models.measurements import Measurement, day_key

INGESTION_HEADER = ("Time", "Temperature", "Salinity")

_FRACTION_PATTERN = re.compile(r"(\.\d{6})\d+")


def write_measurements_csv(measurements: Iterable[Measurement]) -> bytes:
    """Encode samples in the layout the database CSV import expects."""
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(INGESTION_HEADER)
    for measurement in measurements:
        writer.writerow(
            (
                measurement.time.isoformat(),
                repr(measurement.temperature),
                repr(measurement.salinity),
            )
        )
    return buffer.getvalue().encode("utf-8")


def read_measurements_csv(text: str) -> List[Measurement]:
    """Decode an ingestion CSV back into raw samples."""
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValueError("CSV file is missing a header row.")

    normalized = {name.lower().strip(): name for name in reader.fieldnames}
    required = {column.lower() for column in INGESTION_HEADER}
    missing = sorted(required - normalized.keys())
    if missing:
        raise ValueError(f"CSV missing required columns: {', '.join(missing)}")

    measurements: List[Measurement] = []
    for row_number, row in enumerate(reader, start=2):
        measurements.append(
            _build_measurement(
                row_number,
                row.get(normalized["time"]),
                row.get(normalized["temperature"]),
                row.get(normalized["salinity"]),
            )
        )
    return measurements


def read_daily_report_csv(text: str) -> List[Measurement]:
    """Decode an exported daily report.

    The first row is a header. Every other row is ``(ignored), Day,
    Temperature, Salinity`` and days are keyed the same way the expected
    aggregation keys them.
    """
    reader = csv.reader(io.StringIO(text))
    next(reader, None)

    measurements: List[Measurement] = []
    for row_number, row in enumerate(reader, start=2):
        if not any(cell.strip() for cell in row):
            continue
        if len(row) < 4:
            raise ValueError(f"Row {row_number} has {len(row)} columns, expected 4.")
        measurement = _build_measurement(row_number, row[1], row[2], row[3])
        measurements.append(
            Measurement(
                time=day_key(measurement.time),
                temperature=measurement.temperature,
                salinity=measurement.salinity,
            )
        )
    return measurements


def parse_timestamp(value: str) -> datetime:
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    candidate = _FRACTION_PATTERN.sub(r"\1", candidate)

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def _build_measurement(
    row_number: int,
    time_raw: str | None,
    temperature_raw: str | None,
    salinity_raw: str | None,
) -> Measurement:
    try:
        time = parse_timestamp(time_raw or "")
    except ValueError as exc:
        raise ValueError(f"Row {row_number}: invalid timestamp {time_raw!r}.") from exc

    values = []
    for column, raw in (("temperature", temperature_raw), ("salinity", salinity_raw)):
        try:
            values.append(float((raw or "").strip()))
        except ValueError as exc:
            raise ValueError(f"Row {row_number}: invalid {column} {raw!r}.") from exc

    return Measurement(time=time, temperature=values[0], salinity=values[1])
