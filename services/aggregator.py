"""Aggregation logic for measurements."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List

from models.measurements import Measurement, day_key


@dataclass
class _Bucket:
    count: int = 0
    temperature_total: float = 0.0
    salinity_total: float = 0.0


class Aggregator:
    """Groups measurements by a time key and averages each group."""

    def __init__(self, key: Callable[[datetime], datetime] = day_key) -> None:
        self._key = key

    def group_by_time(self, measurements: Iterable[Measurement]) -> List[Measurement]:
        buckets: Dict[datetime, _Bucket] = {}

        for measurement in measurements:
            bucket = buckets.setdefault(self._key(measurement.time), _Bucket())
            bucket.count += 1
            bucket.temperature_total += measurement.temperature
            bucket.salinity_total += measurement.salinity

        return [
            Measurement(
                time=key,
                temperature=bucket.temperature_total / bucket.count,
                salinity=bucket.salinity_total / bucket.count,
            )
            for key, bucket in buckets.items()
        ]
