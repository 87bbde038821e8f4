"""Synthetic measurement generation."""

from __future__ import annotations

import random
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, List, Optional

from models.measurements import Measurement


class MeasurementGenerator:
    """Produces a fixed number of random samples per day.

    Temperatures fall in ``[10.0, 29.9]`` and salinities in ``[3.5, 3.8]``,
    both with one decimal.
    """

    def __init__(self, samples_per_day: int = 4, rng: Optional[random.Random] = None) -> None:
        if samples_per_day < 1:
            raise ValueError("samples_per_day must be at least 1.")
        self.samples_per_day = samples_per_day
        self._rng = rng or random.Random()

    def daily(self, day: datetime) -> List[Measurement]:
        return [
            Measurement(
                time=day,
                temperature=self._rng.randint(100, 299) / 10.0,
                salinity=self._rng.randint(35, 38) / 10.0,
            )
            for _ in range(self.samples_per_day)
        ]


def upload_days(start: date, count: int) -> Iterator[datetime]:
    """Yield ``count`` consecutive UTC midnights, starting the day after ``start``."""
    origin = datetime.combine(start, time.min, tzinfo=timezone.utc)
    for offset in range(1, count + 1):
        yield origin + timedelta(days=offset)
