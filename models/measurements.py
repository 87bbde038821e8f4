"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def day_key(value: datetime) -> datetime:
    """Truncate a timestamp to midnight UTC of its day.

    Naive timestamps are taken to be UTC. Both the expected aggregation and the
    exported report are keyed through this function.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True, slots=True)
class Measurement:
    """A single temperature/salinity sample taken at ``time``."""

    time: datetime
    temperature: float
    salinity: float

    def rounded(self, precision: int) -> Measurement:
        return Measurement(
            time=self.time,
            temperature=round(self.temperature, precision),
            salinity=round(self.salinity, precision),
        )

    def __str__(self) -> str:
        return (
            f"{{time: {self.time.isoformat()}, "
            f"temperature: {self.temperature}, salinity: {self.salinity}}}"
        )
