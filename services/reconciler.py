"""Comparison of exported daily reports against expected aggregates."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from models.measurements import Measurement

MISSING_EXPECTED = "Missing Expected Results Indexes"
UNEXPECTED_ACTUAL = "Unexpected Results"

_EMPTY_LIST = "[]"


class Reconciler:
    """Runs the missing-expected and unexpected-actual checks.

    Membership uses full value equality of time, temperature and salinity.
    With ``precision`` set, both numeric fields are rounded to that many
    decimals before comparing.
    """

    def __init__(self, precision: Optional[int] = None) -> None:
        if precision is not None and precision < 0:
            raise ValueError("precision must be a non-negative number of decimals.")
        self.precision = precision

    def missing_expected(
        self, actual: Sequence[Measurement], expected: Sequence[Measurement]
    ) -> str:
        """Indexes of ``expected`` with no equal element in ``actual``, as ``"0,3,"``."""
        present = self._normalized(actual)
        result = ""
        for index, measurement in enumerate(self._normalized(expected)):
            if measurement not in present:
                result += f"{index},"
        return result

    def unexpected_actual(
        self, actual: Sequence[Measurement], expected: Sequence[Measurement]
    ) -> str:
        """Descriptors of ``actual`` entries with no equal element in ``expected``."""
        known = self._normalized(expected)
        result = "["
        for index, measurement in enumerate(self._normalized(actual)):
            if measurement not in known:
                result += f"{{index:{index},  measurement:{actual[index]}}},"
        return result + "]"

    def check(
        self, actual: Sequence[Measurement], expected: Sequence[Measurement]
    ) -> Dict[str, str]:
        """Map each check name to its finding, for non-empty findings only."""
        findings: Dict[str, str] = {}

        missing = self.missing_expected(actual, expected)
        if missing:
            findings[MISSING_EXPECTED] = missing

        unexpected = self.unexpected_actual(actual, expected)
        if unexpected != _EMPTY_LIST:
            findings[UNEXPECTED_ACTUAL] = unexpected

        return findings

    def _normalized(self, measurements: Sequence[Measurement]) -> list[Measurement]:
        if self.precision is None:
            return list(measurements)
        return [measurement.rounded(self.precision) for measurement in measurements]
