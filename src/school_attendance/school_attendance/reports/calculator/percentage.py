from __future__ import annotations

import math

from .base import PercentageCalculator


def _half_up(value: float, digits: int = 0) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


class RecordedDaysPercentage(PercentageCalculator):
    """Share of recorded days marked present: "93.3%", or "0%" with no records."""

    def render(self, part: int, whole: int) -> str:
        if whole <= 0:
            return "0%"
        return f"{_half_up(part / whole * 100, 1):.1f}%"


class RosterPercentage(PercentageCalculator):
    """Share of the expected roster present on one day, as a whole number."""

    def render(self, part: int, whole: int) -> int:
        if whole <= 0:
            return 0
        return int(_half_up(part / whole * 100))


class RecordSharePercentage(PercentageCalculator):
    """Share of stored records that are present, rounded to ``digits`` places."""

    def __init__(self, digits: int = 1):
        self._digits = int(digits)

    def render(self, part: int, whole: int) -> float:
        if whole <= 0:
            return 0
        value = _half_up(part / whole * 100, self._digits)
        return int(value) if self._digits == 0 else value
