from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union


class PercentageCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance percentages).

    Each implementation fixes its own denominator and rounding; they are not
    interchangeable.
    """

    @abstractmethod
    def render(self, part: int, whole: int) -> Union[str, int, float]:
        raise NotImplementedError
