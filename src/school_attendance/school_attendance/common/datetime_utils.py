from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime, time, timedelta, tzinfo
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError

DateInput = Union[str, date, datetime, None]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


@dataclass(frozen=True)
class CalendarDay:
    """A date with time-of-day stripped, anchored to a timezone."""

    day: date
    tz: tzinfo

    @property
    def start(self) -> datetime:
        return datetime.combine(self.day, time.min, tzinfo=self.tz)

    @property
    def end(self) -> datetime:
        return datetime.combine(self.day, time(23, 59, 59, 999000), tzinfo=self.tz)

    @property
    def key(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True)
class DateWindow:
    """Half-open range of calendar days: ``start <= day < end``."""

    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValidationError("Window end is before its start")

    def days(self) -> Iterator[date]:
        d = self.start
        while d < self.end:
            yield d
            d += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days

    def contains(self, value: date) -> bool:
        return self.start <= value < self.end

    @classmethod
    def for_month(cls, year: int, month: int) -> "DateWindow":
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")
        if not MINYEAR <= int(year) < MAXYEAR:
            raise ValidationError(f"Year must be between {MINYEAR} and {MAXYEAR - 1}")
        start = date(int(year), int(month), 1)
        last = calendar.monthrange(start.year, start.month)[1]
        return cls(start=start, end=start + timedelta(days=last))

    @classmethod
    def inclusive(cls, first: date, last: date) -> "DateWindow":
        return cls(start=first, end=last + timedelta(days=1))

    @classmethod
    def single(cls, day: date) -> "DateWindow":
        return cls(start=day, end=day + timedelta(days=1))


class LocalCalendar:
    """Single source of calendar-day normalization for reads and writes.

    Aware datetimes are converted into the configured zone before the date is
    taken. Naive datetimes and plain dates are already local.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        try:
            self._tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValidationError(f"Unknown timezone: {timezone}") from e
        self._name = timezone

    @property
    def tz(self) -> tzinfo:
        return self._tz

    @property
    def timezone_name(self) -> str:
        return self._name

    def now(self) -> datetime:
        """Current time in the configured zone.

        Note: Wrapped so tests can patch it.
        """
        return datetime.now(self._tz)

    def today(self) -> CalendarDay:
        return CalendarDay(self.now().date(), self._tz)

    def normalize(self, value: DateInput, *, default_now: bool = True) -> Optional[CalendarDay]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return self.today() if default_now else None

        if isinstance(value, datetime):
            return CalendarDay(self._local_date(value), self._tz)
        if isinstance(value, date):
            return CalendarDay(value, self._tz)
        if isinstance(value, str):
            return CalendarDay(self._parse(value.strip()), self._tz)

        raise ValidationError(f"Unsupported date value: {value!r}")

    def localize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self._tz)
        return value.astimezone(self._tz)

    def _local_date(self, value: datetime) -> date:
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(self._tz).date()

    def _parse(self, value: str) -> date:
        if len(value) == 10:
            try:
                return parse_iso_date(value)
            except ValueError as e:
                raise ValidationError(f"Invalid date: {value}") from e

        raw = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            return self._local_date(datetime.fromisoformat(raw))
        except ValueError as e:
            raise ValidationError(f"Invalid date: {value}") from e


def month_and_year(month: Optional[str], year: Optional[str]) -> tuple[int, int]:
    """Validate month/year query parameters."""

    if not month or not year:
        raise ValidationError("Month and Year are required")
    try:
        m, y = int(month), int(year)
    except ValueError as e:
        raise ValidationError("Month and Year must be numbers") from e
    if not 1 <= m <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not MINYEAR <= y < MAXYEAR:
        raise ValidationError(f"Year must be between {MINYEAR} and {MAXYEAR - 1}")
    return m, y


def one_month_before(value: date) -> date:
    """Same day of the previous month, clamped to that month's last day."""

    year, month = (value.year, value.month - 1) if value.month > 1 else (value.year - 1, 12)
    last = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last))
