from datetime import date, datetime, timedelta, timezone

import pytest

from src.school_attendance.school_attendance.common.datetime_utils import (
    DateWindow,
    LocalCalendar,
    month_and_year,
    one_month_before,
)
from src.school_attendance.school_attendance.core.exceptions import ValidationError


def test_day_bounds_strip_time_of_day():
    day = LocalCalendar("Asia/Kolkata").normalize("2025-03-05T17:45:12")

    assert day.day == date(2025, 3, 5)
    assert (day.start.hour, day.start.minute, day.start.second) == (0, 0, 0)
    assert (day.end.hour, day.end.minute, day.end.second, day.end.microsecond) == (23, 59, 59, 999000)
    assert day.key == "2025-03-05"


def test_aware_datetime_is_converted_before_taking_the_date():
    cal = LocalCalendar("Asia/Kolkata")

    assert cal.normalize("2025-03-05T19:00:00Z").day == date(2025, 3, 6)
    assert cal.normalize(datetime(2025, 3, 5, 18, 0, tzinfo=timezone.utc)).day == date(2025, 3, 5)
    assert cal.normalize("2025-03-05T19:00:00").day == date(2025, 3, 5)


def test_missing_date_defaults_to_today_unless_disabled():
    cal = LocalCalendar("UTC")

    assert cal.normalize(None).day == cal.today().day
    assert cal.normalize("  ", default_now=False) is None


@pytest.mark.parametrize("value", ["2025-13-01", "yesterday", "2025/03/05", 12345])
def test_unparseable_dates_raise_validation_error(value):
    with pytest.raises(ValidationError):
        LocalCalendar("UTC").normalize(value)


def test_unknown_timezone_is_rejected():
    with pytest.raises(ValidationError):
        LocalCalendar("Mars/Olympus")


def test_month_window_has_one_day_per_calendar_day():
    window = DateWindow.for_month(2024, 2)

    days = list(window.days())
    assert len(days) == len(window) == 29
    assert days[0] == date(2024, 2, 1)
    assert days[-1] == date(2024, 2, 29)
    assert not window.contains(date(2024, 3, 1))


def test_inclusive_and_single_windows():
    assert len(DateWindow.inclusive(date(2025, 1, 1), date(2025, 1, 7))) == 7
    single = DateWindow.single(date(2025, 1, 1))
    assert single.end - single.start == timedelta(days=1)

    with pytest.raises(ValidationError):
        DateWindow(start=date(2025, 1, 2), end=date(2025, 1, 1))


def test_month_and_year_validation():
    assert month_and_year("3", "2025") == (3, 2025)
    with pytest.raises(ValidationError):
        month_and_year(None, "2025")
    with pytest.raises(ValidationError):
        month_and_year("13", "2025")
    with pytest.raises(ValidationError):
        month_and_year("March", "2025")
    with pytest.raises(ValidationError):
        month_and_year("3", "0")
    with pytest.raises(ValidationError):
        month_and_year("3", "10000")


def test_one_month_before_clamps_to_month_end():
    assert one_month_before(date(2025, 3, 31)) == date(2025, 2, 28)
    assert one_month_before(date(2025, 1, 15)) == date(2024, 12, 15)


def test_month_window_rejects_out_of_range_year():
    with pytest.raises(ValidationError):
        DateWindow.for_month(0, 3)
    with pytest.raises(ValidationError):
        DateWindow.for_month(9999, 12)
