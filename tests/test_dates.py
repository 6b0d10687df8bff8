"""
Tests for plan duration arithmetic.
"""
from datetime import datetime, timedelta, timezone

import pytest

from fitness_gh.core.dates import add_duration, normalize_datetime
from fitness_gh.core.enums import DurationUnit


def test_days_are_exact():
    start = datetime(2024, 1, 1, 9, 30)
    assert add_duration(start, 30, DurationUnit.DAYS) == datetime(2024, 1, 31, 9, 30)


def test_weeks_are_seven_days():
    start = datetime(2024, 2, 26)
    assert add_duration(start, 2, "WEEKS") == datetime(2024, 3, 11)


def test_month_keeps_day_when_it_exists():
    assert add_duration(datetime(2024, 3, 15, 18, 0), 1, "MONTHS") == datetime(2024, 4, 15, 18, 0)


def test_month_end_rolls_into_following_month():
    # Feb 31 does not exist: the two extra days spill into March
    assert add_duration(datetime(2024, 1, 31), 1, "MONTHS") == datetime(2024, 3, 2)
    assert add_duration(datetime(2023, 1, 31), 1, "MONTHS") == datetime(2023, 3, 3)


def test_months_cross_year_boundary():
    assert add_duration(datetime(2024, 11, 10), 3, "MONTHS") == datetime(2025, 2, 10)
    assert add_duration(datetime(2024, 1, 15), 12, "MONTHS") == datetime(2025, 1, 15)


def test_leap_day_plus_one_year():
    assert add_duration(datetime(2024, 2, 29), 1, "YEARS") == datetime(2025, 3, 1)
    assert add_duration(datetime(2024, 2, 29), 4, "YEARS") == datetime(2028, 2, 29)


def test_time_of_day_preserved():
    start = datetime(2024, 5, 31, 23, 59, 59)
    assert add_duration(start, 1, "MONTHS") == datetime(2024, 7, 1, 23, 59, 59)


def test_unknown_unit_rejected():
    with pytest.raises(ValueError):
        add_duration(datetime(2024, 1, 1), 1, "FORTNIGHTS")


def test_normalize_datetime_converts_aware_to_naive_utc():
    plus_two = datetime(2024, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert normalize_datetime(plus_two) == datetime(2024, 6, 1, 10, 0)
    assert normalize_datetime(None) is None
