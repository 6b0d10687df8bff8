"""
Date helpers.

All timestamps are stored as naive UTC datetimes.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fitness_gh.core.enums import DurationUnit


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _shift_calendar(value: datetime, years: int, months: int) -> datetime:
    # The day of month is re-applied as an offset from the 1st, so a day that
    # does not exist in the target month spills into the next one
    # (Jan 31 + 1 month -> Mar 2 or Mar 3).
    total = (value.month - 1) + months
    year = value.year + years + total // 12
    month = total % 12 + 1
    first = value.replace(year=year, month=month, day=1)
    return first + timedelta(days=value.day - 1)


def add_duration(start: datetime, amount: int, unit) -> datetime:
    """
    Add ``amount`` units of ``unit`` to ``start``.

    DAYS and WEEKS are exact. MONTHS and YEARS move the calendar field and
    roll an out-of-range day over into the following month. The time of day
    is preserved.
    """
    unit = DurationUnit(unit)
    if unit == DurationUnit.DAYS:
        return start + timedelta(days=amount)
    if unit == DurationUnit.WEEKS:
        return start + timedelta(weeks=amount)
    if unit == DurationUnit.MONTHS:
        return _shift_calendar(start, 0, amount)
    return _shift_calendar(start, amount, 0)
