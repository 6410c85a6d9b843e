# backend/app/services/scheduling/dates.py
"""
Local-day helpers.

All datetimes in the scheduler are naive local wall-clock values.
Day of week follows the stored convention 0 = Sunday ... 6 = Saturday.
"""

from datetime import date, datetime, time, timedelta

from .config import time_str_to_minutes

ONE_MS = timedelta(milliseconds=1)
ONE_DAY = timedelta(days=1)


def start_of_day(value: datetime | date) -> datetime:
    return datetime.combine(_as_date(value), time.min)


def end_of_day(value: datetime | date) -> datetime:
    """Last millisecond of the day (23:59:59.999)."""
    return start_of_day(value) + ONE_DAY - ONE_MS


def day_of_week(value: datetime | date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (_as_date(value).weekday() + 1) % 7


def at_time(day: datetime | date, hhmm: str) -> datetime:
    """Combine a day with an "HH:MM" string."""
    return start_of_day(day) + timedelta(minutes=time_str_to_minutes(hhmm))


def at_hour(day: datetime | date, hour: int) -> datetime:
    """Combine a day with a whole hour; 24 means the following midnight."""
    return start_of_day(day) + timedelta(hours=hour)


def iter_days(range_start: datetime | date, range_end: datetime | date):
    """Yield local midnights from range_start's day to range_end's day inclusive."""
    current = start_of_day(range_start)
    last = start_of_day(range_end)
    while current <= last:
        yield current
        current += ONE_DAY


def _as_date(value: datetime | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def to_local_naive(value: datetime | None) -> datetime | None:
    """Aware datetimes are converted to local wall-clock time; naive ones pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
