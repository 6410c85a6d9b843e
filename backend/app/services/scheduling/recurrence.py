# backend/app/services/scheduling/recurrence.py
"""
Weekly recurrence expansion.

A series starts at `first` and repeats every `interval` weeks on the
given weekdays (0 = Sunday). Without weekdays it repeats on the weekday
of `first`. Every occurrence keeps the wall-clock time of `first`.
"""

from datetime import datetime, timedelta

from .dates import day_of_week

MAX_OCCURRENCES = 100


def expand_weekly(
    first: datetime,
    count: int,
    interval: int = 1,
    by_day=None,
) -> list[datetime]:
    """
    Occurrence start times, sorted, at most MAX_OCCURRENCES.

    Weeks are counted from the week of `first`. A weekday earlier in the
    week than `first` falls into the following week, so no occurrence is
    ever before `first`.
    """
    total = min(MAX_OCCURRENCES, max(1, count))
    step = timedelta(weeks=max(1, interval))
    week_days = sorted(set(by_day or [])) or [day_of_week(first)]

    occurrences: list[datetime] = []
    cursor = first
    while len(occurrences) < total:
        week = sorted(
            cursor + timedelta(days=(d - day_of_week(cursor)) % 7)
            for d in week_days
        )
        for start in week:
            if start not in occurrences:
                occurrences.append(start)
            if len(occurrences) >= total:
                break
        cursor += step

    return sorted(occurrences)
