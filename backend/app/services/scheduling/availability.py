# backend/app/services/scheduling/availability.py
"""
Availability resolver.

Turns a party's weekly rules and date exceptions into concrete open
intervals over a range of days.

Per day, in order of precedence:
✓ holiday → nothing, even if an exception exists
✓ exception for the date → its slots verbatim (empty = closed)
✓ weekly rules matching the day of week

Then every window is clipped to the school's opening hours and days
that are not open are dropped. A party with no availability document
is never available.
"""

import logging
from datetime import datetime

from .dates import at_hour, at_time, day_of_week, iter_days, start_of_day
from .intervals import Interval, merge
from .stores import (
    AvailabilityStore,
    GlobalHours,
    GlobalSettingsStore,
    HolidayStore,
    PartyAvailability,
)

logger = logging.getLogger(__name__)


class AvailabilityResolver:
    def __init__(
        self,
        availability: AvailabilityStore,
        holidays: HolidayStore,
        settings: GlobalSettingsStore,
    ):
        self.availability = availability
        self.holidays = holidays
        self.settings = settings

    async def resolve(
        self,
        party_id: int,
        range_start: datetime,
        range_end: datetime,
    ) -> list[Interval]:
        """
        Open intervals for party_id on every day from range_start to range_end.

        Returns:
            Merged, sorted intervals. Empty list = never available.
        """
        doc = await self.availability.get(party_id)
        if doc is None:
            return []

        hours = await self.settings.get_current()
        holiday_dates = await self.holidays.list_in_range(range_start, range_end)

        windows = build_windows(doc, holiday_dates, hours, range_start, range_end)
        logger.debug(
            f"availability party={party_id} "
            f"{range_start:%Y-%m-%d}..{range_end:%Y-%m-%d}: {len(windows)} windows"
        )
        return windows


def build_windows(
    doc: PartyAvailability,
    holiday_dates,
    hours: GlobalHours | None,
    range_start: datetime,
    range_end: datetime,
) -> list[Interval]:
    """Expand rules and exceptions day by day, then clip and merge."""
    holiday_keys = {start_of_day(d) for d in holiday_dates}

    exceptions: dict[datetime, list[Interval]] = {}
    for ex in doc.exceptions:
        exceptions.setdefault(start_of_day(ex.date), []).extend(ex.slots)

    windows: list[Interval] = []
    for day in iter_days(range_start, range_end):
        if day in holiday_keys:
            continue
        if hours is not None and day_of_week(day) not in hours.days_open:
            continue

        if day in exceptions:
            day_windows = list(exceptions[day])
        else:
            day_windows = _rule_windows(doc, day)

        windows.extend(day_windows)

    return merge(clip_to_hours(windows, hours))


def clip_to_hours(windows: list[Interval], hours: GlobalHours | None) -> list[Interval]:
    """Clip each window to opening hours of the day it starts on."""
    if hours is None:
        return [w for w in windows if w.end > w.start]

    clipped = []
    for w in windows:
        if day_of_week(w.start) not in hours.days_open:
            continue
        start = max(w.start, at_hour(w.start, hours.open_hour))
        end = min(w.end, at_hour(w.start, hours.close_hour))
        if end > start:
            clipped.append(Interval(start, end))
    return clipped


def _rule_windows(doc: PartyAvailability, day: datetime) -> list[Interval]:
    dow = day_of_week(day)
    out = []
    for rule in doc.weekly_rules:
        if rule.day_of_week != dow:
            continue
        start = at_time(day, rule.start)
        end = at_time(day, rule.end)
        if end > start:
            out.append(Interval(start, end))
    return out
