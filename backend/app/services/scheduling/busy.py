# backend/app/services/scheduling/busy.py
"""
Busy-time resolver.

Existing lessons of a party, seen in one role, become busy intervals.
Cancelled lessons are filtered out by the store.
"""

from datetime import datetime, timedelta

from .intervals import Interval
from .stores import BookingStore, Role


class BusyResolver:
    def __init__(self, bookings: BookingStore):
        self.bookings = bookings

    async def resolve(
        self,
        role: Role,
        party_id: int,
        range_start: datetime,
        range_end: datetime,
    ) -> list[Interval]:
        """Busy intervals overlapping [range_start, range_end], sorted by start."""
        lessons = await self.bookings.find_in_range(role, party_id, range_start, range_end)
        return sorted(
            (b.interval for b in lessons if b.status != "cancelled"),
            key=lambda i: i.start,
        )


def expand_with_buffer(intervals: list[Interval], buffer_minutes: int = 0) -> list[Interval]:
    """Widen every interval by buffer_minutes on both ends."""
    if not buffer_minutes:
        return intervals
    pad = timedelta(minutes=buffer_minutes)
    return [Interval(b.start - pad, b.end + pad) for b in intervals]
