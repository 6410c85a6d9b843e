# backend/app/services/scheduling/verifier.py
"""
Conflict verifier.

Upstream availability and busy snapshots can be stale by the time a
suggestion is shown. Every candidate is checked once more against the
lesson store, for the teacher and the student role, with the buffer
applied. The lesson-creation endpoints run the same predicate at commit.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Optional

from .intervals import Interval
from .stores import BookingRecord, BookingStore, Role


def buffered_window(start: datetime, end: datetime, buffer_minutes: int = 0) -> tuple[datetime, datetime]:
    """Expand [start, end) by buffer_minutes on both sides."""
    pad = timedelta(minutes=buffer_minutes or 0)
    return start - pad, end + pad


class ConflictVerifier:
    def __init__(self, bookings: BookingStore, concurrency: int = 10):
        self.bookings = bookings
        self.concurrency = concurrency

    async def find_conflict(
        self,
        role: Role,
        party_id: int,
        start: datetime,
        end: datetime,
        buffer_minutes: int = 0,
    ) -> Optional[BookingRecord]:
        check_start, check_end = buffered_window(start, end, buffer_minutes)
        return await self.bookings.find_overlap(role, party_id, check_start, check_end)

    async def verify(
        self,
        candidates: list[Interval],
        teacher_id: int,
        student_id: int,
        buffer_minutes: int = 0,
    ) -> list[Interval]:
        """
        Keep candidates with no conflicting lesson for either party.

        Checks run concurrently; all of them finish before returning.
        Result is sorted by start.
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def check(candidate: Interval) -> bool:
            async with semaphore:
                teacher_clash, student_clash = await asyncio.gather(
                    self.find_conflict(Role.TEACHER, teacher_id, candidate.start, candidate.end, buffer_minutes),
                    self.find_conflict(Role.STUDENT, student_id, candidate.start, candidate.end, buffer_minutes),
                )
            return teacher_clash is None and student_clash is None

        results = await asyncio.gather(*(check(c) for c in candidates))
        ok = [c for c, free in zip(candidates, results) if free]
        return sorted(ok, key=lambda c: c.start)
