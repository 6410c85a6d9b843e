# backend/app/services/scheduling/engine.py
"""
Lesson slot suggestion.

Two strategies share one pipeline:

  availability (both parties) ─┐
  busy + buffer (both parties) ┴→ subtract → intersect → candidates → verify

- greedy: one pass over [from, end of day (start of day from) + days], earliest first
- backtracking: greedy passes over consecutive chunks until enough
  suggestions are pooled or max_chunks is reached. It only widens the
  horizon forward and never retracts an earlier result.

Suggestions are advisory. Nothing is reserved.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from .availability import AvailabilityResolver
from .busy import BusyResolver, expand_with_buffer
from .candidates import generate_candidates
from .config import SchedulingConfig, get_scheduling_config
from .dates import ONE_MS, end_of_day, start_of_day
from .errors import InvalidSlotRequest
from .intervals import subtract
from .stores import (
    AuditSink,
    AvailabilityStore,
    BookingStore,
    GlobalSettingsStore,
    HolidayStore,
    Role,
    SchedulingAuditEntry,
    Suggestion,
)
from .verifier import ConflictVerifier

logger = logging.getLogger(__name__)

GREEDY = "greedy"
BACKTRACKING = "backtracking"
ALGORITHMS = (GREEDY, BACKTRACKING)


@dataclass(frozen=True)
class SlotRequest:
    """
    Parameters of one suggestion search.

    None means "use the configured default".
    """
    teacher_id: Optional[int]
    student_id: Optional[int]
    duration_minutes: int = 60
    from_: Optional[datetime] = None
    days: Optional[int] = None
    step_minutes: Optional[int] = None
    buffer_minutes: Optional[int] = None
    max_suggestions: Optional[int] = None
    algorithm: str = GREEDY
    chunk_days: Optional[int] = None
    max_chunks: Optional[int] = None


class SlotScheduler:
    def __init__(
        self,
        availability: AvailabilityStore,
        holidays: HolidayStore,
        settings: GlobalSettingsStore,
        bookings: BookingStore,
        audit: Optional[AuditSink] = None,
        config: SchedulingConfig | None = None,
    ):
        self.config = config or get_scheduling_config()
        self.settings = settings
        self.audit = audit
        self.availability_resolver = AvailabilityResolver(availability, holidays, settings)
        self.busy_resolver = BusyResolver(bookings)
        self.verifier = ConflictVerifier(bookings, self.config.verify_concurrency)

    # ── Public ───────────────────────────────────────────────────────────

    async def suggest_slots(self, request: SlotRequest) -> list[Suggestion]:
        """Dispatch to the requested algorithm (case-insensitive)."""
        algorithm = str(request.algorithm or GREEDY).lower()
        if algorithm not in ALGORITHMS:
            raise InvalidSlotRequest(f"Unknown algorithm: {request.algorithm}")
        if algorithm == BACKTRACKING:
            return await self.suggest_backtracking(request)
        return await self.suggest_greedy(request)

    async def suggest_greedy(self, request: SlotRequest) -> list[Suggestion]:
        """Earliest suggestions within a single horizon."""
        request = self._normalize(request)
        window_start, window_end = self._horizon(request.from_, request.days)

        found = await self._search(request, window_start, window_end, request.max_suggestions)
        suggestions = [self._suggestion(c, request, GREEDY) for c in found]

        logger.info(
            f"greedy teacher={request.teacher_id} student={request.student_id} "
            f"{window_start:%Y-%m-%d %H:%M}..{window_end:%Y-%m-%d %H:%M} → {len(suggestions)}"
        )
        await self._record(GREEDY, request, window_start, window_end, suggestions)
        return suggestions

    async def suggest_backtracking(self, request: SlotRequest) -> list[Suggestion]:
        """
        Roll the horizon forward chunk by chunk.

        Each chunk starts 1 ms after the previous chunk's upper bound,
        so no instant is scanned twice and the loop always terminates.
        """
        request = self._normalize(request)
        per_chunk = max(self.config.chunk_pool_floor, request.max_suggestions)

        pool = []
        cursor = request.from_
        last_end = None
        chunks = 0

        while chunks < request.max_chunks and len(pool) < request.max_suggestions:
            chunk_start, chunk_end = self._horizon(cursor, request.chunk_days)
            pool.extend(await self._search(request, chunk_start, chunk_end, per_chunk))
            logger.debug(
                f"rollforward chunk {chunks + 1}/{request.max_chunks} "
                f"{chunk_start:%Y-%m-%d %H:%M}..{chunk_end:%Y-%m-%d %H:%M}, pool={len(pool)}"
            )
            last_end = chunk_end
            cursor = chunk_end + ONE_MS
            chunks += 1

        pool.sort(key=lambda c: c.start)
        suggestions = [
            self._suggestion(c, request, BACKTRACKING)
            for c in pool[:request.max_suggestions]
        ]

        logger.info(
            f"backtracking teacher={request.teacher_id} student={request.student_id} "
            f"chunks={chunks} → {len(suggestions)}"
        )
        await self._record(BACKTRACKING, request, request.from_, last_end, suggestions)
        return suggestions

    # ── Pipeline ─────────────────────────────────────────────────────────

    async def _search(self, request: SlotRequest, window_start: datetime, window_end: datetime, limit: int):
        teacher_id, student_id = request.teacher_id, request.student_id

        hours = await self.settings.get_current()

        teacher_avail, student_avail = await asyncio.gather(
            self.availability_resolver.resolve(teacher_id, window_start, window_end),
            self.availability_resolver.resolve(student_id, window_start, window_end),
        )
        teacher_busy, student_busy = await asyncio.gather(
            self.busy_resolver.resolve(Role.TEACHER, teacher_id, window_start, window_end),
            self.busy_resolver.resolve(Role.STUDENT, student_id, window_start, window_end),
        )

        # Buffer busy time before subtracting so gaps around lessons are not offered
        teacher_free = subtract(teacher_avail, expand_with_buffer(teacher_busy, request.buffer_minutes))
        student_free = subtract(student_avail, expand_with_buffer(student_busy, request.buffer_minutes))

        candidates = generate_candidates(
            teacher_free,
            student_free,
            request.duration_minutes,
            request.step_minutes,
            window_start,
            hours,
            limit,
            self.config,
        )
        verified = await self.verifier.verify(candidates, teacher_id, student_id, request.buffer_minutes)
        logger.debug(f"candidates={len(candidates)} verified={len(verified)}")
        return verified[:limit]

    # ── Helpers ──────────────────────────────────────────────────────────

    def _normalize(self, request: SlotRequest) -> SlotRequest:
        """Validate preconditions and fill defaults. Touches no store."""
        if request.teacher_id is None or request.student_id is None:
            raise InvalidSlotRequest("teacher_id and student_id are required")
        if request.duration_minutes is None or request.duration_minutes <= 0:
            raise InvalidSlotRequest("duration_minutes must be positive")

        cfg = self.config
        return replace(
            request,
            from_=request.from_ or datetime.now(),
            days=_or_default(request.days, cfg.default_days),
            step_minutes=cfg.effective_step(request.step_minutes),
            buffer_minutes=max(0, _or_default(request.buffer_minutes, cfg.default_buffer_minutes)),
            max_suggestions=max(0, _or_default(request.max_suggestions, cfg.default_max_suggestions)),
            chunk_days=_or_default(request.chunk_days, cfg.default_chunk_days),
            max_chunks=_or_default(request.max_chunks, cfg.default_max_chunks),
        )

    @staticmethod
    def _horizon(start: datetime, days: int) -> tuple[datetime, datetime]:
        """
        [start, last millisecond of the day `days` days after start's day].

        days < 1 counts as 1. Always covers [start, start + days), so a
        late start still reaches the next day.
        """
        last_day = start_of_day(start) + timedelta(days=max(1, days))
        return start, end_of_day(last_day)

    @staticmethod
    def _suggestion(candidate, request: SlotRequest, algorithm: str) -> Suggestion:
        return Suggestion(
            start=candidate.start,
            end=candidate.end,
            duration_minutes=request.duration_minutes,
            algorithm=algorithm,
        )

    async def _record(
        self,
        algorithm: str,
        request: SlotRequest,
        window_start: datetime,
        window_end: Optional[datetime],
        suggestions: list[Suggestion],
    ) -> None:
        """Best-effort audit entry. Failures are logged and swallowed."""
        if self.audit is None or not suggestions:
            return
        entry = SchedulingAuditEntry(
            algorithm=algorithm,
            teacher_id=request.teacher_id,
            student_id=request.student_id,
            window_start=window_start,
            window_end=window_end,
            suggestions=suggestions,
        )
        try:
            await self.audit.record(entry)
        except Exception as e:
            logger.warning(f"Failed to record scheduling log ({algorithm}): {e}")


def _or_default(value, default):
    return default if value is None else value
