# backend/app/services/scheduling/stores.py
"""
Collaborator contracts for the scheduler.

The scheduler only reads through these protocols. SQL-backed
implementations live in sql_store.py; tests use in-memory fakes.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Protocol

from .intervals import Interval


ALL_DAYS = frozenset(range(7))


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


@dataclass(frozen=True)
class WeeklyRule:
    """Recurring window, day_of_week 0 = Sunday, times as "HH:MM"."""
    day_of_week: int
    start: str
    end: str


@dataclass(frozen=True)
class ExceptionDay:
    """Replaces the weekly windows of one date; no slots means closed."""
    date: date
    slots: tuple[Interval, ...] = ()


@dataclass(frozen=True)
class PartyAvailability:
    weekly_rules: tuple[WeeklyRule, ...] = ()
    exceptions: tuple[ExceptionDay, ...] = ()


@dataclass(frozen=True)
class GlobalHours:
    """
    School-wide opening hours.

    close_hour is exclusive; 24 stands for "until midnight".
    """
    open_hour: int = 0
    close_hour: int = 24
    days_open: frozenset[int] = ALL_DAYS


@dataclass(frozen=True)
class BookingRecord:
    teacher_id: int
    student_id: Optional[int]
    start: datetime
    duration_minutes: int
    status: str = "scheduled"
    id: Optional[int] = None

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


@dataclass(frozen=True)
class Suggestion:
    start: datetime
    end: datetime
    duration_minutes: int
    algorithm: str


@dataclass(frozen=True)
class SchedulingAuditEntry:
    algorithm: str
    teacher_id: int
    student_id: int
    window_start: datetime
    window_end: Optional[datetime]
    suggestions: list[Suggestion] = field(default_factory=list)


class AvailabilityStore(Protocol):
    async def get(self, party_id: int) -> Optional[PartyAvailability]: ...


class HolidayStore(Protocol):
    async def list_in_range(self, start: datetime, end: datetime) -> list[date]: ...


class GlobalSettingsStore(Protocol):
    async def get_current(self) -> Optional[GlobalHours]:
        """Most recently updated settings, or None (permissive defaults apply)."""
        ...


class BookingStore(Protocol):
    async def find_overlap(
        self, role: Role, party_id: int, start: datetime, end: datetime
    ) -> Optional[BookingRecord]: ...

    async def find_in_range(
        self, role: Role, party_id: int, start: datetime, end: datetime
    ) -> list[BookingRecord]: ...


class AuditSink(Protocol):
    async def record(self, entry: SchedulingAuditEntry) -> None: ...
