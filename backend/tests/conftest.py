from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker

from app.database import make_engine
from app.models import Base
from app.services.scheduling import SlotScheduler
from app.services.scheduling.errors import SchedulingStoreError
from app.services.scheduling.stores import (
    BookingRecord,
    GlobalHours,
    PartyAvailability,
    Role,
    WeeklyRule,
)

# 2030-01-07 is a Monday
MONDAY = datetime(2030, 1, 7)
TUESDAY = MONDAY + timedelta(days=1)

TEACHER_ID = 1
STUDENT_ID = 2


def at(day: datetime, hour: int, minute: int = 0) -> datetime:
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


def rules(*items: tuple[int, str, str]) -> PartyAvailability:
    return PartyAvailability(weekly_rules=tuple(WeeklyRule(*i) for i in items))


# ── In-memory collaborators ──────────────────────────────────────────────


class FakeAvailabilityStore:
    def __init__(self, docs: dict[int, PartyAvailability] | None = None, fail: bool = False):
        self.docs = docs or {}
        self.fail = fail
        self.calls: list[int] = []

    async def get(self, party_id):
        self.calls.append(party_id)
        if self.fail:
            raise SchedulingStoreError("availability down")
        return self.docs.get(party_id)


class FakeHolidayStore:
    def __init__(self, dates: list[date] | None = None):
        self.dates = dates or []

    async def list_in_range(self, start, end):
        return [d for d in self.dates if start.date() <= d <= end.date()]


class FakeSettingsStore:
    def __init__(self, hours: GlobalHours | None = None):
        self.hours = hours

    async def get_current(self):
        return self.hours


class FakeBookingStore:
    """
    bookings are visible to both range reads and overlap checks.
    late_bookings only show up in overlap checks, as if they were
    committed after the busy-time snapshot was taken.
    """

    def __init__(self, bookings: list[BookingRecord] | None = None, late_bookings: list[BookingRecord] | None = None):
        self.bookings = bookings or []
        self.late_bookings = late_bookings or []
        self.range_calls: list[tuple[Role, int, datetime, datetime]] = []
        self.overlap_calls = 0

    @staticmethod
    def _matches(b: BookingRecord, role: Role, party_id: int, start: datetime, end: datetime) -> bool:
        owner = b.teacher_id if role == Role.TEACHER else b.student_id
        return owner == party_id and b.status != "cancelled" and b.start < end and b.end > start

    async def find_overlap(self, role, party_id, start, end):
        self.overlap_calls += 1
        for b in self.bookings + self.late_bookings:
            if self._matches(b, role, party_id, start, end):
                return b
        return None

    async def find_in_range(self, role, party_id, start, end):
        self.range_calls.append((role, party_id, start, end))
        return [b for b in self.bookings if self._matches(b, role, party_id, start, end)]


class FakeAuditSink:
    def __init__(self, fail: bool = False):
        self.entries = []
        self.fail = fail

    async def record(self, entry):
        if self.fail:
            raise RuntimeError("audit insert failed")
        self.entries.append(entry)


def make_scheduler(
    docs=None,
    bookings=None,
    late_bookings=None,
    holidays=None,
    hours=None,
    audit=None,
    availability=None,
) -> tuple[SlotScheduler, FakeBookingStore]:
    booking_store = FakeBookingStore(bookings, late_bookings)
    scheduler = SlotScheduler(
        availability=availability or FakeAvailabilityStore(docs),
        holidays=FakeHolidayStore(holidays),
        settings=FakeSettingsStore(hours),
        bookings=booking_store,
        audit=audit,
    )
    return scheduler, booking_store


# ── SQL fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()
