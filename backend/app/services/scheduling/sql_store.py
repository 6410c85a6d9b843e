# backend/app/services/scheduling/sql_store.py
"""
SQLAlchemy-backed scheduler stores.

Sessions are synchronous; every call opens its own session inside
asyncio.to_thread so the teacher/student reads of one search can run
side by side. Database errors surface as SchedulingStoreError.
"""

import asyncio
import json
import logging
from datetime import date, datetime
from typing import Callable, Optional

from pydantic import TypeAdapter
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database import SessionLocal
from ...models.generated import (
    Availability as DBAvailability,
    GlobalSettings as DBGlobalSettings,
    Holidays as DBHolidays,
    Lessons as DBLessons,
    SchedulingLogs as DBSchedulingLogs,
)
from .dates import to_local_naive
from .errors import SchedulingStoreError
from .intervals import Interval
from .stores import (
    ALL_DAYS,
    BookingRecord,
    ExceptionDay,
    GlobalHours,
    PartyAvailability,
    Role,
    SchedulingAuditEntry,
    WeeklyRule,
)
from .verifier import buffered_window

logger = logging.getLogger(__name__)

_DATETIME = TypeAdapter(datetime)


# ── Overlap predicate ────────────────────────────────────────────────────


def party_column(role: Role):
    return DBLessons.teacher_id if role == Role.TEACHER else DBLessons.student_id


def overlap_conditions(role: Role, party_id: int, start: datetime, end: datetime) -> tuple:
    """
    A lesson overlaps [start, end) if:
      lesson.starts_at < end AND lesson.ends_at > start
    Cancelled lessons never overlap.
    """
    return (
        party_column(role) == party_id,
        DBLessons.status != "cancelled",
        DBLessons.starts_at < end,
        DBLessons.ends_at > start,
    )


def find_lesson_conflict(
    db: Session,
    role: Role,
    party_id: int,
    start: datetime,
    end: datetime,
    buffer_minutes: int = 0,
    exclude_id: Optional[int] = None,
) -> Optional[DBLessons]:
    """
    Buffered overlap check used by the verifier and by lesson commits.

    exclude_id skips one lesson, so a lesson being moved never clashes
    with its own current time.
    """
    check_start, check_end = buffered_window(start, end, buffer_minutes)
    q = db.query(DBLessons).filter(*overlap_conditions(role, party_id, check_start, check_end))
    if exclude_id is not None:
        q = q.filter(DBLessons.id != exclude_id)
    return q.order_by(DBLessons.starts_at).first()


# ── Parsing helpers ──────────────────────────────────────────────────────


def _json_list(raw: str | None) -> list:
    try:
        items = json.loads(raw) if raw else []
    except json.JSONDecodeError:
        return []
    return items if isinstance(items, list) else []


def parse_weekly_rules(raw: str | None) -> tuple[WeeklyRule, ...]:
    items = _json_list(raw)

    rules = []
    for item in items:
        try:
            rules.append(WeeklyRule(int(item["day"]), str(item["start"]), str(item["end"])))
        except (KeyError, TypeError, ValueError):
            continue
    return tuple(rules)


def parse_exceptions(raw: str | None) -> tuple[ExceptionDay, ...]:
    items = _json_list(raw)

    days = []
    for item in items:
        try:
            day = date.fromisoformat(str(item["date"])[:10])
            slots = tuple(
                Interval(_parse_local(s["start"]), _parse_local(s["end"]))
                for s in item.get("slots") or []
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping unreadable availability exception {item!r}: {e}")
            continue
        days.append(ExceptionDay(day, slots))
    return tuple(days)


def _parse_local(value: str) -> datetime:
    """ISO 8601 with or without offset or "Z"; aware values become local naive."""
    return to_local_naive(_DATETIME.validate_python(value))


def parse_days_open(raw: str | None) -> frozenset[int]:
    if raw is None:
        return ALL_DAYS
    return frozenset(int(p) for p in str(raw).split(",") if p.strip().isdigit())


def to_booking_record(lesson: DBLessons) -> BookingRecord:
    return BookingRecord(
        id=lesson.id,
        teacher_id=lesson.teacher_id,
        student_id=lesson.student_id,
        start=lesson.starts_at,
        duration_minutes=lesson.duration_minutes,
        status=lesson.status,
    )


# ── Stores ───────────────────────────────────────────────────────────────


class _SqlStore:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    async def _run(self, fn, *args):
        return await asyncio.to_thread(self._call, fn, *args)

    def _call(self, fn, *args):
        db = self.session_factory()
        try:
            return fn(db, *args)
        except SQLAlchemyError as e:
            logger.error(f"{type(self).__name__} query failed: {e}")
            raise SchedulingStoreError(f"{type(self).__name__} unavailable") from e
        finally:
            db.close()


class SqlAvailabilityStore(_SqlStore):
    async def get(self, party_id: int) -> Optional[PartyAvailability]:
        return await self._run(self._get, party_id)

    @staticmethod
    def _get(db: Session, party_id: int) -> Optional[PartyAvailability]:
        doc = db.query(DBAvailability).filter(DBAvailability.user_id == party_id).first()
        if not doc:
            return None
        return PartyAvailability(
            weekly_rules=parse_weekly_rules(doc.weekly_rules),
            exceptions=parse_exceptions(doc.exceptions),
        )


class SqlHolidayStore(_SqlStore):
    async def list_in_range(self, start: datetime, end: datetime) -> list[date]:
        return await self._run(self._list, start, end)

    @staticmethod
    def _list(db: Session, start: datetime, end: datetime) -> list[date]:
        rows = (
            db.query(DBHolidays.date)
            .filter(DBHolidays.date >= start.date(), DBHolidays.date <= end.date())
            .all()
        )
        return [row.date for row in rows]


class SqlGlobalSettingsStore(_SqlStore):
    """Most recently updated row wins; no row means open all day, every day."""

    async def get_current(self) -> Optional[GlobalHours]:
        return await self._run(self._current)

    @staticmethod
    def _current(db: Session) -> Optional[GlobalHours]:
        row = (
            db.query(DBGlobalSettings)
            .order_by(DBGlobalSettings.updated_at.desc(), DBGlobalSettings.id.desc())
            .first()
        )
        if not row:
            return None
        return GlobalHours(
            open_hour=row.open_hour,
            close_hour=row.close_hour,
            days_open=parse_days_open(row.days_open),
        )


class SqlBookingStore(_SqlStore):
    async def find_overlap(
        self, role: Role, party_id: int, start: datetime, end: datetime
    ) -> Optional[BookingRecord]:
        return await self._run(self._find_overlap, role, party_id, start, end)

    async def find_in_range(
        self, role: Role, party_id: int, start: datetime, end: datetime
    ) -> list[BookingRecord]:
        return await self._run(self._find_in_range, role, party_id, start, end)

    @staticmethod
    def _find_overlap(db: Session, role: Role, party_id: int, start: datetime, end: datetime):
        lesson = find_lesson_conflict(db, role, party_id, start, end)
        return to_booking_record(lesson) if lesson else None

    @staticmethod
    def _find_in_range(db: Session, role: Role, party_id: int, start: datetime, end: datetime):
        lessons = (
            db.query(DBLessons)
            .filter(*overlap_conditions(role, party_id, start, end))
            .order_by(DBLessons.starts_at)
            .all()
        )
        return [to_booking_record(lesson) for lesson in lessons]


class SqlAuditSink(_SqlStore):
    async def record(self, entry: SchedulingAuditEntry) -> None:
        await self._run(self._insert, entry)

    @staticmethod
    def _insert(db: Session, entry: SchedulingAuditEntry) -> None:
        db.add(DBSchedulingLogs(
            algorithm=entry.algorithm,
            teacher_id=entry.teacher_id,
            student_id=entry.student_id,
            window_start=entry.window_start,
            window_end=entry.window_end,
            suggestions=json.dumps([
                {
                    "start": s.start.isoformat(),
                    "end": s.end.isoformat(),
                    "duration": s.duration_minutes,
                }
                for s in entry.suggestions
            ]),
        ))
        db.commit()
