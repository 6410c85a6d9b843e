# backend/app/routers/lessons.py
# Create, reschedule and recurring create re-run the buffered overlap check; conflicts → 409.
# DELETE = 405, cancel through PATCH /{id}/status

from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models.generated import (
    Lessons as DBLessons,
    RecurringSeries as DBRecurringSeries,
)
from ..schemas.lessons import (
    LessonCreate,
    LessonRead,
    LessonStatusUpdate,
    LessonUpdate,
    RecurringLessonCreate,
    RecurringLessonsCreated,
)
from ..services.events import emit_lesson_event
from ..services.scheduling import Role, expand_weekly, find_lesson_conflict
from ..services.scheduling.dates import to_local_naive

router = APIRouter(prefix="/lessons", tags=["lessons"])


def ensure_slot_free(
    db: Session,
    teacher_id: int,
    student_id: Optional[int],
    start: datetime,
    end: datetime,
    exclude_id: Optional[int] = None,
    detail: str = "{} has another lesson near that time",
) -> None:
    """Raise 409 if teacher or student has a lesson within the buffer."""
    buffer_minutes = settings.scheduling_buffer_min

    if find_lesson_conflict(db, Role.TEACHER, teacher_id, start, end, buffer_minutes, exclude_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail.format("Teacher"),
        )
    if student_id and find_lesson_conflict(db, Role.STUDENT, student_id, start, end, buffer_minutes, exclude_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail.format("Student"),
        )


def _get_lesson(db: Session, id: int) -> DBLessons:
    obj = db.get(DBLessons, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.get("/", response_model=list[LessonRead])
def list_lessons(
    teacher_id: Optional[int] = None,
    student_id: Optional[int] = None,
    series_id: Optional[int] = None,
    include_cancelled: bool = False,
    db: Session = Depends(get_db),
):
    q = db.query(DBLessons)

    if teacher_id:
        q = q.filter(DBLessons.teacher_id == teacher_id)

    if student_id:
        q = q.filter(DBLessons.student_id == student_id)

    if series_id:
        q = q.filter(DBLessons.series_id == series_id)

    if not include_cancelled:
        q = q.filter(DBLessons.status != "cancelled")

    return q.order_by(DBLessons.starts_at).all()


@router.get("/{id}", response_model=LessonRead)
def get_lesson(id: int, db: Session = Depends(get_db)):
    return _get_lesson(db, id)


@router.post("/", response_model=LessonRead, status_code=status.HTTP_201_CREATED)
def create_lesson(
    data: LessonCreate,
    db: Session = Depends(get_db),
):
    start = to_local_naive(data.starts_at)
    end = start + timedelta(minutes=data.duration_minutes)

    ensure_slot_free(db, data.teacher_id, data.student_id, start, end)

    obj = DBLessons(
        **data.model_dump(exclude={"starts_at"}),
        starts_at=start,
        ends_at=end,
        status="scheduled",
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)

    emit_lesson_event("lesson_created", obj)
    return obj


@router.post("/recurring", response_model=RecurringLessonsCreated, status_code=status.HTTP_201_CREATED)
def create_recurring_lessons(
    data: RecurringLessonCreate,
    db: Session = Depends(get_db),
):
    """
    Create a weekly series.

    Every occurrence is checked before anything is written; one
    conflicting occurrence rejects the whole series with 409.
    """
    first = to_local_naive(data.starts_at)
    duration = timedelta(minutes=data.duration_minutes)
    starts = expand_weekly(first, data.count, data.interval, data.by_day)

    for start in starts:
        ensure_slot_free(
            db,
            data.teacher_id,
            data.student_id,
            start,
            start + duration,
            detail=f"{{}} has another lesson near {start:%Y-%m-%d %H:%M}",
        )

    series = DBRecurringSeries(
        title=data.title,
        teacher_id=data.teacher_id,
        student_id=data.student_id,
        starts_at=first,
        duration_minutes=data.duration_minutes,
        freq=data.freq,
        interval=data.interval,
        count=len(starts),
        by_day=",".join(str(d) for d in data.by_day),
    )
    db.add(series)
    db.flush()

    lessons = [
        DBLessons(
            title=data.title,
            teacher_id=data.teacher_id,
            student_id=data.student_id,
            starts_at=start,
            ends_at=start + duration,
            duration_minutes=data.duration_minutes,
            status="scheduled",
            series_id=series.id,
        )
        for start in starts
    ]
    db.add_all(lessons)
    db.commit()
    for lesson in lessons:
        db.refresh(lesson)

    emit_lesson_event("lesson_series_created", lessons[0])
    return RecurringLessonsCreated(
        series_id=series.id,
        created=len(lessons),
        lessons=[LessonRead.model_validate(lesson) for lesson in lessons],
    )


@router.put("/{id}", response_model=LessonRead)
def update_lesson(
    id: int,
    data: LessonUpdate,
    db: Session = Depends(get_db),
):
    """Move and/or retitle a lesson. The new time must be free, ignoring the lesson itself."""
    obj = _get_lesson(db, id)

    start = to_local_naive(data.starts_at) if data.starts_at else obj.starts_at
    duration = data.duration_minutes or obj.duration_minutes
    end = start + timedelta(minutes=duration)
    new_status = data.status or obj.status

    moved = start != obj.starts_at or end != obj.ends_at
    reactivated = obj.status == "cancelled" and new_status != "cancelled"
    if new_status != "cancelled" and (moved or reactivated):
        ensure_slot_free(
            db,
            obj.teacher_id,
            obj.student_id,
            start,
            end,
            exclude_id=obj.id,
            detail="{} conflict at new time",
        )

    previous_status = obj.status
    obj.starts_at = start
    obj.ends_at = end
    obj.duration_minutes = duration
    obj.status = new_status
    if data.title is not None:
        obj.title = data.title
    obj.updated_at = datetime.now()

    db.commit()
    db.refresh(obj)

    if new_status == "cancelled" and previous_status != "cancelled":
        emit_lesson_event("lesson_cancelled", obj)
    elif moved:
        emit_lesson_event("lesson_rescheduled", obj)
    return obj


@router.patch("/{id}/status", response_model=LessonRead)
def update_lesson_status(
    id: int,
    data: LessonStatusUpdate,
    db: Session = Depends(get_db),
):
    obj = _get_lesson(db, id)

    if obj.status == "cancelled" and data.status != "cancelled":
        # Re-activating must not bypass the overlap check
        ensure_slot_free(db, obj.teacher_id, obj.student_id, obj.starts_at, obj.ends_at, exclude_id=obj.id)

    previous = obj.status
    obj.status = data.status
    if data.attended is not None:
        obj.attended = int(data.attended)
    obj.updated_at = datetime.now()

    db.commit()
    db.refresh(obj)

    if data.status == "cancelled" and previous != "cancelled":
        emit_lesson_event("lesson_cancelled", obj)
    return obj


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
