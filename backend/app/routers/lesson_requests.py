# backend/app/routers/lesson_requests.py
"""
Lesson requests.

A student asks for a time; the teacher approves or rejects it.
Approval re-runs the buffered overlap check, because the slot may have
been taken since the request was made, and creates the lesson.
"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import (
    LessonRequests as DBLessonRequests,
    Lessons as DBLessons,
)
from ..schemas.lesson_requests import LessonRequestCreate, LessonRequestRead
from ..services.events import emit_request_event
from ..services.scheduling.dates import to_local_naive
from .lessons import ensure_slot_free

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lesson_requests", tags=["lesson_requests"])


def _get_pending(db: Session, id: int) -> DBLessonRequests:
    obj = db.get(DBLessonRequests, id)
    if not obj or obj.status != "pending":
        raise HTTPException(status_code=404, detail="Request not found")
    return obj


@router.get("/", response_model=list[LessonRequestRead])
def list_lesson_requests(
    teacher_id: Optional[int] = None,
    student_id: Optional[int] = None,
    status_filter: Optional[str] = "pending",
    db: Session = Depends(get_db),
):
    q = db.query(DBLessonRequests)

    if teacher_id:
        q = q.filter(DBLessonRequests.teacher_id == teacher_id)

    if student_id:
        q = q.filter(DBLessonRequests.student_id == student_id)

    if status_filter:
        q = q.filter(DBLessonRequests.status == status_filter)

    return q.order_by(DBLessonRequests.created_at.desc(), DBLessonRequests.id.desc()).all()


@router.post("/", response_model=LessonRequestRead, status_code=status.HTTP_201_CREATED)
def create_lesson_request(
    data: LessonRequestCreate,
    db: Session = Depends(get_db),
):
    obj = DBLessonRequests(**data.model_dump(exclude={"starts_at"}), starts_at=to_local_naive(data.starts_at))
    db.add(obj)
    db.commit()
    db.refresh(obj)

    emit_request_event("lesson_request_created", obj)
    return obj


@router.post("/{id}/approve", response_model=LessonRequestRead)
def approve_lesson_request(id: int, db: Session = Depends(get_db)):
    req = _get_pending(db, id)

    start = req.starts_at
    end = start + timedelta(minutes=req.duration_minutes)
    ensure_slot_free(db, req.teacher_id, req.student_id, start, end)

    lesson = DBLessons(
        title=req.title,
        teacher_id=req.teacher_id,
        student_id=req.student_id,
        starts_at=start,
        ends_at=end,
        duration_minutes=req.duration_minutes,
        status="scheduled",
    )
    db.add(lesson)
    db.flush()

    req.status = "approved"
    req.lesson_id = lesson.id
    db.commit()
    db.refresh(req)

    logger.info(f"lesson request {req.id} approved → lesson {lesson.id}")
    emit_request_event("lesson_request_approved", req)
    return req


@router.post("/{id}/reject", response_model=LessonRequestRead)
def reject_lesson_request(id: int, db: Session = Depends(get_db)):
    req = _get_pending(db, id)
    req.status = "rejected"
    db.commit()
    db.refresh(req)

    emit_request_event("lesson_request_rejected", req)
    return req
