# backend/app/routers/scheduling.py
"""
Scheduling API endpoints.

POST /scheduling/suggest - Suggest bookable lesson slots (greedy / backtracking)
GET  /scheduling/logs    - Read-only trace of past suggestion runs
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models.generated import SchedulingLogs as DBSchedulingLogs
from ..schemas.scheduling import (
    SchedulingLogRead,
    SuggestionRead,
    SuggestRequest,
    SuggestResponse,
)
from ..services.scheduling import (
    InvalidSlotRequest,
    SchedulingStoreError,
    SlotRequest,
    SlotScheduler,
    build_scheduler,
)
from ..services.scheduling.dates import to_local_naive

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduling", tags=["scheduling"])


def get_scheduler() -> SlotScheduler:
    return build_scheduler()


@router.post("/suggest", response_model=SuggestResponse)
async def suggest_slots(
    data: SuggestRequest,
    scheduler: SlotScheduler = Depends(get_scheduler),
):
    """Suggest lesson slots free for both teacher and student."""
    buffer_minutes = data.buffer_minutes
    if buffer_minutes is None:
        buffer_minutes = settings.scheduling_buffer_min

    request = SlotRequest(
        teacher_id=data.teacher_id,
        student_id=data.student_id,
        from_=to_local_naive(data.from_),
        days=data.days,
        duration_minutes=data.duration_minutes,
        step_minutes=data.step_minutes,
        buffer_minutes=buffer_minutes,
        max_suggestions=data.max_suggestions,
        algorithm=data.algorithm,
        chunk_days=data.chunk_days,
        max_chunks=data.max_chunks,
    )

    try:
        suggestions = await scheduler.suggest_slots(request)
    except InvalidSlotRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SchedulingStoreError:
        logger.exception("POST /scheduling/suggest store failure")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scheduling data is temporarily unavailable",
        )

    return SuggestResponse(
        suggestions=[SuggestionRead.model_validate(s) for s in suggestions],
    )


@router.get("/logs", response_model=list[SchedulingLogRead])
def list_scheduling_logs(
    algorithm: Optional[str] = None,
    teacher_id: Optional[int] = None,
    student_id: Optional[int] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    """
    Read-only scheduling log.

    Filters:
    - algorithm (greedy / backtracking)
    - teacher_id, student_id
    - limit (default 50, max enforced here)
    """
    q = db.query(DBSchedulingLogs)

    if algorithm:
        q = q.filter(DBSchedulingLogs.algorithm == algorithm)

    if teacher_id:
        q = q.filter(DBSchedulingLogs.teacher_id == teacher_id)

    if student_id:
        q = q.filter(DBSchedulingLogs.student_id == student_id)

    return (
        q.order_by(DBSchedulingLogs.created_at.desc(), DBSchedulingLogs.id.desc())
        .limit(min(limit, 200))
        .all()
    )


@router.get("/logs/{id}", response_model=SchedulingLogRead)
def get_scheduling_log(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBSchedulingLogs, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj
