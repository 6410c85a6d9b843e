"""
backend/app/services/events.py

Lesson lifecycle events for the notification consumer (in-app
notifications, chat, e-mail). Events are JSON objects pushed to the
Redis list events:p2p and delivered to the teacher and student involved.

Emitting is best-effort: a Redis failure is logged and never reaches
the request that changed the lesson.
"""

import json
import time
import logging
from typing import Literal, Optional

from pydantic import BaseModel

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"

LessonEventType = Literal[
    "lesson_created",
    "lesson_rescheduled",
    "lesson_cancelled",
    "lesson_series_created",
]
RequestEventType = Literal[
    "lesson_request_created",
    "lesson_request_approved",
    "lesson_request_rejected",
]


class LessonEvent(BaseModel):
    type: LessonEventType
    lesson_id: int
    teacher_id: int
    student_id: Optional[int] = None
    starts_at: str
    series_id: Optional[int] = None
    ts: int


class LessonRequestEvent(BaseModel):
    type: RequestEventType
    request_id: int
    teacher_id: int
    student_id: int
    lesson_id: Optional[int] = None
    ts: int


def emit_event(event: BaseModel) -> None:
    """Push one event to the p2p queue."""
    try:
        redis_client.rpush(P2P_QUEUE, json.dumps(event.model_dump()))
        logger.info(f"Event emitted: {event.type} → {P2P_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event.type}: {e}")


def emit_lesson_event(event_type: LessonEventType, lesson) -> None:
    emit_event(LessonEvent(
        type=event_type,
        lesson_id=lesson.id,
        teacher_id=lesson.teacher_id,
        student_id=lesson.student_id,
        starts_at=lesson.starts_at.isoformat(),
        series_id=lesson.series_id,
        ts=int(time.time()),
    ))


def emit_request_event(event_type: RequestEventType, request) -> None:
    emit_event(LessonRequestEvent(
        type=event_type,
        request_id=request.id,
        teacher_id=request.teacher_id,
        student_id=request.student_id,
        lesson_id=request.lesson_id,
        ts=int(time.time()),
    ))
