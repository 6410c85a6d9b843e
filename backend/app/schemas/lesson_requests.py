# backend/app/schemas/lesson_requests.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class LessonRequestCreate(BaseModel):
    teacher_id: int
    student_id: int
    title: str = "Scheduled Lesson"

    starts_at: datetime
    duration_minutes: int = Field(60, ge=15, le=240)

    model_config = {"from_attributes": True}


class LessonRequestRead(BaseModel):
    id: int
    teacher_id: int
    student_id: int
    title: str

    starts_at: datetime
    duration_minutes: int

    status: str
    lesson_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
