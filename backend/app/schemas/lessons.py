# backend/app/schemas/lessons.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator


class LessonCreate(BaseModel):
    title: str = Field(min_length=1)
    teacher_id: int
    student_id: Optional[int] = None

    starts_at: datetime
    duration_minutes: int = Field(60, ge=15, le=240)

    model_config = {"from_attributes": True}


class LessonUpdate(BaseModel):
    """Reschedule and/or retitle. Omitted fields keep their value."""
    title: Optional[str] = Field(None, min_length=1)
    starts_at: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, ge=15, le=240)
    status: Optional[Literal["scheduled", "completed", "cancelled"]] = None


class LessonStatusUpdate(BaseModel):
    status: Literal["scheduled", "completed", "cancelled"]
    attended: Optional[bool] = None


class RecurringLessonCreate(BaseModel):
    """Weekly series. by_day uses 0 = Sunday; empty = weekday of starts_at."""
    title: str = Field(min_length=1)
    teacher_id: int
    student_id: Optional[int] = None

    starts_at: datetime
    duration_minutes: int = Field(60, ge=15, le=240)

    freq: Literal["weekly"] = "weekly"
    interval: int = Field(1, ge=1, le=8, description="Every N weeks")
    count: int = Field(10, ge=1, le=100, description="Total occurrences")
    by_day: list[int] = []

    @field_validator("by_day")
    @classmethod
    def validate_days(cls, v: list[int]) -> list[int]:
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("by_day entries must be 0..6")
        return sorted(set(v))


class LessonRead(BaseModel):
    id: int

    title: str
    teacher_id: int
    student_id: Optional[int] = None

    starts_at: datetime
    ends_at: datetime
    duration_minutes: int

    status: str
    attended: bool
    series_id: Optional[int] = None

    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RecurringLessonsCreated(BaseModel):
    ok: bool = True
    series_id: int
    created: int
    lessons: list[LessonRead]
