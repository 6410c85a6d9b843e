# backend/app/schemas/availability.py

import re
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from ..services.scheduling.dates import to_local_naive

HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class WeeklyRuleIn(BaseModel):
    """Recurring window. day: 0 = Sunday ... 6 = Saturday."""
    day: int = Field(ge=0, le=6)
    start: str = Field(description="HH:MM")
    end: str = Field(description="HH:MM")

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not HHMM_RE.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end <= self.start:
            raise ValueError("end must be after start (no overnight rules)")
        return self


class ExceptionSlotIn(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def as_local_time(cls, v: datetime) -> datetime:
        # Stored as naive local wall-clock time, like lessons
        return to_local_naive(v)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class ExceptionDayIn(BaseModel):
    """Replaces weekly rules on this date. No slots = closed."""
    date: date
    slots: list[ExceptionSlotIn] = []


class AvailabilityUpdate(BaseModel):
    weekly_rules: list[WeeklyRuleIn] = []
    exceptions: list[ExceptionDayIn] = []
    timezone: Optional[str] = None


class AvailabilityRead(BaseModel):
    user_id: int
    weekly_rules: list[WeeklyRuleIn]
    exceptions: list[ExceptionDayIn]
    timezone: Optional[str] = None
    updated_at: Optional[datetime] = None
