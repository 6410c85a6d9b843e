# backend/app/schemas/scheduling.py
"""
Pydantic schemas for slot suggestion API.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class SuggestRequest(BaseModel):
    """Request for lesson slot suggestions."""
    teacher_id: Optional[int] = None
    student_id: Optional[int] = None
    from_: Optional[datetime] = Field(None, alias="from", description="Defaults to now")
    days: int = Field(7, ge=1, le=90)
    duration_minutes: int = Field(60, le=240)
    step_minutes: int = Field(15, ge=5, le=240)
    buffer_minutes: Optional[int] = Field(None, ge=0, le=240, description="Defaults to SCHEDULING_BUFFER_MIN")
    max_suggestions: int = Field(5, ge=1, le=100)
    algorithm: str = Field("greedy", description="greedy | backtracking")
    chunk_days: int = Field(7, ge=1, le=90)
    max_chunks: int = Field(4, ge=1, le=26)

    model_config = {"populate_by_name": True}


class SuggestionRead(BaseModel):
    start: datetime
    end: datetime
    duration_minutes: int
    algorithm: str

    model_config = {"from_attributes": True}


class SuggestResponse(BaseModel):
    ok: bool = True
    suggestions: list[SuggestionRead]


class SchedulingLogRead(BaseModel):
    id: int
    algorithm: str
    teacher_id: int
    student_id: int
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    suggestions: str
    created_at: datetime

    model_config = {"from_attributes": True}
