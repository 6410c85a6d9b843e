# backend/app/schemas/holidays.py

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel


class HolidayCreate(BaseModel):
    date: date
    title: Optional[str] = None

    model_config = {"from_attributes": True}


class HolidayRead(BaseModel):
    id: int
    date: date
    title: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
