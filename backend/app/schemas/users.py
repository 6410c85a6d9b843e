# backend/app/schemas/users.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    role: Literal["admin", "teacher", "student"] = "student"
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = None
    role: Optional[Literal["admin", "teacher", "student"]] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class UserRead(BaseModel):
    id: int
    name: str
    role: str
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
