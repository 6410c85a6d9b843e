# backend/app/schemas/global_settings.py

from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator


class GlobalSettingsUpdate(BaseModel):
    open_hour: int = Field(9, ge=0, le=23)
    close_hour: int = Field(21, ge=1, le=24, description="Exclusive, 24 = midnight")
    days_open: list[int] = Field(default_factory=lambda: list(range(7)), description="0 = Sunday")

    @field_validator("days_open")
    @classmethod
    def validate_days(cls, v: list[int]) -> list[int]:
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("days_open entries must be 0..6")
        return sorted(set(v))

    @model_validator(mode="after")
    def close_after_open(self):
        if self.close_hour <= self.open_hour:
            raise ValueError("close_hour must be after open_hour")
        return self


class GlobalSettingsRead(BaseModel):
    id: int | None = None
    open_hour: int
    close_hour: int
    days_open: list[int]
    updated_at: datetime | None = None
