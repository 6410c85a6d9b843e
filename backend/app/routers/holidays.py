# backend/app/routers/holidays.py
# PATCH = 405, DELETE = ALLOWED (hard)

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Holidays as DBHolidays
from ..schemas.holidays import (
    HolidayCreate,
    HolidayRead,
)

router = APIRouter(prefix="/holidays", tags=["holidays"])


@router.get("/", response_model=list[HolidayRead])
def list_holidays(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    q = db.query(DBHolidays)

    if start_date:
        q = q.filter(DBHolidays.date >= start_date)

    if end_date:
        q = q.filter(DBHolidays.date <= end_date)

    return q.order_by(DBHolidays.date).all()


@router.post("/", response_model=HolidayRead, status_code=status.HTTP_201_CREATED)
def create_holiday(
    data: HolidayCreate,
    db: Session = Depends(get_db),
):
    if db.query(DBHolidays).filter(DBHolidays.date == data.date).first():
        raise HTTPException(status_code=409, detail="Holiday already exists for this date")

    obj = DBHolidays(**data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holiday(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBHolidays, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(obj)
    db.commit()
