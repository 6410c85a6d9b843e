# backend/app/routers/availability.py
# PUT replaces weekly rules and exceptions as a whole

import json
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import (
    Availability as DBAvailability,
    Users as DBUsers,
)
from ..schemas.availability import AvailabilityRead, AvailabilityUpdate

router = APIRouter(prefix="/availability", tags=["availability"])


def _to_read(obj: DBAvailability) -> AvailabilityRead:
    return AvailabilityRead(
        user_id=obj.user_id,
        weekly_rules=json.loads(obj.weekly_rules or "[]"),
        exceptions=json.loads(obj.exceptions or "[]"),
        timezone=obj.timezone,
        updated_at=obj.updated_at,
    )


@router.get("/{user_id}", response_model=AvailabilityRead)
def get_availability(user_id: int, db: Session = Depends(get_db)):
    obj = db.query(DBAvailability).filter(DBAvailability.user_id == user_id).first()
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return _to_read(obj)


@router.put("/{user_id}", response_model=AvailabilityRead)
def put_availability(
    user_id: int,
    data: AvailabilityUpdate,
    db: Session = Depends(get_db),
):
    if not db.get(DBUsers, user_id):
        raise HTTPException(status_code=404, detail="User not found")

    payload = data.model_dump(mode="json")

    obj = db.query(DBAvailability).filter(DBAvailability.user_id == user_id).first()
    if not obj:
        obj = DBAvailability(user_id=user_id)
        db.add(obj)

    obj.weekly_rules = json.dumps(payload["weekly_rules"])
    obj.exceptions = json.dumps(payload["exceptions"])
    obj.timezone = data.timezone
    obj.updated_at = datetime.now()

    db.commit()
    db.refresh(obj)
    return _to_read(obj)


@router.delete("/{user_id}", status_code=204)
def delete_availability(user_id: int, db: Session = Depends(get_db)):
    obj = db.query(DBAvailability).filter(DBAvailability.user_id == user_id).first()
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(obj)
    db.commit()
