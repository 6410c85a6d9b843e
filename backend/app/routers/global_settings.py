# backend/app/routers/global_settings.py
# PUT appends a row; the most recently updated row is the one in effect

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import GlobalSettings as DBGlobalSettings
from ..schemas.global_settings import GlobalSettingsRead, GlobalSettingsUpdate
from ..services.scheduling.sql_store import parse_days_open

router = APIRouter(prefix="/settings", tags=["settings"])


def _to_read(obj: DBGlobalSettings) -> GlobalSettingsRead:
    return GlobalSettingsRead(
        id=obj.id,
        open_hour=obj.open_hour,
        close_hour=obj.close_hour,
        days_open=sorted(parse_days_open(obj.days_open)),
        updated_at=obj.updated_at,
    )


@router.get("/global", response_model=GlobalSettingsRead)
def get_global_settings(db: Session = Depends(get_db)):
    obj = (
        db.query(DBGlobalSettings)
        .order_by(DBGlobalSettings.updated_at.desc(), DBGlobalSettings.id.desc())
        .first()
    )
    if not obj:
        # Nothing stored: open all day, every day
        return GlobalSettingsRead(open_hour=0, close_hour=24, days_open=list(range(7)))
    return _to_read(obj)


@router.put("/global", response_model=GlobalSettingsRead)
def put_global_settings(
    data: GlobalSettingsUpdate,
    db: Session = Depends(get_db),
):
    obj = DBGlobalSettings(
        open_hour=data.open_hour,
        close_hour=data.close_hour,
        days_open=",".join(str(d) for d in data.days_open),
        updated_at=datetime.now(),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return _to_read(obj)
