# backend/app/routers/users.py
# Teachers, students and admins. DELETE = deactivate (is_active = 0)
# A party with upcoming lessons cannot be deactivated; cancel the lessons first.

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import (
    Lessons as DBLessons,
    Users as DBUsers,
)
from ..schemas.users import (
    UserCreate,
    UserUpdate,
    UserRead,
)

router = APIRouter(prefix="/users", tags=["users"])


def _has_upcoming_lessons(db: Session, user_id: int) -> bool:
    return (
        db.query(DBLessons.id)
        .filter(
            or_(DBLessons.teacher_id == user_id, DBLessons.student_id == user_id),
            DBLessons.status == "scheduled",
            DBLessons.ends_at > datetime.now(),
        )
        .first()
        is not None
    )


@router.get("/", response_model=list[UserRead])
def list_users(
    role: Optional[Literal["admin", "teacher", "student"]] = None,
    q: Optional[str] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    query = db.query(DBUsers)

    if not include_inactive:
        query = query.filter(DBUsers.is_active == 1)

    if role:
        query = query.filter(DBUsers.role == role)

    if q:
        query = query.filter(DBUsers.name.ilike(f"%{q}%"))

    return query.order_by(DBUsers.name).all()


@router.get("/{id}", response_model=UserRead)
def get_user(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBUsers, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(data: UserCreate, db: Session = Depends(get_db)):
    if data.email and db.query(DBUsers).filter(DBUsers.email == data.email).first():
        raise HTTPException(status_code=409, detail="Email already registered")

    obj = DBUsers(**data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}", response_model=UserRead)
def update_user(
    id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
):
    obj = db.get(DBUsers, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    changes = data.model_dump(exclude_unset=True)

    role_changed = "role" in changes and changes["role"] != obj.role
    if (role_changed or changes.get("is_active") is False) and _has_upcoming_lessons(db, id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User has upcoming lessons",
        )

    for field, value in changes.items():
        setattr(obj, field, int(value) if field == "is_active" else value)

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_user(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBUsers, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    if _has_upcoming_lessons(db, id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User has upcoming lessons",
        )

    obj.is_active = 0
    db.commit()
