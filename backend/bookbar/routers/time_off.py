# backend/bookbar/routers/time_off.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..schemas.time_off import TimeOffCreate, TimeOffRead
from ..services import time_off

router = APIRouter(
    prefix="/admin/time-off",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=list[TimeOffRead])
def list_blocks(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    db: Session = Depends(get_db),
):
    return time_off.list_blocks(db, date_from, date_to)


@router.post("", response_model=TimeOffRead, status_code=status.HTTP_201_CREATED)
def create_block(data: TimeOffCreate, db: Session = Depends(get_db)):
    return time_off.create_block(
        db, data.start_date, data.start_time, data.end_date, data.end_time
    )


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_block(id: int, db: Session = Depends(get_db)):
    time_off.delete_block(db, id)
