# backend/bookbar/routers/bookings.py
# Customers create and view bookings; admins list, change status, delete cancelled.

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..dependencies import get_business_config, get_event_queue
from ..schemas.bookings import BookingAdminRead, BookingCreate, BookingRead, BookingStatusUpdate
from ..services import admission
from ..services.business import BusinessConfig
from ..services.events import EventQueue

router = APIRouter(prefix="/bookings", tags=["bookings"])
admin_router = APIRouter(
    prefix="/admin/bookings",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    business: BusinessConfig = Depends(get_business_config),
    events: EventQueue = Depends(get_event_queue),
):
    return admission.admit_booking(db, data, business, events)


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: str, db: Session = Depends(get_db)):
    return admission.get_booking(db, id)


@admin_router.get("", response_model=list[BookingAdminRead])
def list_bookings(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    return admission.list_bookings(db, date_from, date_to, status_filter)


@admin_router.patch("/{id}", response_model=BookingAdminRead)
def update_booking_status(
    id: str,
    data: BookingStatusUpdate,
    db: Session = Depends(get_db),
    events: EventQueue = Depends(get_event_queue),
):
    return admission.set_booking_status(db, id, data.status, events)


@admin_router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(id: str, db: Session = Depends(get_db)):
    admission.delete_booking(db, id)
