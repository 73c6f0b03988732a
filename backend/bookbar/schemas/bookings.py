# backend/bookbar/schemas/bookings.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from .services import ServiceRead


class BookingCreate(BaseModel):
    # Optional fields: missing values are reported by admission as 400s
    service_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    deposit_amount: Optional[float] = None
    notes: Optional[str] = None
    notify_by_email: bool = False
    notify_by_sms: bool = False


class BookingStatusUpdate(BaseModel):
    status: str


class BookingRead(BaseModel):
    id: str
    service_id: int
    service_price: float
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    date: str
    start_time: str
    end_time: str
    deposit_amount: float
    status: str
    notify_by_email: bool
    notify_by_sms: bool
    notes: str
    balance_paid_online: bool
    deposit_refunded_at: Optional[datetime] = None
    balance_refunded_at: Optional[datetime] = None
    reminder_sent_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    service: Optional[ServiceRead] = None

    model_config = {"from_attributes": True}


class BookingAdminRead(BookingRead):
    deposit_payment_ref: Optional[str] = None
    balance_payment_ref: Optional[str] = None
