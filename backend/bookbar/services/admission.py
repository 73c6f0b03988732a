# backend/bookbar/services/admission.py
"""
Booking admission and admin-side booking management.

admit_booking() is the only path that creates bookings:

1. Validate the request (fields, contact/notification consistency,
   minimum notice, formats, length limits)
2. Validate the deposit against the service's current price
3. Take the per-day admission lock, then read live bookings and
   time-off blocks for the day
4-5. Reject overlaps with ConflictError
6. Insert in pending_deposit with the price snapshot, commit
7. Emit booking_created (fire-and-forget)
"""

import logging
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Bookings, Services
from . import booking_states as states
from .business import BusinessConfig
from .day_locks import lock_days
from .events import EventQueue
from .slots.availability import load_day_context
from .slots.config import is_valid_date_str, is_valid_time_str, time_str_to_minutes
from .slots.overlap import booking_overlaps_block, slot_overlaps_booking

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is no longer available. Please choose another."

MAX_NAME = 200
MAX_EMAIL = 254
MAX_PHONE = 30
MAX_NOTES = 2000


def admit_booking(
    db: Session,
    request,
    config: BusinessConfig,
    events: EventQueue | None = None,
    now: datetime | None = None,
) -> Bookings:
    """
    Validate and persist a booking request.

    `request` is any object with the BookingCreate attributes.

    Raises:
        ValidationError, NotFoundError, ConflictError
    """
    now = now or datetime.now()
    fields = _validate_request(request, config, now)

    service = db.get(Services, request.service_id)
    if not service:
        raise NotFoundError("Service not found")
    if not service.active:
        raise ValidationError("This service is not currently available")

    deposit = round(float(request.deposit_amount), 2)
    if deposit < 0:
        raise ValidationError("Deposit cannot be negative")
    if deposit > service.price:
        raise ValidationError("Deposit cannot exceed service price")

    day = fields["date"]
    start_time = fields["start_time"]
    end_time = fields["end_time"]

    try:
        lock_days(db, [day], now=now)

        bookings, blocks = load_day_context(db, date.fromisoformat(day))
        if any(slot_overlaps_booking(day, start_time, end_time, b) for b in bookings):
            raise ConflictError(SLOT_TAKEN_MESSAGE)
        if any(booking_overlaps_block(day, start_time, end_time, blk) for blk in blocks):
            raise ConflictError(SLOT_TAKEN_MESSAGE)

        booking = Bookings(
            service_id=service.id,
            service_price=service.price,
            deposit_amount=deposit,
            status=states.PENDING_DEPOSIT,
            created_at=now,
            updated_at=now,
            **fields,
        )
        db.add(booking)
        db.commit()
    except ConflictError:
        db.rollback()
        logger.info(f"Admission conflict: {day} {start_time}-{end_time}")
        raise
    except IntegrityError:
        # Unique (date, start_time) index caught a concurrent insert
        db.rollback()
        logger.warning(f"Admission race lost on unique index: {day} {start_time}")
        raise ConflictError(SLOT_TAKEN_MESSAGE)

    db.refresh(booking)
    logger.info(
        f"Booking {booking.id} created: service={service.id} "
        f"{day} {start_time}-{end_time} deposit={deposit}"
    )

    if events is not None:
        events.emit("booking_created", {"booking_id": booking.id})
    return booking


def get_booking(db: Session, booking_id: str) -> Bookings:
    booking = db.get(Bookings, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def list_bookings(
    db: Session,
    date_from: str | None = None,
    date_to: str | None = None,
    status: str | None = None,
) -> list[Bookings]:
    query = db.query(Bookings)
    if date_from:
        query = query.filter(Bookings.date >= date_from)
    if date_to:
        query = query.filter(Bookings.date <= date_to)
    if status:
        if not states.is_valid_status(status):
            raise ValidationError("Invalid status filter")
        query = query.filter(Bookings.status == status)
    return query.order_by(Bookings.date, Bookings.start_time).all()


def set_booking_status(
    db: Session,
    booking_id: str,
    status: str,
    events: EventQueue | None = None,
    now: datetime | None = None,
) -> Bookings:
    """
    Admin status change.

    Re-applying the current status is a no-op (no notification). Moves not
    allowed by the state machine raise ValidationError.
    """
    if not states.is_valid_status(status):
        raise ValidationError("Invalid status. Use: pending_deposit | confirmed | cancelled")

    booking = get_booking(db, booking_id)
    current = booking.status
    if current == status:
        return booking
    if not states.can_transition(current, status):
        raise ValidationError(f"Cannot change status from {current} to {status}")

    now = now or datetime.now()
    updated = (
        db.query(Bookings)
        .filter(Bookings.id == booking_id, Bookings.status == current)
        .update({"status": status, "updated_at": now}, synchronize_session=False)
    )
    db.commit()
    db.refresh(booking)

    if not updated:
        # Changed underneath us (payment confirmation, expiry sweep)
        if booking.status == status:
            return booking
        raise ValidationError(f"Cannot change status from {booking.status} to {status}")

    logger.info(f"Booking {booking_id} status {current} → {status} (admin)")

    event_type = states.STATUS_EVENTS.get(status)
    if event_type and events is not None:
        events.emit(event_type, {"booking_id": booking_id})
    return booking


def delete_booking(db: Session, booking_id: str) -> None:
    booking = get_booking(db, booking_id)
    if booking.status != states.CANCELLED:
        raise ValidationError("Only cancelled bookings can be removed")
    db.delete(booking)
    db.commit()
    logger.info(f"Booking {booking_id} deleted")


# ── Helpers ──────────────────────────────────────────────────────────────


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _validate_request(request, config: BusinessConfig, now: datetime) -> dict:
    """Step 1 checks. Returns the normalised column values."""
    name = _clean(request.customer_name)
    email = _clean(request.customer_email)
    phone = _clean(request.customer_phone)
    notes = request.notes if isinstance(request.notes, str) else ""

    if (
        not request.service_id
        or not name
        or not request.date
        or not request.start_time
        or not request.end_time
        or request.deposit_amount is None
    ):
        raise ValidationError("Missing required fields")

    if len(name) > MAX_NAME:
        raise ValidationError("Name is too long")
    if len(email) > MAX_EMAIL:
        raise ValidationError("Email is too long")
    if len(phone) > MAX_PHONE:
        raise ValidationError("Phone number is too long")
    if len(notes) > MAX_NOTES:
        raise ValidationError("Notes are too long")

    if not email and not phone:
        raise ValidationError(
            "Please provide either an email address or phone number (or both)."
        )

    wants_email = request.notify_by_email is True
    wants_sms = request.notify_by_sms is True
    if not wants_email and not wants_sms:
        raise ValidationError(
            "Please select at least one notification method (email or SMS)."
        )
    if wants_email and not email:
        raise ValidationError("Email address is required if you want email notifications.")
    if wants_sms and not phone:
        raise ValidationError("Phone number is required if you want SMS notifications.")

    if not is_valid_time_str(request.start_time) or not is_valid_time_str(request.end_time):
        raise ValidationError("Invalid time format")
    if time_str_to_minutes(request.end_time) <= time_str_to_minutes(request.start_time):
        raise ValidationError("End time must be after start time")

    if not is_valid_date_str(request.date):
        raise ValidationError("Invalid date format")
    if date.fromisoformat(request.date) < config.min_bookable_date(now):
        raise ValidationError(
            "Bookings must be at least one day in advance. Please choose tomorrow or later."
        )

    return {
        "customer_name": name,
        "customer_email": email or None,
        "customer_phone": phone or None,
        "date": request.date,
        "start_time": request.start_time,
        "end_time": request.end_time,
        "notes": notes,
        "notify_by_email": wants_email,
        "notify_by_sms": wants_sms,
    }
