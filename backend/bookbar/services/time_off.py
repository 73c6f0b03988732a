# backend/bookbar/services/time_off.py
"""
Time-off blocks.

A block is checked against live bookings only when it is created; bookings
edited later are not re-validated against existing blocks.
"""

import logging
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Bookings, TimeOffBlocks
from . import booking_states as states
from .day_locks import lock_days
from .slots.config import is_valid_date_str, is_valid_time_str
from .slots.overlap import ranges_overlap, resolve_instant

logger = logging.getLogger(__name__)

BLOCK_CONFLICT_MESSAGE = (
    "A customer is already booked during this period. "
    "Remove or move the booking first, then add time off."
)


def create_block(
    db: Session,
    start_date: str,
    start_time: str,
    end_date: str,
    end_time: str,
    now: datetime | None = None,
) -> TimeOffBlocks:
    if not all(isinstance(v, str) and v for v in (start_date, start_time, end_date, end_time)):
        raise ValidationError(
            "start_date, start_time, end_date, end_time (YYYY-MM-DD, HH:MM) required"
        )
    if not (is_valid_date_str(start_date) and is_valid_date_str(end_date)):
        raise ValidationError("Invalid date format")
    if not (is_valid_time_str(start_time) and is_valid_time_str(end_time)):
        raise ValidationError("Invalid time format")
    if resolve_instant(end_date, end_time) <= resolve_instant(start_date, start_time):
        raise ValidationError("End date/time must be after start date/time")

    try:
        lock_days(db, _days_between(start_date, end_date), now=now)

        bookings = (
            db.query(Bookings)
            .filter(
                Bookings.date >= start_date,
                Bookings.date <= end_date,
                Bookings.status != states.CANCELLED,
            )
            .all()
        )
        if any(
            ranges_overlap(
                start_date, start_time, end_date, end_time,
                b.date, b.start_time, b.date, b.end_time,
            )
            for b in bookings
        ):
            raise ConflictError(BLOCK_CONFLICT_MESSAGE, code="time_off_conflict")

        block = TimeOffBlocks(
            start_date=start_date,
            start_time=start_time,
            end_date=end_date,
            end_time=end_time,
        )
        db.add(block)
        db.commit()
    except ConflictError:
        db.rollback()
        raise

    db.refresh(block)
    logger.info(f"Time-off block {block.id} created: {start_date} {start_time} → {end_date} {end_time}")
    return block


def list_blocks(
    db: Session,
    date_from: str | None = None,
    date_to: str | None = None,
) -> list[TimeOffBlocks]:
    query = db.query(TimeOffBlocks)
    if date_from:
        query = query.filter(TimeOffBlocks.end_date >= date_from)
    if date_to:
        query = query.filter(TimeOffBlocks.start_date <= date_to)
    return query.order_by(TimeOffBlocks.start_date, TimeOffBlocks.start_time).all()


def delete_block(db: Session, block_id: int) -> None:
    block = db.get(TimeOffBlocks, block_id)
    if not block:
        raise NotFoundError("Time-off block not found")
    db.delete(block)
    db.commit()
    logger.info(f"Time-off block {block_id} deleted")


# ── Helpers ──────────────────────────────────────────────────────────────


def _days_between(start_date: str, end_date: str) -> list[str]:
    day = date.fromisoformat(start_date)
    last = date.fromisoformat(end_date)
    days = []
    while day <= last:
        days.append(day.isoformat())
        day += timedelta(days=1)
    return days
