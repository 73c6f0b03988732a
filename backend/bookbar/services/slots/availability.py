# backend/bookbar/services/slots/availability.py
"""
Service availability: free slots for one day, and a per-day
"has at least one slot" map for a date range.

Both go through calculate_day_slots(), so the calendar view can never
disagree with the slot list for the same day.
"""

from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from ...errors import ValidationError
from ...models import Bookings, Services, TimeOffBlocks
from .calculator import Slot, generate_day_slots
from .config import SlotSettings

MAX_RANGE_DAYS = 93


def calculate_day_slots(
    db: Session,
    service: Services,
    target_date: date,
    config: SlotSettings,
    now: datetime | None = None,
    bookings: list | None = None,
    blocks: list | None = None,
) -> list[Slot]:
    """
    Free slots for `service` on `target_date`.

    Dates before the minimum-notice date have no slots. `bookings` / `blocks`
    may be passed pre-fetched; otherwise they are loaded for the day.
    """
    now = now or datetime.now()
    if target_date < config.min_bookable_date(now):
        return []

    if bookings is None or blocks is None:
        day_bookings, day_blocks = load_day_context(db, target_date)
        bookings = day_bookings if bookings is None else bookings
        blocks = day_blocks if blocks is None else blocks

    return generate_day_slots(
        target_date,
        config.open_hour,
        config.close_hour,
        config.slot_interval_minutes,
        service.duration_min,
        bookings=bookings,
        blocks=blocks,
        now=now,
    )


def calculate_availability(
    db: Session,
    service: Services,
    date_from: date,
    date_to: date,
    config: SlotSettings,
    now: datetime | None = None,
) -> dict[str, bool]:
    """
    Map "YYYY-MM-DD" → has at least one free slot, for every day in
    [date_from, date_to].
    """
    if date_from > date_to:
        raise ValidationError("'from' must be on or before 'to'")
    if (date_to - date_from).days + 1 > MAX_RANGE_DAYS:
        raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")

    now = now or datetime.now()
    start_str = date_from.isoformat()
    end_str = date_to.isoformat()

    # One query each for the whole range, filtered per day below
    range_bookings = (
        db.query(Bookings)
        .filter(
            Bookings.date >= start_str,
            Bookings.date <= end_str,
            Bookings.status != "cancelled",
        )
        .all()
    )
    range_blocks = (
        db.query(TimeOffBlocks)
        .filter(
            TimeOffBlocks.start_date <= end_str,
            TimeOffBlocks.end_date >= start_str,
        )
        .all()
    )

    result: dict[str, bool] = {}
    day = date_from
    while day <= date_to:
        day_str = day.isoformat()
        day_bookings = [b for b in range_bookings if b.date == day_str]
        day_blocks = [
            blk for blk in range_blocks
            if blk.start_date <= day_str <= blk.end_date
        ]
        slots = calculate_day_slots(
            db, service, day, config, now,
            bookings=day_bookings, blocks=day_blocks,
        )
        result[day_str] = bool(slots)
        day += timedelta(days=1)

    return result


# ── Helpers ──────────────────────────────────────────────────────────────


def load_day_context(db: Session, target_date: date) -> tuple[list, list]:
    """Non-cancelled bookings on the day and time-off blocks touching it."""
    day_str = target_date.isoformat()

    bookings = (
        db.query(Bookings)
        .filter(Bookings.date == day_str, Bookings.status != "cancelled")
        .order_by(Bookings.start_time)
        .all()
    )
    blocks = (
        db.query(TimeOffBlocks)
        .filter(
            TimeOffBlocks.start_date <= day_str,
            TimeOffBlocks.end_date >= day_str,
        )
        .all()
    )
    return bookings, blocks
