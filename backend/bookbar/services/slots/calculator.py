# backend/bookbar/services/slots/calculator.py
"""
Slot generation for one service on one day.

Pure function of its inputs: no database, no clock. Callers pass the
bookings and time-off blocks that matter for the day plus "now".

Contains:
✓ working hours (open / close)
✓ slot interval and service duration
✓ existing bookings and time-off blocks (via ranges_overlap)
✓ past-time filter when the date is today

Does NOT contain:
✗ Minimum-notice policy (applied in availability.py)
✗ Cancelled-booking filtering (callers pass live bookings only)
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from .config import minutes_to_time_str
from .overlap import booking_overlaps_block, resolve_instant, slot_overlaps_booking


@dataclass(frozen=True)
class Slot:
    start_time: str  # HH:MM
    end_time: str  # HH:MM


def generate_day_slots(
    target_date: date,
    open_hour: int,
    close_hour: int,
    interval_min: int,
    duration_min: int,
    bookings: Iterable = (),
    blocks: Iterable = (),
    now: datetime | None = None,
) -> list[Slot]:
    """
    Candidate start times step from open by interval_min; each candidate spans
    [start, start + duration_min). Generation stops at the first candidate that
    would end after close. Candidates overlapping a booking or block are dropped,
    and on today's date so is any candidate that has already ended.

    Returns:
        Slots ordered earliest first. Empty list = nothing bookable.
    """
    if interval_min <= 0 or duration_min <= 0:
        return []

    day = target_date.isoformat()
    bookings = list(bookings)
    blocks = list(blocks)
    is_today = now is not None and now.date() == target_date

    open_min = open_hour * 60
    close_min = close_hour * 60

    slots: list[Slot] = []
    cursor = open_min
    while cursor + duration_min <= close_min:
        start = minutes_to_time_str(cursor)
        end = minutes_to_time_str(cursor + duration_min)
        cursor += interval_min

        if is_today and resolve_instant(day, end) <= now:
            continue
        if any(slot_overlaps_booking(day, start, end, b) for b in bookings):
            continue
        if any(booking_overlaps_block(day, start, end, blk) for blk in blocks):
            continue

        slots.append(Slot(start_time=start, end_time=end))

    return slots
