# backend/bookbar/services/slots/overlap.py
"""
Interval overlap primitive.

Every overlap decision (slot vs booking, slot vs time-off, booking vs booking,
time-off vs booking) goes through ranges_overlap(). Endpoints are resolved to
naive local instants: calendar day + minutes offset, no timezone conversion.
"""

from datetime import date, datetime, timedelta

from .config import time_str_to_minutes


def resolve_instant(date_str: str, time_str: str) -> datetime:
    """Resolve "YYYY-MM-DD" + "HH:MM" to an instant ("24:00" = next midnight)."""
    day = date.fromisoformat(date_str)
    return datetime(day.year, day.month, day.day) + timedelta(
        minutes=time_str_to_minutes(time_str)
    )


def ranges_overlap(
    a_start_date: str,
    a_start_time: str,
    a_end_date: str,
    a_end_time: str,
    b_start_date: str,
    b_start_time: str,
    b_end_date: str,
    b_end_time: str,
) -> bool:
    """
    True iff the half-open ranges [a_start, a_end) and [b_start, b_end) intersect.

    Zero-length or inverted ranges never overlap anything.
    """
    a_start = resolve_instant(a_start_date, a_start_time)
    a_end = resolve_instant(a_end_date, a_end_time)
    b_start = resolve_instant(b_start_date, b_start_time)
    b_end = resolve_instant(b_end_date, b_end_time)

    if a_start >= a_end or b_start >= b_end:
        return False
    return a_start < b_end and a_end > b_start


def slot_overlaps_booking(day: str, start_time: str, end_time: str, booking) -> bool:
    """Overlap of a same-day window with a booking (bookings never span midnight)."""
    return ranges_overlap(
        day, start_time, day, end_time,
        booking.date, booking.start_time, booking.date, booking.end_time,
    )


def booking_overlaps_block(day: str, start_time: str, end_time: str, block) -> bool:
    """Overlap of a same-day window with a (possibly multi-day) time-off block."""
    return ranges_overlap(
        day, start_time, day, end_time,
        block.start_date, block.start_time, block.end_date, block.end_time,
    )
