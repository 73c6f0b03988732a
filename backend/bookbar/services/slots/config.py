# backend/bookbar/services/slots/config.py
"""
Slot settings and "HH:MM" / "YYYY-MM-DD" helpers shared by the slots engine,
admission and time-off validation.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$|^24:00$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class SlotSettings:
    """
    Working-hours configuration for slot generation.

    Attributes:
        open_hour: First bookable hour of the day (0-23)
        close_hour: Hour by which every appointment must end (1-24)
        slot_interval_minutes: Step between candidate start times
        min_notice_days: Earliest bookable day relative to today
            (1 = tomorrow; same-day bookings are never offered)
    """
    open_hour: int = 9
    close_hour: int = 17
    slot_interval_minutes: int = 30
    min_notice_days: int = 1

    def __post_init__(self):
        if not 0 <= self.open_hour < self.close_hour <= 24:
            raise ValueError(
                f"open_hour/close_hour must satisfy 0 <= open < close <= 24, "
                f"got {self.open_hour}/{self.close_hour}"
            )
        if self.slot_interval_minutes <= 0:
            raise ValueError(
                f"slot_interval_minutes must be positive, got {self.slot_interval_minutes}"
            )

    @property
    def open_minutes(self) -> int:
        return self.open_hour * 60

    @property
    def close_minutes(self) -> int:
        return self.close_hour * 60

    def min_bookable_date(self, now: datetime) -> date:
        """First calendar day on which a booking may be made."""
        return now.date() + timedelta(days=self.min_notice_days)


def is_valid_time_str(value) -> bool:
    return isinstance(value, str) and bool(TIME_RE.match(value))


def is_valid_date_str(value) -> bool:
    if not isinstance(value, str) or not DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight ("24:00" → 1440)."""
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
