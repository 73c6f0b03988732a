# backend/bookbar/services/slots/__init__.py
"""
Slots calculation module.

overlap:      the single interval overlap primitive
calculator:   pure per-day slot generation
availability: database-backed day slots and range availability
"""

from .config import SlotSettings, minutes_to_time_str, time_str_to_minutes
from .overlap import booking_overlaps_block, ranges_overlap, resolve_instant, slot_overlaps_booking
from .calculator import Slot, generate_day_slots
from .availability import calculate_availability, calculate_day_slots, load_day_context

__all__ = [
    "SlotSettings",
    "minutes_to_time_str",
    "time_str_to_minutes",
    "ranges_overlap",
    "resolve_instant",
    "slot_overlaps_booking",
    "booking_overlaps_block",
    "Slot",
    "generate_day_slots",
    "calculate_day_slots",
    "calculate_availability",
    "load_day_context",
]
