from .tables import (
    AddOns,
    Base,
    BookingDayLocks,
    Bookings,
    BusinessSettings,
    Services,
    TimeOffBlocks,
    metadata,
)

__all__ = [
    "AddOns",
    "Base",
    "BookingDayLocks",
    "Bookings",
    "BusinessSettings",
    "Services",
    "TimeOffBlocks",
    "metadata",
]
