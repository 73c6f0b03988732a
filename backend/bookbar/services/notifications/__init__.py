from .base import SendResult
from .sender import NotificationSender, deliver_booking_event

__all__ = [
    "SendResult",
    "NotificationSender",
    "deliver_booking_event",
]
