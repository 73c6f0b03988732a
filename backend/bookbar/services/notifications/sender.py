# backend/bookbar/services/notifications/sender.py
"""
Booking notification delivery.

Routing per event:
- customer e-mail: when the customer asked for e-mail and gave an address
- customer SMS: when the customer asked for SMS (never for booking_created)
- owner e-mail: when a business e-mail is configured (never for reminders)
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ...config import get_settings
from ...models import Bookings
from . import messages
from .base import EmailTransport, SendResult, SmsTransport
from .email import ResendEmailTransport
from .sms import SmsWorksTransport, format_uk_phone_to_e164

logger = logging.getLogger(__name__)

TEST_SMS_TEXT = "{business}: test message. If you received this, SMS notifications are working."


@dataclass
class NotificationSender:
    email: EmailTransport
    sms: SmsTransport
    app_url: str

    @classmethod
    def from_settings(cls) -> "NotificationSender":
        settings = get_settings()
        return cls(
            email=ResendEmailTransport.from_settings(settings),
            sms=SmsWorksTransport.from_settings(settings),
            app_url=settings.app_url,
        )


def deliver_booking_event(
    db: Session,
    sender: NotificationSender,
    business,
    event_type: str,
    booking_id: str,
) -> SendResult:
    """
    Deliver every message `event_type` calls for.

    ok is True only when each attempted message went out; errors of the
    failed ones are joined into `error`.
    """
    if event_type not in messages.EVENT_TYPES:
        return SendResult.failure(f"Unknown event type: {event_type}")

    booking = db.get(Bookings, booking_id)
    if not booking:
        return SendResult.failure("Booking not found")

    details = messages.BookingDetails.from_booking(booking)
    business_name = business.business_name
    errors: list[str] = []

    if details.notify_by_email and details.customer_email:
        content = messages.customer_email(event_type, details, business_name, sender.app_url)
        if content:
            _collect(errors, "customer email", sender.email.send(details.customer_email, content.subject, content.html))

    if details.notify_by_sms and details.customer_phone:
        text = messages.customer_sms(event_type, details, business_name)
        number = format_uk_phone_to_e164(details.customer_phone)
        if text and number:
            _collect(errors, "customer sms", sender.sms.send(number, text))

    owner_address = (business.business_email or "").strip()
    if owner_address:
        content = messages.owner_email(event_type, details, business_name)
        if content:
            _collect(errors, "owner email", sender.email.send(owner_address, content.subject, content.html))

    if errors:
        logger.warning(f"{event_type} for booking={booking_id} partially failed: {errors}")
        return SendResult.failure("; ".join(errors))

    logger.info(f"{event_type} delivered for booking={booking_id}")
    return SendResult.success()


def send_test_sms(sender: NotificationSender, phone: str, business_name: str) -> SendResult:
    number = format_uk_phone_to_e164(phone)
    if not number:
        return SendResult.failure("Invalid phone number")
    return sender.sms.send(number, TEST_SMS_TEXT.format(business=business_name))


# ── Helpers ──────────────────────────────────────────────────────────────


def _collect(errors: list[str], channel: str, result: SendResult) -> None:
    if not result.ok:
        errors.append(f"{channel}: {result.error}")
