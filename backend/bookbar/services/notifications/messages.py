# backend/bookbar/services/notifications/messages.py
"""
Message builders for booking notifications.

Every value that comes from a customer or admin is HTML-escaped before it is
placed into an email body.
"""

from dataclasses import dataclass
from datetime import date
from html import escape

BOOKING_CREATED = "booking_created"
BOOKING_CONFIRMED = "booking_confirmed"
BOOKING_CANCELLED = "booking_cancelled"
BOOKING_EXPIRED = "booking_expired"
BOOKING_REMINDER = "booking_reminder"

EVENT_TYPES = (
    BOOKING_CREATED,
    BOOKING_CONFIRMED,
    BOOKING_CANCELLED,
    BOOKING_EXPIRED,
    BOOKING_REMINDER,
)


@dataclass(frozen=True)
class BookingDetails:
    booking_id: str
    customer_name: str
    customer_email: str | None
    customer_phone: str | None
    service_name: str
    date: str  # YYYY-MM-DD
    start_time: str
    end_time: str
    notify_by_email: bool
    notify_by_sms: bool

    @classmethod
    def from_booking(cls, booking) -> "BookingDetails":
        return cls(
            booking_id=booking.id,
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
            customer_phone=booking.customer_phone,
            service_name=booking.service.name if booking.service else "Appointment",
            date=booking.date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            notify_by_email=bool(booking.notify_by_email),
            notify_by_sms=bool(booking.notify_by_sms),
        )


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str


# event → (subject prefix, heading, paragraphs)
_CUSTOMER_EMAIL = {
    BOOKING_CREATED: (
        "Booking request received",
        "Your booking request has been received",
        ["We've received your booking. Please pay your deposit within 24 hours "
         "to confirm your appointment."],
    ),
    BOOKING_CONFIRMED: (
        "Booking confirmed",
        "Your booking is confirmed",
        ["Your deposit has been received. Here are your booking details:"],
    ),
    BOOKING_CANCELLED: (
        "Booking cancelled",
        "Your booking has been cancelled",
        ["Your booking has been cancelled. Details of the cancelled booking:"],
    ),
    BOOKING_EXPIRED: (
        "Booking cancelled",
        "Your booking has been cancelled",
        ["Your booking was automatically cancelled because the deposit was not "
         "paid within 24 hours.",
         "Details of the cancelled booking:"],
    ),
    BOOKING_REMINDER: (
        "Appointment reminder",
        "See you tomorrow",
        ["This is a reminder of your appointment:"],
    ),
}

_OWNER_EMAIL = {
    BOOKING_CREATED: (
        "New booking request",
        "New booking request",
        "A customer has requested a booking. They need to pay the deposit "
        "within 24 hours to confirm.",
    ),
    BOOKING_CONFIRMED: (
        "Booking confirmed",
        "Booking confirmed",
        "A deposit has been received. Booking details:",
    ),
    BOOKING_CANCELLED: (
        "Booking cancelled",
        "Booking cancelled",
        "A booking has been cancelled.",
    ),
    BOOKING_EXPIRED: (
        "Booking auto-cancelled (deposit not paid)",
        "Booking auto-cancelled",
        "A booking was automatically cancelled because the deposit was not "
        "paid within 24 hours.",
    ),
}

_CUSTOMER_SMS = {
    BOOKING_CONFIRMED: (
        "Hi {name}, your booking at {business} is confirmed. {service} on {day} "
        "at {start}-{end}. We look forward to seeing you!"
    ),
    BOOKING_CANCELLED: (
        "Hi {name}, your booking at {business} has been cancelled. {service} on "
        "{day} at {start}-{end}."
    ),
    BOOKING_EXPIRED: (
        "Hi {name}, your booking at {business} was cancelled because the deposit "
        "wasn't paid within 24 hours. {service} on {day} at {start}-{end}. "
        "To rebook, visit our booking page."
    ),
    BOOKING_REMINDER: (
        "Hi {name}, a reminder of your appointment at {business}: {service} on "
        "{day} at {start}-{end}. See you soon!"
    ),
}


def long_date_label(date_str: str) -> str:
    """"2025-03-07" → "Friday, 7 March 2025" (input returned unchanged if unparsable)."""
    try:
        d = date.fromisoformat(date_str)
    except ValueError:
        return date_str
    return f"{d:%A}, {d.day} {d:%B %Y}"


def short_date_label(date_str: str) -> str:
    """"2025-03-07" → "07/03/2025"."""
    try:
        return date.fromisoformat(date_str).strftime("%d/%m/%Y")
    except ValueError:
        return date_str


def customer_email(
    event_type: str,
    details: BookingDetails,
    business_name: str,
    app_url: str,
) -> EmailContent | None:
    template = _CUSTOMER_EMAIL.get(event_type)
    if template is None:
        return None
    subject_prefix, heading, paragraphs = template

    body = [
        f"<h2>{escape(heading)}</h2>",
        f"<p>Hi {escape(details.customer_name)},</p>",
        *(f"<p>{escape(p)}</p>" for p in paragraphs),
        _details_list(details, include_customer=False),
    ]
    if event_type == BOOKING_CREATED:
        booking_url = f"{app_url.rstrip('/')}/booking/{details.booking_id}"
        body.append(
            f'<p><a href="{escape(booking_url, quote=True)}">Pay your deposit here</a> '
            f"to confirm your booking.</p>"
        )
    elif event_type == BOOKING_CONFIRMED:
        body.append("<p>We look forward to seeing you!</p>")
    elif event_type == BOOKING_EXPIRED:
        body.append(
            "<p>If you'd still like to book, please visit our booking page and "
            "complete your deposit within 24 hours of requesting a slot.</p>"
        )
    body.append(f"<p>{escape(business_name)}</p>")

    return EmailContent(
        subject=f"{subject_prefix} – {business_name}",
        html="\n".join(body),
    )


def owner_email(
    event_type: str,
    details: BookingDetails,
    business_name: str,
) -> EmailContent | None:
    template = _OWNER_EMAIL.get(event_type)
    if template is None:
        return None
    subject_prefix, heading, intro = template

    html = "\n".join([
        f"<h2>{escape(heading)}</h2>",
        f"<p>{escape(intro)}</p>",
        _details_list(details, include_customer=True),
        f"<p>{escape(business_name)} booking system</p>",
    ])
    return EmailContent(
        subject=f"{subject_prefix} – {details.customer_name}",
        html=html,
    )


def customer_sms(event_type: str, details: BookingDetails, business_name: str) -> str | None:
    template = _CUSTOMER_SMS.get(event_type)
    if template is None:
        return None
    return template.format(
        name=details.customer_name,
        business=business_name,
        service=details.service_name,
        day=short_date_label(details.date),
        start=details.start_time,
        end=details.end_time,
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _notification_label(details: BookingDetails) -> str:
    methods = []
    if details.notify_by_email:
        methods.append("Email")
    if details.notify_by_sms:
        methods.append("SMS")
    return " + ".join(methods) or "None"


def _details_list(details: BookingDetails, include_customer: bool) -> str:
    items = []
    if include_customer:
        items += [
            ("Customer", details.customer_name),
            ("Email", details.customer_email or "Not provided"),
            ("Phone", details.customer_phone or "Not provided"),
            ("Notifications", _notification_label(details)),
        ]
    items += [
        ("Service", details.service_name),
        ("Date", long_date_label(details.date)),
        ("Time", f"{details.start_time} – {details.end_time}"),
    ]
    rows = "".join(
        f"<li><strong>{label}:</strong> {escape(str(value))}</li>"
        for label, value in items
    )
    return f"<ul>{rows}</ul>"
