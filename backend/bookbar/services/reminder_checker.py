"""
Booking reminder sweep.

Sends a reminder for confirmed bookings starting in [now+23h, now+25h).
Invoked hourly by the external cron trigger, so every booking falls into
the window at least once.

reminder_sent_at is set only after a successful delivery and only if still
NULL: a booking is reminded at most once, and failed deliveries stay eligible
for the next run.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..models import Bookings
from . import booking_states as states
from .notifications.sender import NotificationSender, deliver_booking_event
from .slots.overlap import resolve_instant

logger = logging.getLogger(__name__)

WINDOW_START = timedelta(hours=23)
WINDOW_END = timedelta(hours=25)


@dataclass
class ReminderSweepResult:
    sent: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def message(self) -> str:
        if self.sent == 0 and self.failed == 0:
            return "No bookings due for 24h reminder."
        msg = f"Sent {self.sent} reminder(s)."
        if self.failed:
            msg += f" {self.failed} failed."
        return msg


def run_reminder_sweep(
    db: Session,
    sender: NotificationSender,
    business,
    now: datetime | None = None,
) -> ReminderSweepResult:
    now = now or datetime.now()
    window_start = now + WINDOW_START
    window_end = now + WINDOW_END
    result = ReminderSweepResult()

    # Only the dates the window can touch
    candidates = (
        db.query(Bookings)
        .filter(
            Bookings.status == states.CONFIRMED,
            Bookings.reminder_sent_at.is_(None),
            Bookings.date >= window_start.date().isoformat(),
            Bookings.date <= window_end.date().isoformat(),
        )
        .all()
    )

    # Plain tuples: commits below expire ORM instances
    due = [(b.id, b.date, b.start_time) for b in candidates]

    for booking_id, day, start_time in due:
        try:
            starts_at = resolve_instant(day, start_time)
        except ValueError:
            logger.error(f"Booking {booking_id} has unparsable start {day} {start_time}")
            result.skipped += 1
            continue

        if not window_start <= starts_at < window_end:
            result.skipped += 1
            continue

        try:
            delivery = deliver_booking_event(db, sender, business, "booking_reminder", booking_id)
        except Exception:
            logger.exception(f"Error sending reminder for booking {booking_id}")
            result.failed += 1
            continue

        if not delivery.ok:
            logger.warning(f"Reminder failed for booking {booking_id}: {delivery.error}")
            result.failed += 1
            continue

        marked = (
            db.query(Bookings)
            .filter(Bookings.id == booking_id, Bookings.reminder_sent_at.is_(None))
            .update({"reminder_sent_at": now}, synchronize_session=False)
        )
        db.commit()
        if marked:
            result.sent += 1
            logger.info(f"booking_reminder sent for booking={booking_id} (starts at {starts_at:%Y-%m-%d %H:%M})")
        else:
            result.skipped += 1

    logger.info(f"Reminder sweep: {result.message}")
    return result
