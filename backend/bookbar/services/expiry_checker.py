"""
Unpaid-deposit expiry sweep.

Cancels pending_deposit bookings older than DEPOSIT_WINDOW and notifies the
customer and owner. Invoked by the external cron trigger
(routers/cron.py); each booking is processed and committed on its own, so
one failure never blocks the rest.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..models import Bookings
from . import booking_states as states
from .notifications.sender import NotificationSender, deliver_booking_event

logger = logging.getLogger(__name__)

DEPOSIT_WINDOW = timedelta(hours=24)


@dataclass
class ExpirySweepResult:
    cancelled: int = 0
    notifications_failed: int = 0

    @property
    def message(self) -> str:
        if self.cancelled == 0:
            return "No expired pending deposits."
        msg = f"Cancelled {self.cancelled} booking(s)."
        if self.notifications_failed:
            msg += f" {self.notifications_failed} notification(s) failed."
        return msg


def run_expiry_sweep(
    db: Session,
    sender: NotificationSender,
    business,
    now: datetime | None = None,
) -> ExpirySweepResult:
    now = now or datetime.now()
    cutoff = now - DEPOSIT_WINDOW
    result = ExpirySweepResult()

    expired_ids = [
        booking_id
        for (booking_id,) in (
            db.query(Bookings.id)
            .filter(
                Bookings.status == states.PENDING_DEPOSIT,
                Bookings.created_at < cutoff,
            )
            .order_by(Bookings.created_at)
            .all()
        )
    ]

    for booking_id in expired_ids:
        try:
            cancelled = _cancel_if_still_pending(db, booking_id, now)
        except Exception:
            db.rollback()
            logger.exception(f"Error cancelling expired booking {booking_id}")
            continue
        if not cancelled:
            # Confirmed (or cancelled) between the query and the update
            continue

        result.cancelled += 1
        logger.info(f"Booking {booking_id} cancelled: deposit not paid within 24h")

        try:
            delivery = deliver_booking_event(db, sender, business, "booking_expired", booking_id)
        except Exception:
            logger.exception(f"Error sending expiry notification for booking {booking_id}")
            result.notifications_failed += 1
            continue
        if not delivery.ok:
            logger.warning(f"Expiry notification failed for booking {booking_id}: {delivery.error}")
            result.notifications_failed += 1

    logger.info(f"Expiry sweep: {result.message}")
    return result


def _cancel_if_still_pending(db: Session, booking_id: str, now: datetime) -> bool:
    updated = (
        db.query(Bookings)
        .filter(Bookings.id == booking_id, Bookings.status == states.PENDING_DEPOSIT)
        .update({"status": states.CANCELLED, "updated_at": now}, synchronize_session=False)
    )
    db.commit()
    return bool(updated)
