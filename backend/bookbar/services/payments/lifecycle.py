# backend/bookbar/services/payments/lifecycle.py
"""
Deposit / balance payment lifecycle.

Two payment legs per booking:
- deposit: pending_deposit → confirmed, stores the deposit payment reference
- balance: sets balance_paid_online, never changes status

Confirmation reaches us twice for the same payment (provider webhook and the
customer returning from checkout). Both go through apply_payment_confirmation(),
whose conditional UPDATE lets exactly one caller win; everyone else gets
already_done=True and no notification is emitted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from ...config import get_settings
from ...errors import NotConfiguredError, NotFoundError, ValidationError
from ...models import Bookings
from .. import booking_states as states
from ..events import EventQueue
from .provider import PaymentProvider

logger = logging.getLogger(__name__)

DEPOSIT = "deposit"
BALANCE = "balance"
LEGS = (DEPOSIT, BALANCE)

MIN_CHARGE_PENCE = 50
CHECKOUT_COMPLETED = "checkout.session.completed"


@dataclass(frozen=True)
class ConfirmationResult:
    booking_id: str
    leg: str
    already_done: bool


def to_pence(amount: float) -> int:
    return int(round(amount * 100))


def balance_due(booking: Bookings, sms_fee: float) -> float:
    """
    Remaining price after the deposit.

    The SMS surcharge is collected with the deposit but is not part of the
    service price, so it is taken off the deposit before subtracting.
    """
    base_deposit = booking.deposit_amount - (sms_fee if booking.notify_by_sms else 0)
    return round(booking.service_price - base_deposit, 2)


def create_checkout(
    db: Session,
    provider: PaymentProvider | None,
    business,
    booking_id: str,
    leg: str,
    app_url: str,
) -> dict:
    """Create a provider checkout session for one leg. Returns {"url", "session_id"}."""
    if provider is None:
        raise NotConfiguredError(
            "Pay by card is not configured. Add your Stripe Secret Key in business settings."
        )
    if leg not in LEGS:
        raise ValidationError("type must be deposit or balance")
    if not booking_id:
        raise ValidationError("booking_id required")

    booking = db.get(Bookings, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    sms_fee = business.sms_notification_fee
    service_name = booking.service.name if booking.service else "Appointment"
    when = f"{booking.date} {booking.start_time}-{booking.end_time}"

    if leg == DEPOSIT:
        if booking.status != states.PENDING_DEPOSIT:
            raise ValidationError("Booking is not awaiting deposit")
        amount = booking.deposit_amount
        product_name = f"Deposit: {service_name}"
        if booking.notify_by_sms:
            base_deposit = booking.deposit_amount - sms_fee
            product_description = (
                f"Booking {when} (includes £{base_deposit:.2f} deposit "
                f"+ £{sms_fee:.2f} SMS fee)"
            )
        else:
            product_description = f"Booking {when}"
    else:
        if booking.status != states.CONFIRMED:
            raise ValidationError("Pay deposit first to confirm your booking")
        if booking.balance_paid_online:
            raise ValidationError("Remaining balance already paid")
        amount = balance_due(booking, sms_fee)
        if amount <= 0:
            raise ValidationError("No remaining balance to pay")
        product_name = f"Remaining: {service_name}"
        product_description = f"Booking {when} · balance"

    amount_pence = to_pence(amount)
    if amount_pence < MIN_CHARGE_PENCE:
        raise ValidationError("Minimum card charge is £0.50")

    base = app_url.rstrip("/")
    if leg == DEPOSIT:
        success_url = (
            f"{base}/booking/deposit-confirmed?bookingId={booking_id}"
            "&session_id={CHECKOUT_SESSION_ID}"
        )
    else:
        success_url = f"{base}/booking/{booking_id}?paid=1&session_id={{CHECKOUT_SESSION_ID}}"

    session = provider.create_checkout_session(
        amount_pence=amount_pence,
        currency=get_settings().payment_currency,
        product_name=product_name,
        product_description=product_description,
        metadata={"booking_id": booking_id, "type": leg},
        success_url=success_url,
        cancel_url=f"{base}/booking/{booking_id}",
        customer_email=booking.customer_email,
    )
    logger.info(f"Checkout session {session.id} created: booking={booking_id} {leg} {amount_pence}p")
    return {"url": session.url, "session_id": session.id}


def apply_payment_confirmation(
    db: Session,
    events: EventQueue | None,
    booking_id: str,
    leg: str,
    payment_ref: str | None,
    now: datetime | None = None,
) -> ConfirmationResult:
    """Shared by the webhook and the return-page paths. Replay-safe."""
    if leg not in LEGS:
        raise ValidationError("type must be deposit or balance")
    now = now or datetime.now()

    booking = db.get(Bookings, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    if leg == BALANCE:
        values = {"balance_paid_online": True, "updated_at": now}
        if payment_ref:
            values["balance_payment_ref"] = payment_ref
        won = (
            db.query(Bookings)
            .filter(Bookings.id == booking_id, Bookings.balance_paid_online.is_(False))
            .update(values, synchronize_session=False)
        )
        db.commit()
        if won:
            logger.info(f"Balance paid online for booking {booking_id} (ref={payment_ref})")
            if booking.status != states.CONFIRMED:
                logger.warning(
                    f"Balance payment {payment_ref} received for {booking.status} booking "
                    f"{booking_id}; reference recorded, status unchanged"
                )
        return ConfirmationResult(booking_id, leg, already_done=not won)

    values = {"status": states.CONFIRMED, "updated_at": now}
    if payment_ref:
        values["deposit_payment_ref"] = payment_ref
    won = (
        db.query(Bookings)
        .filter(Bookings.id == booking_id, Bookings.status == states.PENDING_DEPOSIT)
        .update(values, synchronize_session=False)
    )
    db.commit()

    if won:
        logger.info(f"Booking {booking_id} confirmed by deposit payment (ref={payment_ref})")
        if events is not None:
            events.emit("booking_confirmed", {"booking_id": booking_id})
        return ConfirmationResult(booking_id, leg, already_done=False)

    db.refresh(booking)
    if booking.status == states.CANCELLED and payment_ref and not booking.deposit_payment_ref:
        # Paid after expiry/cancel: keep the reference so it can be refunded
        db.query(Bookings).filter(
            Bookings.id == booking_id,
            Bookings.deposit_payment_ref.is_(None),
        ).update({"deposit_payment_ref": payment_ref, "updated_at": now}, synchronize_session=False)
        db.commit()
        logger.warning(
            f"Deposit payment {payment_ref} received for cancelled booking {booking_id}; "
            f"reference recorded, status unchanged"
        )
    return ConfirmationResult(booking_id, leg, already_done=True)


def confirm_from_return(
    db: Session,
    provider: PaymentProvider | None,
    events: EventQueue | None,
    booking_id: str,
    session_id: str,
) -> ConfirmationResult:
    """Customer came back from checkout: re-verify the session with the provider."""
    booking_id = (booking_id or "").strip()
    session_id = (session_id or "").strip()
    if not booking_id or not session_id:
        raise ValidationError("Missing booking_id or session_id")
    if provider is None:
        raise NotConfiguredError("Stripe not configured")

    session = provider.retrieve_session(session_id)
    if not session.paid:
        raise ValidationError("Payment not completed")
    if session.metadata.get("booking_id") != booking_id:
        raise ValidationError("Session does not match booking")

    leg = session.metadata.get("type") or DEPOSIT
    return apply_payment_confirmation(db, events, booking_id, leg, session.payment_intent_id)


def handle_webhook(
    db: Session,
    provider: PaymentProvider | None,
    events: EventQueue | None,
    raw_body: bytes,
    signature: str | None,
    secret: str | None,
) -> ConfirmationResult | None:
    """
    Verify and apply a provider webhook.

    Returns None for events that are acknowledged but ignored.
    """
    if provider is None or not secret:
        raise NotConfiguredError("Stripe webhook not configured")
    if not signature:
        raise ValidationError("Missing stripe-signature")

    event = provider.verify_webhook(raw_body, signature, secret)
    if event.type != CHECKOUT_COMPLETED or event.session is None:
        logger.info(f"Webhook {event.type} acknowledged, ignored")
        return None

    session = event.session
    if not session.paid:
        logger.info(f"Webhook session {session.id} not paid ({session.payment_status}), ignored")
        return None

    booking_id = session.metadata.get("booking_id")
    if not booking_id:
        logger.error(f"Webhook session {session.id} has no booking_id in metadata")
        raise ValidationError("Missing booking_id")

    leg = session.metadata.get("type") or DEPOSIT
    return apply_payment_confirmation(db, events, booking_id, leg, session.payment_intent_id)


def refund_payment(
    db: Session,
    provider: PaymentProvider | None,
    booking_id: str,
    leg: str,
    now: datetime | None = None,
) -> Bookings:
    """Refund one leg; records the refund timestamp, status untouched."""
    if provider is None:
        raise NotConfiguredError("Stripe not configured")
    if not booking_id or leg not in LEGS:
        raise ValidationError("booking_id and type (deposit | balance) required")
    now = now or datetime.now()

    booking = db.get(Bookings, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    if leg == DEPOSIT:
        payment_ref, refunded_at = booking.deposit_payment_ref, booking.deposit_refunded_at
    else:
        payment_ref, refunded_at = booking.balance_payment_ref, booking.balance_refunded_at

    if not payment_ref:
        raise ValidationError(f"No card payment found for the {leg}")
    if refunded_at is not None:
        raise ValidationError(f"{leg.capitalize()} was already refunded")

    refund_id = provider.refund(payment_ref)

    if leg == DEPOSIT:
        booking.deposit_refunded_at = now
    else:
        booking.balance_refunded_at = now
    db.commit()
    db.refresh(booking)
    logger.info(f"Refunded {leg} for booking {booking_id} (refund={refund_id})")
    return booking
