"""Tests for the deposit / balance payment lifecycle."""

import json
import logging

import pytest

from bookbar.errors import NotConfiguredError, NotFoundError, ValidationError, WebhookSignatureError
from bookbar.models import Bookings
from bookbar.services.payments import (
    BALANCE,
    DEPOSIT,
    apply_payment_confirmation,
    balance_due,
    confirm_from_return,
    create_checkout,
    handle_webhook,
    refund_payment,
)
from bookbar.services.payments.provider import WebhookEvent

from tests.conftest import NOW, make_booking, make_service

APP_URL = "https://book.example.com/"


def _event_types(events):
    return [json.loads(raw)["type"] for raw in events.redis.lrange(events.queue, 0, -1)]


class TestCheckout:

    def test_deposit_checkout(self, db, provider, business):
        service = make_service(db)
        booking = make_booking(db, service)

        result = create_checkout(db, provider, business, booking.id, DEPOSIT, APP_URL)

        assert result["url"].startswith("https://checkout.test/")
        created = provider.created[0]
        assert created["amount_pence"] == 1000
        assert created["metadata"] == {"booking_id": booking.id, "type": "deposit"}
        assert created["success_url"] == (
            f"https://book.example.com/booking/deposit-confirmed?bookingId={booking.id}"
            "&session_id={CHECKOUT_SESSION_ID}"
        )
        assert created["cancel_url"] == f"https://book.example.com/booking/{booking.id}"
        assert created["customer_email"] == "amy@example.com"

    def test_deposit_with_sms_fee_describes_split(self, db, provider, business):
        service = make_service(db)
        booking = make_booking(db, service, notify_by_sms=True, deposit_amount=10.05)

        create_checkout(db, provider, business, booking.id, DEPOSIT, APP_URL)
        created = provider.created[0]
        assert created["amount_pence"] == 1005
        assert "SMS fee" in created["product_description"]

    def test_deposit_requires_pending(self, db, provider, business):
        service = make_service(db)
        booking = make_booking(db, service, status="confirmed")
        with pytest.raises(ValidationError):
            create_checkout(db, provider, business, booking.id, DEPOSIT, APP_URL)

    def test_balance_checkout_amount(self, db, provider, business):
        service = make_service(db)
        booking = make_booking(db, service, status="confirmed")

        create_checkout(db, provider, business, booking.id, BALANCE, APP_URL)
        created = provider.created[0]
        assert created["amount_pence"] == 2000
        assert created["success_url"].startswith(
            f"https://book.example.com/booking/{booking.id}?paid=1"
        )

    def test_balance_requires_confirmed(self, db, provider, business):
        service = make_service(db)
        booking = make_booking(db, service)
        with pytest.raises(ValidationError, match="Pay deposit first"):
            create_checkout(db, provider, business, booking.id, BALANCE, APP_URL)

    def test_balance_already_paid(self, db, provider, business):
        service = make_service(db)
        booking = make_booking(db, service, status="confirmed", balance_paid_online=True)
        with pytest.raises(ValidationError):
            create_checkout(db, provider, business, booking.id, BALANCE, APP_URL)

    def test_below_minimum_charge(self, db, provider, business):
        service = make_service(db, deposit_amount=0.3)
        booking = make_booking(db, service)
        with pytest.raises(ValidationError, match="0.50"):
            create_checkout(db, provider, business, booking.id, DEPOSIT, APP_URL)

    def test_not_configured(self, db, business):
        service = make_service(db)
        booking = make_booking(db, service)
        with pytest.raises(NotConfiguredError):
            create_checkout(db, None, business, booking.id, DEPOSIT, APP_URL)

    def test_unknown_booking(self, db, provider, business):
        with pytest.raises(NotFoundError):
            create_checkout(db, provider, business, "missing", DEPOSIT, APP_URL)


class TestBalanceDue:

    def test_without_sms(self, db):
        service = make_service(db)
        booking = make_booking(db, service)
        assert balance_due(booking, 0.05) == 20.0

    def test_sms_fee_is_not_part_of_price(self, db):
        service = make_service(db)
        booking = make_booking(db, service, notify_by_sms=True, deposit_amount=10.05)
        assert balance_due(booking, 0.05) == 20.0


class TestConfirmation:

    def test_double_confirmation_emits_once(self, db, events):
        service = make_service(db)
        booking = make_booking(db, service)

        first = apply_payment_confirmation(db, events, booking.id, DEPOSIT, "pi_1", now=NOW)
        second = apply_payment_confirmation(db, events, booking.id, DEPOSIT, "pi_1", now=NOW)

        assert first.already_done is False
        assert second.already_done is True
        assert _event_types(events) == ["booking_confirmed"]
        db.refresh(booking)
        assert booking.status == "confirmed"
        assert booking.deposit_payment_ref == "pi_1"

    def test_payment_after_cancel_records_ref_only(self, db, events):
        service = make_service(db)
        booking = make_booking(db, service, status="cancelled")

        result = apply_payment_confirmation(db, events, booking.id, DEPOSIT, "pi_late", now=NOW)

        assert result.already_done is True
        db.refresh(booking)
        assert booking.status == "cancelled"
        assert booking.deposit_payment_ref == "pi_late"
        assert _event_types(events) == []

    def test_balance_confirmation_keeps_status(self, db, events):
        service = make_service(db)
        booking = make_booking(db, service, status="confirmed")

        first = apply_payment_confirmation(db, events, booking.id, BALANCE, "pi_bal", now=NOW)
        second = apply_payment_confirmation(db, events, booking.id, BALANCE, "pi_bal", now=NOW)

        assert (first.already_done, second.already_done) == (False, True)
        db.refresh(booking)
        assert booking.balance_paid_online is True
        assert booking.balance_payment_ref == "pi_bal"
        assert booking.status == "confirmed"

    def test_balance_after_cancel_is_recorded_with_warning(self, db, events, caplog):
        service = make_service(db)
        booking = make_booking(db, service, status="cancelled")

        with caplog.at_level(logging.WARNING, logger="bookbar.services.payments.lifecycle"):
            result = apply_payment_confirmation(db, events, booking.id, BALANCE, "pi_late", now=NOW)

        assert result.already_done is False
        db.refresh(booking)
        assert booking.status == "cancelled"
        assert booking.balance_payment_ref == "pi_late"
        assert "cancelled booking" in caplog.text
        assert _event_types(events) == []

    def test_return_page_then_webhook(self, db, events, provider):
        service = make_service(db)
        booking = make_booking(db, service)
        session = provider.add_paid_session("cs_1", booking.id)

        returned = confirm_from_return(db, provider, events, booking.id, "cs_1")
        provider.webhook_event = WebhookEvent(type="checkout.session.completed", session=session)
        hooked = handle_webhook(db, provider, events, b"{}", "good-signature", "whsec")

        assert returned.already_done is False
        assert hooked.already_done is True
        assert _event_types(events) == ["booking_confirmed"]

    def test_return_with_mismatched_booking(self, db, events, provider):
        service = make_service(db)
        booking = make_booking(db, service)
        provider.add_paid_session("cs_1", "someone-else")
        with pytest.raises(ValidationError):
            confirm_from_return(db, provider, events, booking.id, "cs_1")
        db.refresh(booking)
        assert booking.status == "pending_deposit"

    def test_webhook_bad_signature(self, db, events, provider):
        with pytest.raises(WebhookSignatureError):
            handle_webhook(db, provider, events, b"{}", "forged", "whsec")

    def test_webhook_without_secret(self, db, events, provider):
        with pytest.raises(NotConfiguredError):
            handle_webhook(db, provider, events, b"{}", "good-signature", None)

    def test_webhook_other_event_ignored(self, db, events, provider):
        provider.webhook_event = WebhookEvent(type="payment_intent.created", session=None)
        assert handle_webhook(db, provider, events, b"{}", "good-signature", "whsec") is None


class TestRefund:

    def test_refund_deposit_once(self, db, provider):
        service = make_service(db)
        booking = make_booking(db, service, status="confirmed", deposit_payment_ref="pi_9")

        refunded = refund_payment(db, provider, booking.id, DEPOSIT, now=NOW)
        assert refunded.deposit_refunded_at == NOW
        assert refunded.status == "confirmed"
        assert provider.refunds == ["pi_9"]

        with pytest.raises(ValidationError):
            refund_payment(db, provider, booking.id, DEPOSIT, now=NOW)
        assert provider.refunds == ["pi_9"]

    def test_refund_without_payment(self, db, provider):
        service = make_service(db)
        booking = make_booking(db, service)
        with pytest.raises(ValidationError):
            refund_payment(db, provider, booking.id, BALANCE)
        assert db.get(Bookings, booking.id).balance_refunded_at is None
