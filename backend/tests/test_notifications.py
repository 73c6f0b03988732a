"""Tests for notification messages, transports, routing and the queue consumer."""

import json

import httpx
import pytest

from bookbar.services.business import BusinessConfig
from bookbar.services.notifications import messages
from bookbar.services.notifications.consumer import process_event
from bookbar.services.notifications.email import ResendEmailTransport
from bookbar.services.notifications.sender import deliver_booking_event, send_test_sms
from bookbar.services.notifications.sms import (
    SMS_WORKS_API,
    SmsWorksTransport,
    format_uk_phone_to_e164,
    resolve_sender,
)

from tests.conftest import FakeEmailTransport, FakeSmsTransport, make_booking, make_service


def _details(**overrides):
    values = dict(
        booking_id="abc123",
        customer_name="Amy Pond",
        customer_email="amy@example.com",
        customer_phone="07123456789",
        service_name="Gel manicure",
        date="2025-03-07",
        start_time="10:00",
        end_time="11:00",
        notify_by_email=True,
        notify_by_sms=False,
    )
    values.update(overrides)
    return messages.BookingDetails(**values)


class TestMessages:

    def test_customer_created_email_links_to_booking(self):
        content = messages.customer_email(
            "booking_created", _details(), "Be Beauty Bar", "https://book.example.com/",
        )
        assert content.subject == "Booking request received – Be Beauty Bar"
        assert 'href="https://book.example.com/booking/abc123"' in content.html
        assert "Friday, 7 March 2025" in content.html

    def test_user_values_are_escaped(self):
        details = _details(customer_name="<script>alert(1)</script>", service_name="A & B")
        content = messages.owner_email("booking_confirmed", details, "Be Beauty Bar")
        assert "<script>" not in content.html
        assert "&lt;script&gt;" in content.html
        assert "A &amp; B" in content.html

    def test_owner_gets_no_reminder(self):
        assert messages.owner_email("booking_reminder", _details(), "Be Beauty Bar") is None

    def test_no_sms_for_created(self):
        assert messages.customer_sms("booking_created", _details(), "Be Beauty Bar") is None

    def test_reminder_sms_uses_short_date(self):
        text = messages.customer_sms("booking_reminder", _details(), "Be Beauty Bar")
        assert "07/03/2025" in text
        assert "10:00-11:00" in text

    def test_date_labels_pass_through_garbage(self):
        assert messages.long_date_label("soon") == "soon"
        assert messages.short_date_label("soon") == "soon"


class TestSmsTransport:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("07123 456789", "+447123456789"),
            ("+44 7123 456789", "+447123456789"),
            ("447123456789", "+447123456789"),
            ("7123456789", "+447123456789"),
            ("", ""),
            ("abc", ""),
            ("  -  ", ""),
        ],
    )
    def test_e164(self, raw, expected):
        assert format_uk_phone_to_e164(raw) == expected

    def test_sender_fallback(self):
        assert resolve_sender("Salon1") == "Salon1"
        assert resolve_sender("way too long sender") == "BeBeautyBar"
        assert resolve_sender(None) == "BeBeautyBar"

    def test_unconfigured(self):
        result = SmsWorksTransport().send("+447123456789", "hi")
        assert not result.ok
        assert result.error == "SMS not configured"

    def test_send_strips_plus_and_uses_jwt(self):
        captured = {}

        def handler(request: httpx.Request):
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(201, json={"messageid": "m1"})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        transport = SmsWorksTransport(token="tok", sender="Salon1", client=client)

        assert transport.send("+447123456789", "hello").ok
        assert captured["url"] == SMS_WORKS_API
        assert captured["auth"] == "JWT tok"
        assert captured["body"] == {
            "sender": "Salon1", "destination": "447123456789", "content": "hello",
        }

    def test_signed_token_from_key_and_secret(self):
        transport = SmsWorksTransport(api_key="key", api_secret="secret")
        assert transport.configured
        assert transport.auth_header().startswith("JWT ")

    def test_api_error_message(self):
        client = httpx.Client(transport=httpx.MockTransport(
            lambda request: httpx.Response(400, json={"message": "Invalid destination"})
        ))
        result = SmsWorksTransport(token="tok", client=client).send("+44", "x")
        assert not result.ok
        assert "Invalid destination" in result.error


class TestEmailTransport:

    def test_unconfigured(self):
        result = ResendEmailTransport(api_key=None, sender="a@b.c").send("x@y.z", "s", "h")
        assert result.error == "Email not configured"


class TestDeliverBookingEvent:

    def test_email_customer_and_owner(self, db, sender, email_transport, sms_transport, business):
        booking = make_booking(db, make_service(db))

        result = deliver_booking_event(db, sender, business, "booking_confirmed", booking.id)

        assert result.ok
        recipients = [to for to, _, _ in email_transport.sent]
        assert recipients == ["amy@example.com", "owner@example.com"]
        assert sms_transport.sent == []

    def test_sms_only_customer(self, db, sender, email_transport, sms_transport):
        booking = make_booking(db, make_service(db), notify_by_email=False, notify_by_sms=True)

        result = deliver_booking_event(db, sender, BusinessConfig(), "booking_reminder", booking.id)

        assert result.ok
        assert email_transport.sent == []
        assert sms_transport.sent[0][0] == "+447123456789"

    def test_created_sends_no_sms(self, db, sender, sms_transport):
        booking = make_booking(db, make_service(db), notify_by_sms=True)
        deliver_booking_event(db, sender, BusinessConfig(), "booking_created", booking.id)
        assert sms_transport.sent == []

    def test_reminder_not_sent_to_owner(self, db, sender, email_transport, business):
        booking = make_booking(db, make_service(db), status="confirmed")
        deliver_booking_event(db, sender, business, "booking_reminder", booking.id)
        assert [to for to, _, _ in email_transport.sent] == ["amy@example.com"]

    def test_failures_are_joined(self, db, sender, email_transport, business):
        email_transport.ok = False
        booking = make_booking(db, make_service(db))

        result = deliver_booking_event(db, sender, business, "booking_cancelled", booking.id)

        assert not result.ok
        assert "customer email" in result.error
        assert "owner email" in result.error

    def test_unknown_event_and_booking(self, db, sender, business):
        assert not deliver_booking_event(db, sender, business, "booking_exploded", "x").ok
        assert not deliver_booking_event(db, sender, business, "booking_created", "missing").ok

    def test_test_sms_rejects_empty_number(self, sender):
        assert send_test_sms(sender, "", "Be Beauty Bar").error == "Invalid phone number"


class TestConsumer:

    def test_delivers_event(self, db, session_factory, events, sender, email_transport):
        booking = make_booking(db, make_service(db))

        result = process_event(
            events, json.dumps({"type": "booking_created", "booking_id": booking.id}),
            sender, session_factory,
        )
        assert result.ok
        assert email_transport.sent
        assert events.redis.llen(events.queue) == 0

    def test_failure_is_dead_lettered_not_requeued(self, db, session_factory, events, sender):
        sender.email = FakeEmailTransport(ok=False)
        booking = make_booking(db, make_service(db))
        raw = json.dumps({"type": "booking_created", "booking_id": booking.id})

        result = process_event(events, raw, sender, session_factory)

        assert not result.ok
        assert events.redis.llen(events.queue) == 0
        assert events.redis.lrange(events.dead_letter_queue, 0, -1) == [raw]

    def test_partial_failure_sends_each_email_once(
        self, db, session_factory, events, sender, email_transport,
    ):
        sender.sms = FakeSmsTransport(ok=False)
        booking = make_booking(
            db, make_service(db), status="confirmed", notify_by_email=True, notify_by_sms=True,
        )
        events.emit("booking_confirmed", {"booking_id": booking.id})

        while events.redis.llen(events.queue):
            process_event(events, events.redis.lpop(events.queue), sender, session_factory)

        customer_emails = [to for to, _, _ in email_transport.sent if to == "amy@example.com"]
        assert customer_emails == ["amy@example.com"]
        assert events.redis.llen(events.dead_letter_queue) == 1

    def test_invalid_json_dead_lettered(self, session_factory, events, sender):
        result = process_event(events, "{not json", sender, session_factory)
        assert not result.ok
        assert events.redis.lrange(events.dead_letter_queue, 0, -1) == ["{not json"]

    def test_emit_survives_broken_redis(self):
        from bookbar.services.events import EventQueue

        class BrokenRedis:
            def rpush(self, *args):
                raise ConnectionError("redis down")

        assert EventQueue(BrokenRedis()).emit("booking_created", {"booking_id": "x"}) is False
