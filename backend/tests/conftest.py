"""Shared test fixtures and helpers."""

import os

# Must be set before bookbar modules read settings
os.environ["NOTIFICATIONS_CONSUMER_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["REDIS_URL"] = "redis://localhost:6399/0"

from datetime import datetime, timedelta
from typing import Optional

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from bookbar.auth import create_admin_token, hash_password
from bookbar.database import build_engine, get_db
from bookbar.dependencies import (
    get_event_queue,
    get_notification_sender,
    get_provider,
)
from bookbar.models import Base, Bookings, BusinessSettings, Services, TimeOffBlocks
from bookbar.services.business import BusinessConfig
from bookbar.services.events import EventQueue
from bookbar.services.notifications.base import SendResult
from bookbar.services.notifications.sender import NotificationSender
from bookbar.services.payments.provider import CheckoutSession, SessionDetails, WebhookEvent
from bookbar.errors import WebhookSignatureError

ADMIN_EMAIL = "owner@example.com"
ADMIN_PASSWORD = "s3cret-pass"

# Fixed clock: Monday 2025-03-10 12:00
NOW = datetime(2025, 3, 10, 12, 0)
TOMORROW = (NOW + timedelta(days=1)).date().isoformat()


# ── Fakes ────────────────────────────────────────────────────────────────


class FakeEmailTransport:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to, subject, html):
        self.sent.append((to, subject, html))
        return SendResult.success() if self.ok else SendResult.failure("email down")


class FakeSmsTransport:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent: list[tuple[str, str]] = []

    def send(self, to, text):
        self.sent.append((to, text))
        return SendResult.success() if self.ok else SendResult.failure("sms down")


class FakePaymentProvider:
    """In-memory stand-in for Stripe."""

    def __init__(self):
        self.created: list[dict] = []
        self.sessions: dict[str, SessionDetails] = {}
        self.refunds: list[str] = []
        self.webhook_event: Optional[WebhookEvent] = None
        self.valid_signature = "good-signature"

    def create_checkout_session(self, **kwargs):
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append({"id": session_id, **kwargs})
        return CheckoutSession(id=session_id, url=f"https://checkout.test/{session_id}")

    def add_paid_session(self, session_id, booking_id, leg="deposit", payment_intent="pi_1"):
        self.sessions[session_id] = SessionDetails(
            id=session_id,
            payment_status="paid",
            payment_intent_id=payment_intent,
            metadata={"booking_id": booking_id, "type": leg},
        )
        return self.sessions[session_id]

    def retrieve_session(self, session_id):
        return self.sessions[session_id]

    def verify_webhook(self, raw_body, signature, secret):
        if signature != self.valid_signature:
            raise WebhookSignatureError("Invalid signature")
        return self.webhook_event

    def refund(self, payment_intent_id):
        self.refunds.append(payment_intent_id)
        return f"re_{len(self.refunds)}"


# ── Database ─────────────────────────────────────────────────────────────


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ── Collaborators ────────────────────────────────────────────────────────


@pytest.fixture
def fake_redis():
    # One server per test
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def events(fake_redis):
    return EventQueue(fake_redis)


@pytest.fixture
def business():
    return BusinessConfig(business_email="owner@example.com")


@pytest.fixture
def email_transport():
    return FakeEmailTransport()


@pytest.fixture
def sms_transport():
    return FakeSmsTransport()


@pytest.fixture
def sender(email_transport, sms_transport):
    return NotificationSender(
        email=email_transport,
        sms=sms_transport,
        app_url="https://book.example.com",
    )


@pytest.fixture
def provider():
    return FakePaymentProvider()


# ── Factories ────────────────────────────────────────────────────────────


def make_service(db, **overrides) -> Services:
    values = dict(
        name="Gel manicure",
        category="Nails",
        description="",
        duration_min=60,
        price=30.0,
        deposit_amount=10.0,
        active=True,
        position=0,
    )
    values.update(overrides)
    service = Services(**values)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def make_booking(db, service, **overrides) -> Bookings:
    values = dict(
        service_id=service.id,
        service_price=service.price,
        customer_name="Amy Pond",
        customer_email="amy@example.com",
        customer_phone="07123 456789",
        date=TOMORROW,
        start_time="10:00",
        end_time="11:00",
        deposit_amount=service.deposit_amount,
        status="pending_deposit",
        notify_by_email=True,
        notify_by_sms=False,
        notes="",
        balance_paid_online=False,
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    booking = Bookings(**values)
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def make_block(db, start_date, start_time, end_date, end_time) -> TimeOffBlocks:
    block = TimeOffBlocks(
        start_date=start_date,
        start_time=start_time,
        end_date=end_date,
        end_time=end_time,
    )
    db.add(block)
    db.commit()
    db.refresh(block)
    return block


def booking_payload(service_id, **overrides) -> dict:
    payload = dict(
        service_id=service_id,
        customer_name="Amy Pond",
        customer_email="amy@example.com",
        customer_phone="",
        date=TOMORROW,
        start_time="10:00",
        end_time="11:00",
        deposit_amount=10.0,
        notes="",
        notify_by_email=True,
        notify_by_sms=False,
    )
    payload.update(overrides)
    return payload


# ── HTTP ─────────────────────────────────────────────────────────────────


@pytest.fixture
def app_settings_row(db):
    row = BusinessSettings(
        id="default",
        business_name="Be Beauty Bar",
        business_email="owner@example.com",
        open_hour=9,
        close_hour=17,
        slot_interval=30,
        sms_notification_fee=0.05,
        stripe_webhook_secret="whsec_test",
        admin_login_email=ADMIN_EMAIL,
        admin_password_hash=hash_password(ADMIN_PASSWORD),
    )
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def client(session_factory, events, sender, provider, app_settings_row):
    from bookbar.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_queue] = lambda: events
    app.dependency_overrides[get_notification_sender] = lambda: sender
    app.dependency_overrides[get_provider] = lambda: provider

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_admin_token(ADMIN_EMAIL)}"}
