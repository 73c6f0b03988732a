# backend/bookbar/services/payments/provider.py
"""
Payment provider contract and its Stripe implementation.

Provider objects are normalised into small dataclasses here so the
lifecycle code never touches Stripe types.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

import stripe

from ...errors import UpstreamError, WebhookSignatureError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


@dataclass(frozen=True)
class SessionDetails:
    id: str
    payment_status: str
    payment_intent_id: str | None
    metadata: dict = field(default_factory=dict)

    @property
    def paid(self) -> bool:
        return self.payment_status == "paid"


@dataclass(frozen=True)
class WebhookEvent:
    type: str
    session: SessionDetails | None


class PaymentProvider(Protocol):
    def create_checkout_session(
        self,
        amount_pence: int,
        currency: str,
        product_name: str,
        product_description: str,
        metadata: dict,
        success_url: str,
        cancel_url: str,
        customer_email: str | None = None,
    ) -> CheckoutSession: ...

    def retrieve_session(self, session_id: str) -> SessionDetails: ...

    def verify_webhook(self, raw_body: bytes, signature: str, secret: str) -> WebhookEvent: ...

    def refund(self, payment_intent_id: str) -> str: ...


class StripePaymentProvider:
    def __init__(self, secret_key: str):
        self.secret_key = secret_key

    def create_checkout_session(
        self,
        amount_pence: int,
        currency: str,
        product_name: str,
        product_description: str,
        metadata: dict,
        success_url: str,
        cancel_url: str,
        customer_email: str | None = None,
    ) -> CheckoutSession:
        params = {
            "mode": "payment",
            "metadata": metadata,
            "line_items": [
                {
                    "price_data": {
                        "currency": currency,
                        "product_data": {
                            "name": product_name,
                            "description": product_description,
                        },
                        "unit_amount": amount_pence,
                    },
                    "quantity": 1,
                }
            ],
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            session = stripe.checkout.Session.create(api_key=self.secret_key, **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session create failed: {e}")
            raise UpstreamError("Failed to create payment link") from e
        return CheckoutSession(id=session.id, url=session.url)

    def retrieve_session(self, session_id: str) -> SessionDetails:
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.secret_key)
        except stripe.StripeError as e:
            logger.error(f"Stripe session retrieve failed for {session_id}: {e}")
            raise UpstreamError("Failed to verify payment with provider") from e
        return _session_details(session)

    def verify_webhook(self, raw_body: bytes, signature: str, secret: str) -> WebhookEvent:
        try:
            event = stripe.Webhook.construct_event(raw_body, signature, secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Stripe webhook signature verification failed: {e}")
            raise WebhookSignatureError("Invalid signature") from e

        event_type = event["type"]
        session = None
        if event_type.startswith("checkout.session."):
            session = _session_details(event["data"]["object"])
        return WebhookEvent(type=event_type, session=session)

    def refund(self, payment_intent_id: str) -> str:
        try:
            refund = stripe.Refund.create(
                api_key=self.secret_key,
                payment_intent=payment_intent_id,
                reason="requested_by_customer",
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe refund failed for {payment_intent_id}: {e}")
            raise UpstreamError(getattr(e, "user_message", None) or "Refund failed") from e
        return refund.id


def get_payment_provider(business) -> StripePaymentProvider | None:
    """None when no secret key is configured (payments report "not configured")."""
    if not business.stripe_secret_key:
        return None
    return StripePaymentProvider(business.stripe_secret_key)


# ── Helpers ──────────────────────────────────────────────────────────────


def _session_details(session) -> SessionDetails:
    payment_intent = session.get("payment_intent")
    if payment_intent is not None and not isinstance(payment_intent, str):
        payment_intent = payment_intent.get("id")
    metadata = session.get("metadata") or {}
    return SessionDetails(
        id=session.get("id"),
        payment_status=session.get("payment_status") or "",
        payment_intent_id=payment_intent or None,
        metadata=dict(metadata),
    )
