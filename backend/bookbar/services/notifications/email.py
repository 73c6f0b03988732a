# backend/bookbar/services/notifications/email.py
"""
E-mail delivery through Resend.

Never raises: every outcome is reported as a SendResult so that callers
(queue consumer, sweeps, admin test endpoint) decide what a failure means.
"""

import logging

import resend

from ...config import Settings, get_settings
from .base import SendResult

logger = logging.getLogger(__name__)

TEST_EMAIL_HTML = (
    "<p>If you received this, your email setup is working. Booking and "
    "confirmation emails will be sent from the same system.</p>"
)


class ResendEmailTransport:
    def __init__(self, api_key: str | None, sender: str):
        self.api_key = api_key
        self.sender = sender

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ResendEmailTransport":
        settings = settings or get_settings()
        return cls(api_key=settings.resend_api_key, sender=settings.email_from)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def send(self, to: str, subject: str, html: str) -> SendResult:
        if not self.configured:
            logger.warning(f"RESEND_API_KEY not set; email '{subject}' not sent")
            return SendResult.failure("Email not configured")

        to = (to or "").strip()
        if not to:
            return SendResult.failure("No recipient")

        # resend keeps the key at module level
        resend.api_key = self.api_key
        try:
            response = resend.Emails.send({
                "from": self.sender,
                "to": [to],
                "subject": subject,
                "html": html,
            })
        except Exception as e:
            logger.error(f"Resend send failed to {to}: {e}")
            return SendResult.failure(str(e))

        logger.info(f"Email sent via Resend to {to}: {response}")
        return SendResult.success()


def send_email(to: str, subject: str, html: str) -> SendResult:
    """Send with the transport built from current settings."""
    return ResendEmailTransport.from_settings().send(to, subject, html)


def send_test_email(transport, to: str, business_name: str) -> SendResult:
    return transport.send(to, f"{business_name} – test email", TEST_EMAIL_HTML)
