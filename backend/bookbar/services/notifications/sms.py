# backend/bookbar/services/notifications/sms.py
"""
SMS delivery through The SMS Works HTTP API.

Auth is either a ready-made token (SMS_WORKS_JWT) or one signed locally from
SMS_WORKS_API_KEY / SMS_WORKS_API_SECRET. The API expects the destination
without a leading "+".
"""

import logging
import re
from datetime import datetime, timedelta, timezone

import httpx
from jose import JWTError, jwt

from ...config import Settings, get_settings
from .base import SendResult

logger = logging.getLogger(__name__)

SMS_WORKS_API = "https://api.thesmsworks.co.uk/v1/message/send"
DEFAULT_SENDER = "BeBeautyBar"
SENDER_RE = re.compile(r"^[a-zA-Z0-9]{4,11}$")
REQUEST_TIMEOUT = 10.0  # seconds


def format_uk_phone_to_e164(phone: str) -> str:
    """
    Normalise a UK number to E.164.

    "07123 456789" → "+447123456789"; numbers already starting with 44 keep
    it. Returns "" when there are no digits at all.
    """
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return ""
    if digits.startswith("0"):
        digits = "44" + digits[1:]
    elif not digits.startswith("44") and len(digits) <= 10:
        digits = "44" + digits
    return f"+{digits}"


def resolve_sender(sender: str | None) -> str:
    sender = (sender or "").strip()
    if SENDER_RE.match(sender):
        return sender
    return DEFAULT_SENDER


class SmsWorksTransport:
    def __init__(
        self,
        token: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        sender: str | None = None,
        client: httpx.Client | None = None,
    ):
        self.token = (token or "").strip() or None
        self.api_key = (api_key or "").strip() or None
        self.api_secret = (api_secret or "").strip() or None
        self.sender = resolve_sender(sender)
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SmsWorksTransport":
        settings = settings or get_settings()
        return cls(
            token=settings.sms_works_jwt,
            api_key=settings.sms_works_api_key,
            api_secret=settings.sms_works_api_secret,
            sender=settings.sms_works_sender,
        )

    @property
    def configured(self) -> bool:
        return bool(self.token or (self.api_key and self.api_secret))

    def auth_header(self) -> str | None:
        if self.token:
            return self.token if self.token.startswith("JWT ") else f"JWT {self.token}"
        if not (self.api_key and self.api_secret):
            return None

        now = datetime.now(timezone.utc)
        try:
            token = jwt.encode(
                {"sub": self.api_key, "iat": now, "exp": now + timedelta(days=365)},
                self.api_secret,
                algorithm="HS256",
            )
        except JWTError as e:
            logger.error(f"SMS Works JWT generation failed: {e}")
            return None
        return f"JWT {token}"

    def send(self, to: str, text: str) -> SendResult:
        auth = self.auth_header()
        if not auth:
            logger.warning(
                "SMS Works not configured: set SMS_WORKS_JWT or "
                "SMS_WORKS_API_KEY + SMS_WORKS_API_SECRET"
            )
            return SendResult.failure("SMS not configured")

        destination = (to or "").lstrip("+")
        if not destination:
            return SendResult.failure("No destination number")

        body = {"sender": self.sender, "destination": destination, "content": text}
        headers = {"Content-Type": "application/json", "Authorization": auth}

        try:
            if self._client is not None:
                response = self._client.post(SMS_WORKS_API, json=body, headers=headers)
            else:
                with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
                    response = client.post(SMS_WORKS_API, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"SMS Works request failed: {e}")
            return SendResult.failure(str(e))

        if response.is_error:
            message = _error_message(response)
            logger.error(f"SMS Works send failed ({response.status_code}): {message}")
            return SendResult.failure(message)

        logger.info(f"SMS sent to {destination}")
        return SendResult.success()


def send_sms(e164_number: str, text: str) -> SendResult:
    """Send with the transport built from current settings."""
    return SmsWorksTransport.from_settings().send(e164_number, text)


# ── Helpers ──────────────────────────────────────────────────────────────


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = {}
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)
    return response.text or f"HTTP {response.status_code}"
