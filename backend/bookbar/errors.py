"""
Domain error taxonomy.

Services raise these; main.py renders them as
{"detail": message, "code": code} with the matching HTTP status.
"""


class BookingError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500
    code = "error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(BookingError):
    """Missing or malformed input. Never retried."""

    status_code = 400
    code = "validation_error"


class WebhookSignatureError(ValidationError):
    """Webhook payload failed signature verification."""

    code = "invalid_signature"


class Unauthorized(BookingError):
    status_code = 401
    code = "unauthorized"


class NotFoundError(BookingError):
    status_code = 404
    code = "not_found"


class ConflictError(BookingError):
    """Slot or time-off overlap. Caller should re-query and pick again."""

    status_code = 409
    code = "slot_unavailable"


class UpstreamError(BookingError):
    """Payment provider or notification transport failure."""

    status_code = 502
    code = "upstream_error"


class NotConfiguredError(BookingError):
    """An optional integration (payments, cron) is not configured."""

    status_code = 503
    code = "not_configured"
