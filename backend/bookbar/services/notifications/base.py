# backend/bookbar/services/notifications/base.py
"""Transport contracts shared by the e-mail and SMS senders."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class SendResult:
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> "SendResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "SendResult":
        return cls(ok=False, error=error)


class EmailTransport(Protocol):
    def send(self, to: str, subject: str, html: str) -> SendResult: ...


class SmsTransport(Protocol):
    def send(self, to: str, text: str) -> SendResult: ...
