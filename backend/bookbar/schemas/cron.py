# backend/bookbar/schemas/cron.py

from pydantic import BaseModel


class ExpirySweepRead(BaseModel):
    ok: bool = True
    cancelled: int
    notifications_failed: int
    message: str


class ReminderSweepRead(BaseModel):
    ok: bool = True
    sent: int
    failed: int
    skipped: int
    message: str
