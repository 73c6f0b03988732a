# backend/bookbar/routers/cron.py
# Endpoints for the external scheduler (hourly or finer).
# Auth: Authorization: Bearer <CRON_SECRET>, or ?secret=<CRON_SECRET>.

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..dependencies import get_business_config, get_notification_sender
from ..errors import NotConfiguredError, Unauthorized
from ..schemas.cron import ExpirySweepRead, ReminderSweepRead
from ..services.business import BusinessConfig
from ..services.expiry_checker import run_expiry_sweep
from ..services.notifications.sender import NotificationSender
from ..services.reminder_checker import run_reminder_sweep


def require_cron_secret(
    authorization: Optional[str] = Header(default=None),
    secret: Optional[str] = Query(default=None),
) -> None:
    expected = get_settings().cron_secret
    if not expected:
        raise NotConfiguredError("CRON_SECRET not configured")

    provided = None
    if authorization and authorization.startswith("Bearer "):
        provided = authorization[len("Bearer "):]
    elif secret:
        provided = secret

    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        raise Unauthorized("Unauthorized")


router = APIRouter(
    prefix="/cron",
    tags=["cron"],
    dependencies=[Depends(require_cron_secret)],
)


@router.api_route(
    "/cancel-expired-pending-deposits",
    methods=["GET", "POST"],
    response_model=ExpirySweepRead,
)
def cancel_expired_pending_deposits(
    db: Session = Depends(get_db),
    business: BusinessConfig = Depends(get_business_config),
    sender: NotificationSender = Depends(get_notification_sender),
):
    result = run_expiry_sweep(db, sender, business)
    return ExpirySweepRead(
        cancelled=result.cancelled,
        notifications_failed=result.notifications_failed,
        message=result.message,
    )


@router.api_route(
    "/send-24h-reminders",
    methods=["GET", "POST"],
    response_model=ReminderSweepRead,
)
def send_24h_reminders(
    db: Session = Depends(get_db),
    business: BusinessConfig = Depends(get_business_config),
    sender: NotificationSender = Depends(get_notification_sender),
):
    result = run_reminder_sweep(db, sender, business)
    return ReminderSweepRead(
        sent=result.sent,
        failed=result.failed,
        skipped=result.skipped,
        message=result.message,
    )
