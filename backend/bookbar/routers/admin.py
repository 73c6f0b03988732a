# backend/bookbar/routers/admin.py
# Admin session and diagnostics.

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import auth
from ..database import get_db
from ..dependencies import get_business_config, get_notification_sender
from ..schemas.admin import (
    ChangePasswordRequest,
    EmailTestRequest,
    LoginRequest,
    SendResultRead,
    SessionRead,
    SmsTestRequest,
    TokenResponse,
)
from ..services.business import BusinessConfig
from ..services.notifications.email import send_test_email
from ..services.notifications.sender import NotificationSender, send_test_sms

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    return TokenResponse(token=auth.login(db, data.email, data.password))


@router.get("/verify-session", response_model=SessionRead)
def verify_session(admin: dict = Depends(auth.get_current_admin)):
    return SessionRead(email=admin["email"])


@router.patch("/change-password")
def change_password(
    data: ChangePasswordRequest,
    admin: dict = Depends(auth.get_current_admin),
    db: Session = Depends(get_db),
):
    auth.change_password(db, admin["email"], data.current_password, data.new_password)
    return {"ok": True}


@router.post("/test-email", response_model=SendResultRead)
def test_email(
    data: EmailTestRequest,
    admin: dict = Depends(auth.get_current_admin),
    business: BusinessConfig = Depends(get_business_config),
    sender: NotificationSender = Depends(get_notification_sender),
):
    result = send_test_email(sender.email, data.to, business.business_name)
    return SendResultRead(ok=result.ok, error=result.error)


@router.post("/test-sms", response_model=SendResultRead)
def test_sms(
    data: SmsTestRequest,
    admin: dict = Depends(auth.get_current_admin),
    business: BusinessConfig = Depends(get_business_config),
    sender: NotificationSender = Depends(get_notification_sender),
):
    result = send_test_sms(sender, data.to, business.business_name)
    return SendResultRead(ok=result.ok, error=result.error)
