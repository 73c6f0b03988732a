# backend/bookbar/routers/payments.py
# Checkout creation, return-page confirmation, provider webhook, admin refunds.

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..config import get_settings
from ..database import get_db
from ..dependencies import get_business_config, get_event_queue, get_provider
from ..schemas.payments import (
    CheckoutRequest,
    CheckoutResponse,
    ConfirmationResponse,
    RefundRequest,
    RefundResponse,
)
from ..services.business import BusinessConfig
from ..services.events import EventQueue
from ..services.payments import (
    PaymentProvider,
    confirm_from_return,
    create_checkout,
    handle_webhook,
    refund_payment,
)

router = APIRouter(prefix="/payments", tags=["payments"])
webhook_router = APIRouter(prefix="/webhooks", tags=["payments"])
admin_router = APIRouter(
    prefix="/admin/refunds",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.post("/checkout-session", response_model=CheckoutResponse)
def create_checkout_session(
    data: CheckoutRequest,
    db: Session = Depends(get_db),
    business: BusinessConfig = Depends(get_business_config),
    provider: PaymentProvider | None = Depends(get_provider),
):
    return create_checkout(
        db, provider, business, data.booking_id, data.type, get_settings().app_url
    )


@router.get("/confirm", response_model=ConfirmationResponse)
def confirm_payment(
    booking_id: str = Query(""),
    session_id: str = Query(""),
    db: Session = Depends(get_db),
    provider: PaymentProvider | None = Depends(get_provider),
    events: EventQueue = Depends(get_event_queue),
):
    result = confirm_from_return(db, provider, events, booking_id, session_id)
    return ConfirmationResponse(already_done=result.already_done)


@webhook_router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    db: Session = Depends(get_db),
    business: BusinessConfig = Depends(get_business_config),
    provider: PaymentProvider | None = Depends(get_provider),
    events: EventQueue = Depends(get_event_queue),
):
    raw_body = await request.body()
    handle_webhook(
        db, provider, events, raw_body, stripe_signature, business.stripe_webhook_secret
    )
    return {"received": True}


@admin_router.post("", response_model=RefundResponse)
def refund(
    data: RefundRequest,
    db: Session = Depends(get_db),
    provider: PaymentProvider | None = Depends(get_provider),
):
    refund_payment(db, provider, data.booking_id, data.type)
    return RefundResponse(message=f"{data.type.capitalize()} refunded.")
