# backend/bookbar/schemas/payments.py

from typing import Literal, Optional
from pydantic import BaseModel


class CheckoutRequest(BaseModel):
    booking_id: Optional[str] = None
    type: Literal["deposit", "balance"] = "deposit"


class CheckoutResponse(BaseModel):
    url: str
    session_id: str


class ConfirmationResponse(BaseModel):
    ok: bool = True
    already_done: bool = False


class RefundRequest(BaseModel):
    booking_id: str
    type: Literal["deposit", "balance"]


class RefundResponse(BaseModel):
    ok: bool = True
    message: str
