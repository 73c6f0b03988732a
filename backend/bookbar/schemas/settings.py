# backend/bookbar/schemas/settings.py

from typing import Optional
from pydantic import BaseModel


class PublicSettingsRead(BaseModel):
    business_name: str
    open_hour: int
    close_hour: int
    slot_interval: int
    default_price: Optional[float] = None
    default_deposit_amount: Optional[float] = None
    sms_notification_fee: float
    payments_enabled: bool


class SettingsRead(BaseModel):
    business_name: str
    business_email: Optional[str] = None
    open_hour: int
    close_hour: int
    slot_interval: int
    default_price: Optional[float] = None
    default_deposit_amount: Optional[float] = None
    sms_notification_fee: float
    admin_login_email: Optional[str] = None
    stripe_secret_key_set: bool
    stripe_webhook_secret_set: bool


class SettingsUpdate(BaseModel):
    business_name: Optional[str] = None
    business_email: Optional[str] = None
    open_hour: Optional[int] = None
    close_hour: Optional[int] = None
    slot_interval: Optional[int] = None
    default_price: Optional[float] = None
    default_deposit_amount: Optional[float] = None
    sms_notification_fee: Optional[float] = None
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
