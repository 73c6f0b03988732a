# backend/bookbar/services/business.py
"""
Business-wide configuration: the single `business_settings` row merged with
environment fallbacks into a frozen BusinessConfig.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..errors import ValidationError
from ..models import BusinessSettings
from .slots.config import SlotSettings

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = "default"
DEFAULT_BUSINESS_NAME = "Be Beauty Bar"
DEFAULT_SMS_FEE = 0.05

MIN_SLOT_INTERVAL = 5
MAX_SLOT_INTERVAL = 240

REQUIRED_FIELDS = ("business_name", "open_hour", "close_hour", "slot_interval", "sms_notification_fee")


@dataclass(frozen=True)
class BusinessConfig:
    business_name: str = DEFAULT_BUSINESS_NAME
    business_email: str | None = None
    open_hour: int = 9
    close_hour: int = 17
    slot_interval: int = 30
    default_price: float | None = None
    default_deposit_amount: float | None = None
    sms_notification_fee: float = DEFAULT_SMS_FEE
    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None
    admin_login_email: str | None = None
    admin_password_hash: str | None = None

    @property
    def slot_settings(self) -> SlotSettings:
        return SlotSettings(
            open_hour=self.open_hour,
            close_hour=self.close_hour,
            slot_interval_minutes=self.slot_interval,
        )

    def min_bookable_date(self, now: datetime) -> date:
        """Bookings are accepted from tomorrow onwards."""
        return self.slot_settings.min_bookable_date(now)


def get_or_create_settings(db: Session) -> BusinessSettings:
    row = db.get(BusinessSettings, SETTINGS_ROW_ID)
    if row:
        return row

    row = BusinessSettings(
        id=SETTINGS_ROW_ID,
        business_name=DEFAULT_BUSINESS_NAME,
        open_hour=9,
        close_hour=17,
        slot_interval=30,
        sms_notification_fee=DEFAULT_SMS_FEE,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        # Another request created it first
        db.rollback()
        return db.get(BusinessSettings, SETTINGS_ROW_ID)
    db.refresh(row)
    logger.info("Created default business settings row")
    return row


def load_business_config(db: Session, app_settings: Settings | None = None) -> BusinessConfig:
    """Resolve BusinessConfig; database values win over environment fallbacks."""
    app_settings = app_settings or get_settings()
    row = get_or_create_settings(db)

    return BusinessConfig(
        business_name=row.business_name or DEFAULT_BUSINESS_NAME,
        business_email=row.business_email or None,
        open_hour=row.open_hour if row.open_hour is not None else 9,
        close_hour=row.close_hour if row.close_hour is not None else 17,
        slot_interval=row.slot_interval or 30,
        default_price=row.default_price,
        default_deposit_amount=row.default_deposit_amount,
        sms_notification_fee=(
            row.sms_notification_fee if row.sms_notification_fee is not None else DEFAULT_SMS_FEE
        ),
        stripe_secret_key=row.stripe_secret_key or app_settings.stripe_secret_key,
        stripe_webhook_secret=row.stripe_webhook_secret or app_settings.stripe_webhook_secret,
        admin_login_email=row.admin_login_email,
        admin_password_hash=row.admin_password_hash,
    )


def update_settings(db: Session, changes: dict) -> BusinessSettings:
    """
    Apply a partial update to the settings row.

    Hours and interval are validated on the merged values so that a PATCH
    touching only close_hour still respects open < close.
    """
    missing = sorted(key for key in REQUIRED_FIELDS if key in changes and changes[key] is None)
    if missing:
        raise ValidationError(f"These settings cannot be empty: {', '.join(missing)}")

    row = get_or_create_settings(db)

    open_hour = changes.get("open_hour", row.open_hour)
    close_hour = changes.get("close_hour", row.close_hour)
    if not (0 <= open_hour <= 23 and 1 <= close_hour <= 24 and open_hour < close_hour):
        raise ValidationError("Opening hours must satisfy 0 <= open < close <= 24")

    slot_interval = changes.get("slot_interval", row.slot_interval)
    if not MIN_SLOT_INTERVAL <= slot_interval <= MAX_SLOT_INTERVAL:
        raise ValidationError(
            f"Slot interval must be between {MIN_SLOT_INTERVAL} and {MAX_SLOT_INTERVAL} minutes"
        )

    fee = changes.get("sms_notification_fee", row.sms_notification_fee)
    if fee is None or fee < 0:
        raise ValidationError("SMS notification fee must be 0 or more")

    default_price = changes.get("default_price", row.default_price)
    default_deposit = changes.get("default_deposit_amount", row.default_deposit_amount)
    if default_price is not None and default_price < 0:
        raise ValidationError("Default price must be 0 or more")
    if default_deposit is not None and default_deposit < 0:
        raise ValidationError("Default deposit must be 0 or more")
    if default_price is not None and default_deposit is not None and default_deposit > default_price:
        raise ValidationError("Default deposit cannot exceed default price")

    if "business_name" in changes:
        name = (changes["business_name"] or "").strip()
        if not name:
            raise ValidationError("Business name is required")
        changes["business_name"] = name

    for key in ("stripe_secret_key", "stripe_webhook_secret", "business_email"):
        if key in changes and isinstance(changes[key], str):
            # Empty string clears the value
            changes[key] = changes[key].strip() or None

    for key, value in changes.items():
        setattr(row, key, value)

    db.commit()
    db.refresh(row)
    logger.info(f"Business settings updated: {sorted(changes)}")
    return row
