# backend/bookbar/routers/settings.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..dependencies import get_business_config
from ..schemas.settings import PublicSettingsRead, SettingsRead, SettingsUpdate
from ..services.business import BusinessConfig, load_business_config, update_settings

router = APIRouter(prefix="/settings", tags=["settings"])
admin_router = APIRouter(
    prefix="/admin/settings",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=PublicSettingsRead)
def get_public_settings(business: BusinessConfig = Depends(get_business_config)):
    return PublicSettingsRead(
        business_name=business.business_name,
        open_hour=business.open_hour,
        close_hour=business.close_hour,
        slot_interval=business.slot_interval,
        default_price=business.default_price,
        default_deposit_amount=business.default_deposit_amount,
        sms_notification_fee=business.sms_notification_fee,
        payments_enabled=bool(business.stripe_secret_key),
    )


@admin_router.get("", response_model=SettingsRead)
def get_settings(business: BusinessConfig = Depends(get_business_config)):
    return _admin_view(business)


@admin_router.patch("", response_model=SettingsRead)
def patch_settings(data: SettingsUpdate, db: Session = Depends(get_db)):
    update_settings(db, data.model_dump(exclude_unset=True))
    return _admin_view(load_business_config(db))


def _admin_view(business: BusinessConfig) -> SettingsRead:
    # Secrets are never echoed back, only whether they are set
    return SettingsRead(
        business_name=business.business_name,
        business_email=business.business_email,
        open_hour=business.open_hour,
        close_hour=business.close_hour,
        slot_interval=business.slot_interval,
        default_price=business.default_price,
        default_deposit_amount=business.default_deposit_amount,
        sms_notification_fee=business.sms_notification_fee,
        admin_login_email=business.admin_login_email,
        stripe_secret_key_set=bool(business.stripe_secret_key),
        stripe_webhook_secret_set=bool(business.stripe_webhook_secret),
    )
