"""FastAPI dependencies shared by the routers."""

from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .services.business import BusinessConfig, load_business_config
from .services.events import EventQueue, event_queue
from .services.notifications.sender import NotificationSender
from .services.payments.provider import PaymentProvider, get_payment_provider


def get_business_config(db: Session = Depends(get_db)) -> BusinessConfig:
    return load_business_config(db)


def get_event_queue() -> EventQueue:
    return event_queue


def get_notification_sender() -> NotificationSender:
    return NotificationSender.from_settings()


def get_provider(
    business: BusinessConfig = Depends(get_business_config),
) -> PaymentProvider | None:
    return get_payment_provider(business)
