from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


def _booking_id() -> str:
    return uuid4().hex


class Services(Base):
    __tablename__ = 'services'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    description = Column(Text, nullable=False, server_default=text("''"))
    duration_min = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    deposit_amount = Column(Float, nullable=False, server_default=text('0'))
    active = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, server_default=text('0'))

    add_ons = relationship(
        'AddOns',
        back_populates='service',
        order_by='AddOns.id',
        cascade='all, delete-orphan',
    )
    bookings = relationship('Bookings', back_populates='service')


class AddOns(Base):
    __tablename__ = 'add_ons'

    id = Column(Integer, primary_key=True)
    service_id = Column(ForeignKey('services.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    price = Column(Float, nullable=False)

    service = relationship('Services', back_populates='add_ons')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        # At most one live booking may start at a given minute of a given day
        Index(
            'uq_bookings_active_start',
            'date',
            'start_time',
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
        Index('ix_bookings_status_created', 'status', 'created_at'),
    )

    id = Column(String(32), primary_key=True, default=_booking_id)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    service_price = Column(Float, nullable=False)

    customer_name = Column(Text, nullable=False)
    customer_email = Column(Text)
    customer_phone = Column(Text)

    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM

    deposit_amount = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, server_default=text("'pending_deposit'"))
    # pending_deposit - created, awaiting deposit
    # confirmed - deposit received (online or marked by admin)
    # cancelled - by admin, by expiry sweep, or by customer

    notify_by_email = Column(Boolean, nullable=False, default=False)
    notify_by_sms = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=False, server_default=text("''"))

    balance_paid_online = Column(Boolean, nullable=False, default=False)
    deposit_payment_ref = Column(Text)
    balance_payment_ref = Column(Text)
    deposit_refunded_at = Column(DateTime)
    balance_refunded_at = Column(DateTime)

    reminder_sent_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    service = relationship('Services', back_populates='bookings')


class TimeOffBlocks(Base):
    __tablename__ = 'time_off_blocks'

    id = Column(Integer, primary_key=True)
    start_date = Column(String(10), nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    end_date = Column(String(10), nullable=False, index=True)
    end_time = Column(String(5), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class BusinessSettings(Base):
    __tablename__ = 'business_settings'

    id = Column(String(16), primary_key=True, default='default')
    business_name = Column(Text, nullable=False, server_default=text("'Be Beauty Bar'"))
    business_email = Column(Text)
    open_hour = Column(Integer, nullable=False, server_default=text('9'))
    close_hour = Column(Integer, nullable=False, server_default=text('17'))
    slot_interval = Column(Integer, nullable=False, server_default=text('30'))
    default_price = Column(Float)
    default_deposit_amount = Column(Float)
    sms_notification_fee = Column(Float, nullable=False, server_default=text('0.05'))
    stripe_secret_key = Column(Text)
    stripe_webhook_secret = Column(Text)
    admin_login_email = Column(Text)
    admin_password_hash = Column(Text)


class BookingDayLocks(Base):
    """One row per calendar day; writers upsert it to serialise per-day admission."""
    __tablename__ = 'booking_day_locks'

    day = Column(String(10), primary_key=True)
    touched_at = Column(DateTime, nullable=False, default=datetime.now)
