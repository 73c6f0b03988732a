"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "services",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("duration_min", sa.Integer(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("deposit_amount", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )
    op.create_table(
        "add_ons",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("services.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
    )
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("service_price", sa.Float(), nullable=False),
        sa.Column("customer_name", sa.Text(), nullable=False),
        sa.Column("customer_email", sa.Text()),
        sa.Column("customer_phone", sa.Text()),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("deposit_amount", sa.Float(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending_deposit'")),
        sa.Column("notify_by_email", sa.Boolean(), nullable=False),
        sa.Column("notify_by_sms", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("balance_paid_online", sa.Boolean(), nullable=False),
        sa.Column("deposit_payment_ref", sa.Text()),
        sa.Column("balance_payment_ref", sa.Text()),
        sa.Column("deposit_refunded_at", sa.DateTime()),
        sa.Column("balance_refunded_at", sa.DateTime()),
        sa.Column("reminder_sent_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_bookings_date", "bookings", ["date"])
    op.create_index("ix_bookings_status_created", "bookings", ["status", "created_at"])
    op.create_index(
        "uq_bookings_active_start",
        "bookings",
        ["date", "start_time"],
        unique=True,
        sqlite_where=sa.text("status != 'cancelled'"),
        postgresql_where=sa.text("status != 'cancelled'"),
    )
    op.create_table(
        "time_off_blocks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("start_date", sa.String(10), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_date", sa.String(10), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_time_off_blocks_start_date", "time_off_blocks", ["start_date"])
    op.create_index("ix_time_off_blocks_end_date", "time_off_blocks", ["end_date"])
    op.create_table(
        "business_settings",
        sa.Column("id", sa.String(16), primary_key=True),
        sa.Column("business_name", sa.Text(), nullable=False, server_default=sa.text("'Be Beauty Bar'")),
        sa.Column("business_email", sa.Text()),
        sa.Column("open_hour", sa.Integer(), nullable=False, server_default=sa.text("9")),
        sa.Column("close_hour", sa.Integer(), nullable=False, server_default=sa.text("17")),
        sa.Column("slot_interval", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("default_price", sa.Float()),
        sa.Column("default_deposit_amount", sa.Float()),
        sa.Column("sms_notification_fee", sa.Float(), nullable=False, server_default=sa.text("0.05")),
        sa.Column("stripe_secret_key", sa.Text()),
        sa.Column("stripe_webhook_secret", sa.Text()),
        sa.Column("admin_login_email", sa.Text()),
        sa.Column("admin_password_hash", sa.Text()),
    )
    op.create_table(
        "booking_day_locks",
        sa.Column("day", sa.String(10), primary_key=True),
        sa.Column("touched_at", sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table("booking_day_locks")
    op.drop_table("business_settings")
    op.drop_index("ix_time_off_blocks_end_date", table_name="time_off_blocks")
    op.drop_index("ix_time_off_blocks_start_date", table_name="time_off_blocks")
    op.drop_table("time_off_blocks")
    op.drop_index("uq_bookings_active_start", table_name="bookings")
    op.drop_index("ix_bookings_status_created", table_name="bookings")
    op.drop_index("ix_bookings_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("add_ons")
    op.drop_table("services")
