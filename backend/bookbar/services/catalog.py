# backend/bookbar/services/catalog.py
"""
Service catalog and add-on management.

Price/deposit rules are checked on merged values, so a PATCH that only lowers
the price still cannot leave the deposit above it.
"""

import logging

from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models import AddOns, Bookings, Services
from . import booking_states as states

logger = logging.getLogger(__name__)


def list_services(db: Session, active_only: bool = False) -> list[Services]:
    query = db.query(Services)
    if active_only:
        query = query.filter(Services.active.is_(True))
    return query.order_by(Services.category, Services.position, Services.name).all()


def get_service(db: Session, service_id: int) -> Services:
    service = db.get(Services, service_id)
    if not service:
        raise NotFoundError("Service not found")
    return service


def create_service(db: Session, data: dict) -> Services:
    name = (data.get("name") or "").strip()
    category = (data.get("category") or "").strip()
    if not name or not category:
        raise ValidationError("name, category, duration_min, price, deposit_amount required")

    _check_service_values(
        duration_min=data.get("duration_min"),
        price=data.get("price"),
        deposit=data.get("deposit_amount"),
    )

    service = Services(
        name=name,
        category=category,
        description=data.get("description") or "",
        duration_min=int(data["duration_min"]),
        price=float(data["price"]),
        deposit_amount=float(data["deposit_amount"]),
        active=data.get("active", True),
        position=data.get("position") or 0,
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    logger.info(f"Service {service.id} created: {service.name}")
    return service


def update_service(db: Session, service_id: int, changes: dict) -> Services:
    service = get_service(db, service_id)

    for key in ("name", "category"):
        if key in changes:
            value = (changes[key] or "").strip()
            if not value:
                raise ValidationError(f"{key} cannot be empty")
            changes[key] = value

    _check_service_values(
        duration_min=changes.get("duration_min", service.duration_min),
        price=changes.get("price", service.price),
        deposit=changes.get("deposit_amount", service.deposit_amount),
    )

    for key, value in changes.items():
        setattr(service, key, value)

    db.commit()
    db.refresh(service)
    logger.info(f"Service {service_id} updated: {sorted(changes)}")
    return service


def delete_service(db: Session, service_id: int) -> None:
    """
    Remove a service that has no live bookings.

    Cancelled bookings referencing it are purged first; add-ons go with it.
    """
    service = get_service(db, service_id)

    live = (
        db.query(Bookings)
        .filter(Bookings.service_id == service_id, Bookings.status != states.CANCELLED)
        .count()
    )
    if live:
        raise ValidationError("Cannot remove a service that has bookings. Hide it instead.")

    purged = (
        db.query(Bookings)
        .filter(Bookings.service_id == service_id, Bookings.status == states.CANCELLED)
        .delete(synchronize_session=False)
    )
    db.delete(service)
    db.commit()
    logger.info(f"Service {service_id} deleted ({purged} cancelled bookings purged)")


# ── Add-ons ──────────────────────────────────────────────────────────────


def create_add_on(db: Session, service_id: int, name: str, price: float) -> AddOns:
    name = (name or "").strip()
    if not service_id or not name or price is None:
        raise ValidationError("service_id, name, and price required")
    _check_add_on_price(price)
    get_service(db, service_id)

    add_on = AddOns(service_id=service_id, name=name, price=float(price))
    db.add(add_on)
    db.commit()
    db.refresh(add_on)
    logger.info(f"Add-on {add_on.id} created for service {service_id}")
    return add_on


def update_add_on(db: Session, add_on_id: int, changes: dict) -> AddOns:
    add_on = _get_add_on(db, add_on_id)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        add_on.name = name
    if "price" in changes:
        _check_add_on_price(changes["price"])
        add_on.price = float(changes["price"])

    db.commit()
    db.refresh(add_on)
    return add_on


def delete_add_on(db: Session, add_on_id: int) -> None:
    add_on = _get_add_on(db, add_on_id)
    db.delete(add_on)
    db.commit()


# ── Helpers ──────────────────────────────────────────────────────────────


def _get_add_on(db: Session, add_on_id: int) -> AddOns:
    add_on = db.get(AddOns, add_on_id)
    if not add_on:
        raise NotFoundError("Add-on not found")
    return add_on


def _check_add_on_price(price) -> None:
    if price is None or price < 0:
        raise ValidationError("Price must be a non-negative number")


def _check_service_values(duration_min, price, deposit) -> None:
    if duration_min is None or price is None or deposit is None:
        raise ValidationError("name, category, duration_min, price, deposit_amount required")
    if duration_min <= 0:
        raise ValidationError("Duration must be greater than 0")
    if price < 0:
        raise ValidationError("Price cannot be negative")
    if deposit < 0:
        raise ValidationError("Deposit cannot be negative")
    if deposit > price:
        raise ValidationError("Deposit cannot exceed full price")
