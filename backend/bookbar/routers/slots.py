# backend/bookbar/routers/slots.py

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_business_config
from ..errors import NotFoundError, ValidationError
from ..models import Services
from ..schemas.slots import SlotRead, SlotsDayResponse
from ..services.business import BusinessConfig
from ..services.slots import calculate_availability, calculate_day_slots
from ..services.slots.config import is_valid_date_str

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("", response_model=SlotsDayResponse)
def get_day_slots(
    service_id: int = Query(...),
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    business: BusinessConfig = Depends(get_business_config),
):
    service = _get_bookable_service(db, service_id)
    target_date = _parse_date(date_str, "date")

    slots = calculate_day_slots(db, service, target_date, business.slot_settings)
    return SlotsDayResponse(
        service_id=service.id,
        date=target_date.isoformat(),
        service_duration_min=service.duration_min,
        slots=[SlotRead(start=s.start_time, end=s.end_time) for s in slots],
    )


@router.get("/availability", response_model=dict[str, bool])
def get_availability(
    service_id: int = Query(...),
    date_from: str = Query(..., alias="from", description="YYYY-MM-DD"),
    date_to: str = Query(..., alias="to", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    business: BusinessConfig = Depends(get_business_config),
):
    service = _get_bookable_service(db, service_id)
    return calculate_availability(
        db,
        service,
        _parse_date(date_from, "from"),
        _parse_date(date_to, "to"),
        business.slot_settings,
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _get_bookable_service(db: Session, service_id: int) -> Services:
    service = db.get(Services, service_id)
    if not service or not service.active:
        raise NotFoundError("Service not found")
    return service


def _parse_date(value: str, name: str) -> date:
    if not is_valid_date_str(value):
        raise ValidationError(f"Invalid '{name}' date, expected YYYY-MM-DD")
    return date.fromisoformat(value)
