# backend/bookbar/schemas/slots.py

from pydantic import BaseModel


class SlotRead(BaseModel):
    start: str  # HH:MM
    end: str  # HH:MM


class SlotsDayResponse(BaseModel):
    service_id: int
    date: str
    service_duration_min: int
    slots: list[SlotRead]
