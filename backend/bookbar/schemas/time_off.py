# backend/bookbar/schemas/time_off.py

from datetime import datetime
from pydantic import BaseModel


class TimeOffCreate(BaseModel):
    start_date: str
    start_time: str
    end_date: str
    end_time: str


class TimeOffRead(BaseModel):
    id: int
    start_date: str
    start_time: str
    end_date: str
    end_time: str
    created_at: datetime

    model_config = {"from_attributes": True}
