# backend/bookbar/schemas/services.py

from typing import Optional
from pydantic import BaseModel


class AddOnRead(BaseModel):
    id: int
    service_id: int
    name: str
    price: float

    model_config = {"from_attributes": True}


class AddOnCreate(BaseModel):
    service_id: int
    name: str
    price: float


class AddOnUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = None


class ServiceCreate(BaseModel):
    name: str
    category: str
    description: Optional[str] = None
    duration_min: int
    price: float
    deposit_amount: float
    active: bool = True
    position: int = 0


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    duration_min: Optional[int] = None
    price: Optional[float] = None
    deposit_amount: Optional[float] = None
    active: Optional[bool] = None
    position: Optional[int] = None


class ServiceRead(BaseModel):
    id: int
    name: str
    category: str
    description: str
    duration_min: int
    price: float
    deposit_amount: float
    active: bool
    position: int
    add_ons: list[AddOnRead] = []

    model_config = {"from_attributes": True}
