# backend/bookbar/routers/services.py
# Public catalog read + admin CRUD. Hiding a service = PATCH active=false.

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..schemas.services import ServiceCreate, ServiceRead, ServiceUpdate
from ..services import catalog

router = APIRouter(prefix="/services", tags=["services"])
admin_router = APIRouter(
    prefix="/admin/services",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=list[ServiceRead])
def list_services(db: Session = Depends(get_db)):
    return catalog.list_services(db, active_only=True)


@admin_router.get("", response_model=list[ServiceRead])
def admin_list_services(db: Session = Depends(get_db)):
    return catalog.list_services(db)


@admin_router.post("", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(data: ServiceCreate, db: Session = Depends(get_db)):
    return catalog.create_service(db, data.model_dump())


@admin_router.patch("/{id}", response_model=ServiceRead)
def update_service(id: int, data: ServiceUpdate, db: Session = Depends(get_db)):
    return catalog.update_service(db, id, data.model_dump(exclude_unset=True))


@admin_router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(id: int, db: Session = Depends(get_db)):
    catalog.delete_service(db, id)
