# backend/bookbar/routers/add_ons.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..schemas.services import AddOnCreate, AddOnRead, AddOnUpdate
from ..services import catalog

router = APIRouter(
    prefix="/admin/add-ons",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.post("", response_model=AddOnRead, status_code=status.HTTP_201_CREATED)
def create_add_on(data: AddOnCreate, db: Session = Depends(get_db)):
    return catalog.create_add_on(db, data.service_id, data.name, data.price)


@router.patch("/{id}", response_model=AddOnRead)
def update_add_on(id: int, data: AddOnUpdate, db: Session = Depends(get_db)):
    return catalog.update_add_on(db, id, data.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_add_on(id: int, db: Session = Depends(get_db)):
    catalog.delete_add_on(db, id)
