# backend/agenda/routers/services.py
# PATCH = ALLOWED, DELETE = soft-delete (is_active)

import json

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Services as DBServices
from ..schemas.services import (
    ServiceCreate,
    ServiceUpdate,
    ServiceRead,
)
from ..services.booking_store import service_offered_at

router = APIRouter(prefix="/services", tags=["services"])


@router.get("/", response_model=list[ServiceRead])
def list_services(location_id: int | None = None, db: Session = Depends(get_db)):
    """Active services; with location_id, only those offered there."""
    services = (
        db.query(DBServices)
        .filter(DBServices.is_active == 1)
        .order_by(DBServices.id)
        .all()
    )
    if location_id is None:
        return services
    return [s for s in services if service_offered_at(s, location_id)]


@router.get("/{id}", response_model=ServiceRead)
def get_service(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
    data: ServiceCreate,
    db: Session = Depends(get_db),
):
    fields = data.model_dump()
    fields["allowed_location_ids"] = json.dumps(fields["allowed_location_ids"])
    obj = DBServices(**fields)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}", response_model=ServiceRead)
def update_service(
    id: int,
    data: ServiceUpdate,
    db: Session = Depends(get_db),
):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("allowed_location_ids") is not None:
        changes["allowed_location_ids"] = json.dumps(changes["allowed_location_ids"])
    elif "allowed_location_ids" in changes:
        changes["allowed_location_ids"] = "[]"

    for field, value in changes.items():
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    obj.is_active = 0
    db.commit()
