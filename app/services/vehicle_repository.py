# app/services/vehicle_repository.py
"""
Persistence boundary for vehicle rows.
Every function returns the stored row, or None when the id does not exist;
ownership checks live in access_service, not here.
"""

from typing import Optional
from sqlalchemy.orm import Session

from app.database import commit_or_raise
from app.models.share_request import ShareRequest
from app.models.vehicle import Vehicle
from app.models.vehicle_log import FuelLog, MaintenanceLog, MileageLog
from app.models.vehicle_share import VehicleShare

VEHICLE_FIELDS = (
    "owner_name", "id_number", "plate_number", "vehicle_name",
    "model_year", "category", "permit_expiry_date", "is_on_hold",
)


def find_by_id(db: Session, vehicle_id: int) -> Optional[Vehicle]:
    return db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()


def find_all(db: Session) -> list[Vehicle]:
    return db.query(Vehicle).order_by(Vehicle.id).all()


def insert(db: Session, owner_id: int, fields: dict) -> Vehicle:
    vehicle = Vehicle(owner_id=owner_id, **{k: fields.get(k) for k in VEHICLE_FIELDS})
    vehicle.is_on_hold = bool(vehicle.is_on_hold)
    db.add(vehicle)
    commit_or_raise(db, "insert vehicle")
    db.refresh(vehicle)
    return vehicle


def update_by_id(db: Session, vehicle_id: int, fields: dict) -> Optional[Vehicle]:
    vehicle = find_by_id(db, vehicle_id)
    if not vehicle:
        return None
    for key in VEHICLE_FIELDS:
        if key in fields:
            setattr(vehicle, key, fields[key])
    vehicle.is_on_hold = bool(vehicle.is_on_hold)
    commit_or_raise(db, f"update vehicle {vehicle_id}")
    db.refresh(vehicle)
    return vehicle


def delete_by_id(db: Session, vehicle_id: int) -> Optional[Vehicle]:
    """Deletes the vehicle together with its logs, grants and share requests."""
    vehicle = find_by_id(db, vehicle_id)
    if not vehicle:
        return None
    for model in (MaintenanceLog, FuelLog, MileageLog, VehicleShare, ShareRequest):
        db.query(model).filter(model.vehicle_id == vehicle_id).delete(synchronize_session=False)
    db.delete(vehicle)
    commit_or_raise(db, f"delete vehicle {vehicle_id}")
    return vehicle
