# app/services/access_service.py
"""
Who can see and who can change which vehicle.

Visibility:
  - admin   → every vehicle, tagged "admin", with the owner's username
  - others  → owned vehicles ("owner") ∪ vehicles granted to them ("shared")
Mutation (update/delete, log entries): owner or admin only.

The owned and shared sets are loaded separately and merged in merge_visible(),
where owner rows take precedence over a grant on the same vehicle.
"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.exceptions import AccessDenied, NotFound
from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.vehicle_share import VehicleShare
from app.schemas.user import CallingUser
from app.schemas.vehicle import VehicleOut
from app.services import vehicle_repository
from app.services.status_service import compute_status
from app.utils.logger import get_logger

logger = get_logger(__name__)

ACCESS_OWNER = "owner"
ACCESS_SHARED = "shared"
ACCESS_ADMIN = "admin"


def to_vehicle_out(vehicle: Vehicle, access_level: str, now: datetime,
                   owner_username: Optional[str] = None) -> VehicleOut:
    """Convert a stored row into the API shape, deriving status for `now`."""
    return VehicleOut(
        id=vehicle.id,
        owner_id=vehicle.owner_id,
        owner_name=vehicle.owner_name,
        id_number=vehicle.id_number,
        plate_number=vehicle.plate_number,
        vehicle_name=vehicle.vehicle_name,
        model_year=vehicle.model_year,
        category=vehicle.category,
        permit_expiry_date=vehicle.permit_expiry_date,
        is_on_hold=bool(vehicle.is_on_hold),
        status=compute_status(vehicle.permit_expiry_date, vehicle.is_on_hold, now).value,
        access_level=access_level,
        owner_username=owner_username,
    )


def merge_visible(owned: Iterable[Vehicle], shared: Iterable[Vehicle]) -> list[tuple[Vehicle, str]]:
    """Union of owned and shared vehicles, one entry per vehicle id."""
    merged: dict[int, tuple[Vehicle, str]] = {}
    for vehicle in owned:
        merged[vehicle.id] = (vehicle, ACCESS_OWNER)
    for vehicle in shared:
        merged.setdefault(vehicle.id, (vehicle, ACCESS_SHARED))
    return sorted(merged.values(), key=lambda item: item[0].id)


def owned_vehicles(db: Session, user_id: int) -> list[Vehicle]:
    return db.query(Vehicle).filter(Vehicle.owner_id == user_id).all()


def shared_vehicles(db: Session, user_id: int) -> list[Vehicle]:
    return (
        db.query(Vehicle)
        .join(VehicleShare, VehicleShare.vehicle_id == Vehicle.id)
        .filter(VehicleShare.shared_to_user_id == user_id)
        .distinct()
        .all()
    )


def list_visible_vehicles(db: Session, user: CallingUser, now: Optional[datetime] = None) -> list[VehicleOut]:
    now = now or datetime.utcnow()

    if user.is_admin:
        rows = (
            db.query(Vehicle, User.username)
            .outerjoin(User, User.id == Vehicle.owner_id)
            .order_by(Vehicle.id)
            .all()
        )
        return [to_vehicle_out(v, ACCESS_ADMIN, now, owner_username=username) for v, username in rows]

    visible = merge_visible(owned_vehicles(db, user.id), shared_vehicles(db, user.id))
    return [to_vehicle_out(v, level, now) for v, level in visible]


def access_level_for(db: Session, user: CallingUser, vehicle: Vehicle) -> Optional[str]:
    """Access label the user holds on this vehicle, or None if it is not visible."""
    if user.is_admin:
        return ACCESS_ADMIN
    if vehicle.owner_id == user.id:
        return ACCESS_OWNER
    granted = db.query(VehicleShare).filter(
        VehicleShare.vehicle_id == vehicle.id,
        VehicleShare.shared_to_user_id == user.id,
    ).first()
    return ACCESS_SHARED if granted else None


def get_visible_vehicle(db: Session, user: CallingUser, vehicle_id: int,
                        now: Optional[datetime] = None) -> VehicleOut:
    vehicle = vehicle_repository.find_by_id(db, vehicle_id)
    level = access_level_for(db, user, vehicle) if vehicle else None
    if level is None:
        raise NotFound("Vehicle not found")

    owner_username = None
    if level == ACCESS_ADMIN:
        owner = db.query(User).filter(User.id == vehicle.owner_id).first()
        owner_username = owner.username if owner else None
    return to_vehicle_out(vehicle, level, now or datetime.utcnow(), owner_username=owner_username)


def require_mutable(db: Session, user: CallingUser, vehicle_id: int, action: str = "edit") -> Vehicle:
    """Existence check first (NotFound), then owner-or-admin (AccessDenied)."""
    vehicle = vehicle_repository.find_by_id(db, vehicle_id)
    if not vehicle:
        raise NotFound("Vehicle not found")
    if not user.is_admin and vehicle.owner_id != user.id:
        logger.warning(f"User {user.id} denied {action} on vehicle {vehicle_id} (owner {vehicle.owner_id})")
        raise AccessDenied(f"You can only {action} your own vehicles")
    return vehicle


def create_vehicle(db: Session, user: CallingUser, fields: dict,
                   now: Optional[datetime] = None) -> VehicleOut:
    vehicle = vehicle_repository.insert(db, owner_id=user.id, fields=fields)
    logger.info(f"Vehicle {vehicle.id} ({vehicle.plate_number}) created by user {user.id}")
    return to_vehicle_out(vehicle, ACCESS_ADMIN if user.is_admin else ACCESS_OWNER, now or datetime.utcnow())


def update_vehicle(db: Session, user: CallingUser, vehicle_id: int, fields: dict,
                   now: Optional[datetime] = None) -> VehicleOut:
    vehicle = require_mutable(db, user, vehicle_id, "edit")
    level = ACCESS_OWNER if vehicle.owner_id == user.id else ACCESS_ADMIN
    vehicle = vehicle_repository.update_by_id(db, vehicle_id, fields)
    if vehicle is None:
        raise NotFound("Vehicle not found")
    logger.info(f"Vehicle {vehicle_id} updated by user {user.id}")
    return to_vehicle_out(vehicle, level, now or datetime.utcnow())


def delete_vehicle(db: Session, user: CallingUser, vehicle_id: int) -> None:
    require_mutable(db, user, vehicle_id, "delete")
    if vehicle_repository.delete_by_id(db, vehicle_id) is None:
        raise NotFound("Vehicle not found")
    logger.info(f"Vehicle {vehicle_id} deleted by user {user.id}")
