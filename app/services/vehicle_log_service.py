# app/services/vehicle_log_service.py
"""
Maintenance / service / fuel / mileage history for one vehicle, plus the
summary numbers shown on the details page (total cost, current odometer,
average consumption).
Anyone who can see the vehicle can read its history; only the owner or an
admin can add to it.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import commit_or_raise
from app.models.vehicle_log import FuelLog, MaintenanceLog, MileageLog
from app.schemas.user import CallingUser
from app.schemas.vehicle_log import (
    FuelLogIn, FuelLogOut, MaintenanceLogIn, MaintenanceLogOut,
    MileageLogIn, MileageLogOut, VehicleDetailsOut, VehicleStats,
)
from app.services.access_service import get_visible_vehicle, require_mutable
from app.utils.logger import get_logger

logger = get_logger(__name__)

KIND_MAINTENANCE = "maintenance"
KIND_SERVICE = "service"


def add_maintenance_log(db: Session, user: CallingUser, vehicle_id: int,
                        body: MaintenanceLogIn, kind: str = KIND_MAINTENANCE) -> MaintenanceLog:
    require_mutable(db, user, vehicle_id, "edit")
    entry = MaintenanceLog(vehicle_id=vehicle_id, kind=kind, **body.model_dump())
    db.add(entry)
    commit_or_raise(db, f"add {kind} log to vehicle {vehicle_id}")
    db.refresh(entry)
    logger.info(f"{kind.capitalize()} log {entry.id} added to vehicle {vehicle_id}")
    return entry


def add_fuel_log(db: Session, user: CallingUser, vehicle_id: int, body: FuelLogIn) -> FuelLog:
    require_mutable(db, user, vehicle_id, "edit")
    entry = FuelLog(vehicle_id=vehicle_id, **body.model_dump())
    db.add(entry)
    commit_or_raise(db, f"add fuel log to vehicle {vehicle_id}")
    db.refresh(entry)
    return entry


def add_mileage_log(db: Session, user: CallingUser, vehicle_id: int, body: MileageLogIn) -> MileageLog:
    require_mutable(db, user, vehicle_id, "edit")
    entry = MileageLog(vehicle_id=vehicle_id, **body.model_dump())
    db.add(entry)
    commit_or_raise(db, f"add mileage log to vehicle {vehicle_id}")
    db.refresh(entry)
    return entry


def compute_stats(maintenance: list, service: list, fuel: list, mileage: list) -> VehicleStats:
    """All lists newest first."""
    total_cost = sum(m.cost or 0 for m in maintenance) + sum(s.cost or 0 for s in service)

    latest_km = mileage[0].mileage if mileage else 0
    latest_fuel_km = fuel[0].mileage if fuel else 0

    avg = None
    if len(fuel) > 1:
        distance = fuel[0].mileage - fuel[-1].mileage
        # The oldest fill-up only marks the starting point
        liters = sum(f.liters for f in fuel) - fuel[-1].liters
        if distance > 0:
            avg = round(liters / distance * 100, 2)

    return VehicleStats(
        total_cost=round(total_cost, 2),
        current_mileage=max(latest_km, latest_fuel_km),
        avg_fuel_per_100km=avg,
    )


def get_vehicle_details(db: Session, user: CallingUser, vehicle_id: int,
                        now: Optional[datetime] = None) -> VehicleDetailsOut:
    vehicle = get_visible_vehicle(db, user, vehicle_id, now)

    logs = (
        db.query(MaintenanceLog)
        .filter(MaintenanceLog.vehicle_id == vehicle_id)
        .order_by(MaintenanceLog.service_date.desc(), MaintenanceLog.id.desc())
        .all()
    )
    maintenance = [MaintenanceLogOut.model_validate(m) for m in logs if m.kind == KIND_MAINTENANCE]
    service = [MaintenanceLogOut.model_validate(m) for m in logs if m.kind == KIND_SERVICE]
    fuel = [
        FuelLogOut.model_validate(f)
        for f in db.query(FuelLog)
        .filter(FuelLog.vehicle_id == vehicle_id)
        .order_by(FuelLog.date.desc(), FuelLog.id.desc())
        .all()
    ]
    mileage = [
        MileageLogOut.model_validate(m)
        for m in db.query(MileageLog)
        .filter(MileageLog.vehicle_id == vehicle_id)
        .order_by(MileageLog.date.desc(), MileageLog.id.desc())
        .all()
    ]

    return VehicleDetailsOut(
        vehicle=vehicle,
        maintenance=maintenance,
        service=service,
        fuel=fuel,
        mileage=mileage,
        stats=compute_stats(maintenance, service, fuel, mileage),
    )
