# app/schemas/vehicle_log.py
import datetime as dt
from pydantic import BaseModel
from typing import Optional

from app.schemas.vehicle import VehicleOut


class MaintenanceLogIn(BaseModel):
    service_date: dt.date
    description: Optional[str] = None
    provider: Optional[str] = None
    cost: float = 0.0


class MaintenanceLogOut(MaintenanceLogIn):
    id: int
    vehicle_id: int
    kind: str

    class Config:
        from_attributes = True


class FuelLogIn(BaseModel):
    date: dt.date
    liters: float
    total_cost: float = 0.0
    mileage: int


class FuelLogOut(FuelLogIn):
    id: int
    vehicle_id: int

    class Config:
        from_attributes = True


class MileageLogIn(BaseModel):
    date: dt.date
    mileage: int


class MileageLogOut(MileageLogIn):
    id: int
    vehicle_id: int

    class Config:
        from_attributes = True


class VehicleStats(BaseModel):
    total_cost: float
    current_mileage: int
    avg_fuel_per_100km: Optional[float] = None   # None until two fills span some distance


class VehicleDetailsOut(BaseModel):
    vehicle: VehicleOut
    maintenance: list[MaintenanceLogOut]
    service: list[MaintenanceLogOut]
    fuel: list[FuelLogOut]
    mileage: list[MileageLogOut]
    stats: VehicleStats
