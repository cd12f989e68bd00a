# app/routers/vehicles.py
"""
Vehicle CRUD (role-filtered), details page data, history logs,
and Excel import/export.
"""

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.schemas.user import CallingUser
from app.schemas.vehicle import ImportResult, VehicleIn, VehicleOut
from app.schemas.vehicle_log import (
    FuelLogIn, FuelLogOut, MaintenanceLogIn, MaintenanceLogOut,
    MileageLogIn, MileageLogOut, VehicleDetailsOut,
)
from app.services import access_service, backup_service, vehicle_log_service

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/vehicles", response_model=list[VehicleOut], summary="Vehicles visible to the caller")
def list_vehicles(user: CallingUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Admins see every vehicle; others see their own plus those shared with them."""
    return access_service.list_visible_vehicles(db, user)


@router.post("/vehicles", summary="Add a vehicle owned by the caller")
def create_vehicle(body: VehicleIn, user: CallingUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    vehicle = access_service.create_vehicle(db, user, body.model_dump())
    return {"id": vehicle.id, "status": vehicle.status}


# Declared before /vehicles/{vehicle_id} so "export" is not parsed as an id
@router.get("/vehicles/export", summary="Download visible vehicles as .xlsx")
def export_vehicles(user: CallingUser = Depends(get_current_user), db: Session = Depends(get_db)):
    content = backup_service.export_excel(access_service.list_visible_vehicles(db, user))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="vehicles.xlsx"'},
    )


@router.post("/vehicles/import", response_model=ImportResult, summary="Import vehicles from .xlsx")
async def import_vehicles(file: UploadFile = File(...), user: CallingUser = Depends(get_current_user),
                          db: Session = Depends(get_db)):
    raw = await file.read()
    return backup_service.import_excel(db, user, raw)


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="One visible vehicle")
def get_vehicle(vehicle_id: int, user: CallingUser = Depends(get_current_user),
                db: Session = Depends(get_db)):
    return access_service.get_visible_vehicle(db, user, vehicle_id)


@router.put("/vehicles/{vehicle_id}", summary="Edit a vehicle (owner or admin)")
def update_vehicle(vehicle_id: int, body: VehicleIn, user: CallingUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    vehicle = access_service.update_vehicle(db, user, vehicle_id, body.model_dump())
    return {"updated": 1, "status": vehicle.status}


@router.delete("/vehicles/{vehicle_id}", summary="Delete a vehicle (owner or admin)")
def delete_vehicle(vehicle_id: int, user: CallingUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    access_service.delete_vehicle(db, user, vehicle_id)
    return {"deleted": 1}


# ── Details & history ────────────────────────────────────────────────────────

@router.get("/vehicles/{vehicle_id}/details", response_model=VehicleDetailsOut,
            summary="Vehicle with maintenance, service, fuel and mileage history")
def vehicle_details(vehicle_id: int, user: CallingUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    return vehicle_log_service.get_vehicle_details(db, user, vehicle_id)


@router.post("/vehicles/{vehicle_id}/maintenance", response_model=MaintenanceLogOut, summary="Log a repair")
def add_maintenance(vehicle_id: int, body: MaintenanceLogIn, user: CallingUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    return vehicle_log_service.add_maintenance_log(db, user, vehicle_id, body, vehicle_log_service.KIND_MAINTENANCE)


@router.post("/vehicles/{vehicle_id}/service", response_model=MaintenanceLogOut, summary="Log a routine service")
def add_service(vehicle_id: int, body: MaintenanceLogIn, user: CallingUser = Depends(get_current_user),
                db: Session = Depends(get_db)):
    return vehicle_log_service.add_maintenance_log(db, user, vehicle_id, body, vehicle_log_service.KIND_SERVICE)


@router.post("/vehicles/{vehicle_id}/fuel", response_model=FuelLogOut, summary="Log a fill-up")
def add_fuel(vehicle_id: int, body: FuelLogIn, user: CallingUser = Depends(get_current_user),
             db: Session = Depends(get_db)):
    return vehicle_log_service.add_fuel_log(db, user, vehicle_id, body)


@router.post("/vehicles/{vehicle_id}/mileage", response_model=MileageLogOut, summary="Log an odometer reading")
def add_mileage(vehicle_id: int, body: MileageLogIn, user: CallingUser = Depends(get_current_user),
                db: Session = Depends(get_db)):
    return vehicle_log_service.add_mileage_log(db, user, vehicle_id, body)
