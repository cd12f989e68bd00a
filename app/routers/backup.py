# app/routers/backup.py
"""Admin-only JSON backup and restore of the vehicle table."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_admin
from app.schemas.user import CallingUser
from app.schemas.vehicle import VehicleBackup
from app.services import backup_service

router = APIRouter()


@router.get("/backup-json", response_model=list[VehicleBackup], summary="Admin: export all vehicles as JSON")
def backup_json(admin: CallingUser = Depends(require_admin), db: Session = Depends(get_db)):
    return backup_service.export_vehicles(db)


@router.post("/restore", summary="Admin: replace all vehicles from a JSON backup")
def restore(rows: Any = Body(...), admin: CallingUser = Depends(require_admin), db: Session = Depends(get_db)):
    count = backup_service.restore_vehicles(db, admin, rows)
    return {"success": True, "count": count}
