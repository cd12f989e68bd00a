# app/routers/license.py
"""Trial status and activation, reachable even after the trial expires."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.license import ActivationIn, LicenseStatusOut
from app.services.license_service import activate, get_license_status

router = APIRouter()


@router.get("/license-status", response_model=LicenseStatusOut, summary="Trial / activation status")
def license_status(db: Session = Depends(get_db)):
    return get_license_status(db)


@router.post("/activate", summary="Activate with a serial key")
def activate_license(body: ActivationIn, db: Session = Depends(get_db)):
    activate(db, body.key)
    return {"success": True, "message": "Activation successful!"}
