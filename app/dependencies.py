# app/dependencies.py
"""
FastAPI dependencies shared by the routers: the calling user (from the
login cookie), the admin guard, and the trial/license gate.
"""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.exceptions import LicenseExpired
from app.schemas.user import CallingUser
from app.services.license_service import get_license_status
from app.services.user_service import get_user
from app.utils.security import decode_access_token


def get_current_user(request: Request, db: Session = Depends(get_db)) -> CallingUser:
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")

    # Reload so role changes and deletions take effect immediately
    user = get_user(db, int(user_id))
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User no longer exists")
    return CallingUser(id=user.id, username=user.username, role=user.role)


def require_admin(user: CallingUser = Depends(get_current_user)) -> CallingUser:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return user


def require_valid_license(db: Session = Depends(get_db)):
    license_status = get_license_status(db)
    if license_status.is_expired:
        raise LicenseExpired(
            f"Your {settings.TRIAL_DAYS}-day trial has expired. Please activate the full version."
        )
