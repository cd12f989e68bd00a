# app/services/license_service.py
"""
Trial / activation gate.
The install date is recorded on first start; the app runs for TRIAL_DAYS
unless activated with the key derived from that install date.
"""

import hashlib
import math
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.database import commit_or_raise
from app.exceptions import InvalidInput
from app.models.system_config import SystemConfig
from app.schemas.license import LicenseStatusOut
from app.services.status_service import as_naive_utc
from app.utils.logger import get_logger

logger = get_logger(__name__)

INSTALL_DATE_KEY = "install_date"
ACTIVATED_KEY = "is_activated"


def _get(db: Session, key: str) -> Optional[str]:
    row = db.query(SystemConfig).filter(SystemConfig.key == key).first()
    return row.value if row else None


def _set(db: Session, key: str, value: str):
    row = db.query(SystemConfig).filter(SystemConfig.key == key).first()
    if row:
        row.value = value
    else:
        db.add(SystemConfig(key=key, value=value))


def ensure_license_rows(db: Session, now: Optional[datetime] = None) -> None:
    """Seed install_date / is_activated if missing. Safe to call on every start."""
    changed = False
    if _get(db, INSTALL_DATE_KEY) is None:
        _set(db, INSTALL_DATE_KEY, (now or datetime.utcnow()).isoformat())
        changed = True
    if _get(db, ACTIVATED_KEY) is None:
        _set(db, ACTIVATED_KEY, "false")
        changed = True
    if changed:
        commit_or_raise(db, "seed license settings")
        logger.info("License settings initialised (trial started)")


def generate_license_key(seed: str) -> str:
    digest = hashlib.md5((seed + settings.LICENSE_SALT).encode("utf-8")).hexdigest().upper()
    return "VMS-" + digest[:16]


def _parse_install_date(value: str) -> datetime:
    # Older installs stored a JS-style "...Z" timestamp
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return as_naive_utc(datetime.fromisoformat(value))


def get_license_status(db: Session, now: Optional[datetime] = None) -> LicenseStatusOut:
    install_date = _get(db, INSTALL_DATE_KEY)
    is_activated = _get(db, ACTIVATED_KEY) == "true"
    now = as_naive_utc(now or datetime.utcnow())

    if install_date:
        elapsed = now - _parse_install_date(install_date)
        days_used = math.ceil(elapsed.total_seconds() / (24 * 60 * 60))
    else:
        days_used = 0
    trial_remaining = max(0, settings.TRIAL_DAYS - days_used)

    return LicenseStatusOut(
        is_activated=is_activated,
        trial_remaining=trial_remaining,
        is_expired=not is_activated and trial_remaining <= 0,
        install_id=install_date,
    )


def activate(db: Session, key: Optional[str]) -> None:
    if not key:
        raise InvalidInput("Key required")
    install_date = _get(db, INSTALL_DATE_KEY)
    if not install_date or key.strip() != generate_license_key(install_date):
        logger.warning("Activation attempt with invalid key")
        raise InvalidInput("Invalid Serial Key")
    _set(db, ACTIVATED_KEY, "true")
    commit_or_raise(db, "activate license")
    logger.info("License activated")
