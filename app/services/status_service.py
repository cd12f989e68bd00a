# app/services/status_service.py
"""
Permit status derivation.
Status is a pure function of (expiry date, hold flag, now) and is recomputed
on every read; it is never written to the vehicles table.
"""

import math
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional

from app.config import settings

SECONDS_PER_DAY = 24 * 60 * 60


class VehicleStatus(str, Enum):
    VALID = "Valid"
    EXPIRING_SOON = "Expiring Soon"
    INVALID = "Invalid"
    ON_HOLD = "On Hold"


def as_naive_utc(value) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    # A bare calendar date means midnight of that day
    return datetime.combine(value, time.min)


def days_remaining(expiry_date, now) -> int:
    """Whole days left until expiry, rounded up. Negative once expired."""
    delta = as_naive_utc(expiry_date) - as_naive_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def compute_status(
    expiry_date: Optional[date],
    on_hold: bool,
    now,
    expiring_soon_days: Optional[int] = None,
) -> VehicleStatus:
    if on_hold:
        return VehicleStatus.ON_HOLD
    if expiry_date is None:
        return VehicleStatus.INVALID   # no permit on file

    window = settings.EXPIRING_SOON_DAYS if expiring_soon_days is None else expiring_soon_days
    remaining = days_remaining(expiry_date, now)
    if remaining < 0:
        return VehicleStatus.INVALID
    if remaining <= window:
        return VehicleStatus.EXPIRING_SOON
    return VehicleStatus.VALID
