# app/schemas/license.py
from pydantic import BaseModel
from typing import Optional


class LicenseStatusOut(BaseModel):
    is_activated: bool
    trial_remaining: int
    is_expired: bool
    install_id: Optional[str]


class ActivationIn(BaseModel):
    key: Optional[str] = None
