# app/schemas/vehicle.py
from pydantic import AliasChoices, BaseModel, Field, field_validator
from datetime import date
from typing import Optional


class VehicleIn(BaseModel):
    # camelCase names are what older clients and backups send
    owner_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("owner_name", "ownerName"))
    id_number: Optional[str] = Field(default=None, validation_alias=AliasChoices("id_number", "idNumber"))
    plate_number: Optional[str] = Field(default=None, validation_alias=AliasChoices("plate_number", "plateNumber"))
    vehicle_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("vehicle_name", "vehicleName"))
    model_year: Optional[str] = Field(default=None, validation_alias=AliasChoices("model_year", "modelYear"))
    category: Optional[str] = None
    permit_expiry_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("permit_expiry_date", "permitExpiryDate"))
    is_on_hold: bool = Field(default=False, validation_alias=AliasChoices("is_on_hold", "isOnHold"))

    @field_validator("model_year", "id_number", "plate_number", mode="before")
    @classmethod
    def _numbers_as_text(cls, value):
        # Spreadsheets and older clients send these as numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value


class VehicleOut(BaseModel):
    id: int
    owner_id: int
    owner_name: Optional[str]
    id_number: Optional[str]
    plate_number: Optional[str]
    vehicle_name: Optional[str]
    model_year: Optional[str]
    category: Optional[str]
    permit_expiry_date: Optional[date]
    is_on_hold: bool
    status: str                 # derived on read, never stored
    access_level: str           # owner | shared | admin
    owner_username: Optional[str] = None

    class Config:
        from_attributes = True


class VehicleBackup(VehicleIn):
    """One row of a JSON backup. owner_id is optional on restore."""
    id: Optional[int] = None
    owner_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("owner_id", "ownerId"))

    class Config:
        from_attributes = True


class ImportResult(BaseModel):
    imported: int
    total: int
    errors: list[str] = []
