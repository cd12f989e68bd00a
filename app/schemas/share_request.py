# app/schemas/share_request.py
from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Any, Optional


class ShareRequestCreate(BaseModel):
    # Lists are checked by share_service so a malformed batch fails as a whole
    vehicle_ids: Any = Field(default=None, validation_alias=AliasChoices("vehicle_ids", "vehicleIds"))
    target_user_ids: Any = Field(default=None, validation_alias=AliasChoices("target_user_ids", "targetUserIds"))


class ShareBatchResult(BaseModel):
    success: bool = True
    requests_created: int = Field(alias="requestsCreated")
    errors: Optional[list[str]] = None

    class Config:
        populate_by_name = True


class PendingShareRequestOut(BaseModel):
    id: int
    vehicle_id: int
    shared_by_user_id: int
    created_at: datetime
    vehicle_name: Optional[str]
    plate_number: Optional[str]
    owner_name: Optional[str]
    shared_by_username: str


class SentShareRequestOut(BaseModel):
    id: int
    vehicle_id: int
    shared_to_user_id: int
    status: str
    created_at: datetime
    updated_at: datetime
    vehicle_name: Optional[str]
    plate_number: Optional[str]
    shared_to_username: str
