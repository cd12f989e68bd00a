# app/models/share_request.py
"""
Share requests: a proposal to share a vehicle, waiting for the recipient.
Lifecycle: pending → accepted | rejected. Both end states are final.
"""

from sqlalchemy import Column, DateTime, Integer, String
from app.database import Base

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"


class ShareRequest(Base):
    __tablename__ = "share_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, nullable=False, index=True)
    shared_by_user_id = Column(Integer, nullable=False, index=True)
    shared_to_user_id = Column(Integer, nullable=False, index=True)
    status = Column(String(20), default=PENDING, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<ShareRequest {self.id} vehicle={self.vehicle_id} status={self.status}>"
