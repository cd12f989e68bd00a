# app/models/vehicle_share.py
"""
Share grants: "recipient may view vehicle".
Created only when a share request is accepted. One row per
(vehicle, granting user, recipient) triple.
"""

from sqlalchemy import Column, Integer, UniqueConstraint
from app.database import Base


class VehicleShare(Base):
    __tablename__ = "vehicle_shares"
    __table_args__ = (
        UniqueConstraint("vehicle_id", "shared_by_user_id", "shared_to_user_id", name="uq_vehicle_share"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, nullable=False, index=True)
    shared_by_user_id = Column(Integer, nullable=False)
    shared_to_user_id = Column(Integer, nullable=False, index=True)

    def __repr__(self):
        return f"<VehicleShare vehicle={self.vehicle_id} {self.shared_by_user_id}->{self.shared_to_user_id}>"
