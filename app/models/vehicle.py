# app/models/vehicle.py
"""
Vehicles table — one row per permit-holding vehicle.
Status (Valid / Expiring Soon / Invalid / On Hold) is NOT stored here:
it is derived from permit_expiry_date + is_on_hold on every read.
"""

from sqlalchemy import Boolean, Column, Date, Integer, String
from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, nullable=False, index=True)  # users.id of the creator
    owner_name = Column(String(200))
    id_number = Column(String(100))
    plate_number = Column(String(50), index=True)
    vehicle_name = Column(String(200))
    model_year = Column(String(10))
    category = Column(String(100))
    permit_expiry_date = Column(Date)
    is_on_hold = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Vehicle {self.id} plate={self.plate_number} owner_id={self.owner_id}>"
