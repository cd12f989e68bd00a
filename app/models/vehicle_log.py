# app/models/vehicle_log.py
"""
Per-vehicle history shown on the details page.
MaintenanceLog holds both repairs (kind="maintenance") and routine
services (kind="service"); fuel fills and odometer readings have their own tables.
"""

from sqlalchemy import Column, Date, Float, Integer, String, Text
from app.database import Base


class MaintenanceLog(Base):
    __tablename__ = "maintenance_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, nullable=False, index=True)
    kind = Column(String(20), nullable=False, index=True)  # maintenance | service
    service_date = Column(Date, nullable=False)
    description = Column(Text)
    provider = Column(String(200))
    cost = Column(Float, default=0.0, nullable=False)

    def __repr__(self):
        return f"<MaintenanceLog {self.id} vehicle={self.vehicle_id} kind={self.kind}>"


class FuelLog(Base):
    __tablename__ = "fuel_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, nullable=False, index=True)
    date = Column(Date, nullable=False)
    liters = Column(Float, nullable=False)
    total_cost = Column(Float, default=0.0, nullable=False)
    mileage = Column(Integer, nullable=False)   # odometer at fill-up, km

    def __repr__(self):
        return f"<FuelLog {self.id} vehicle={self.vehicle_id} {self.liters}L @ {self.mileage}km>"


class MileageLog(Base):
    __tablename__ = "mileage_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, nullable=False, index=True)
    date = Column(Date, nullable=False)
    mileage = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<MileageLog {self.id} vehicle={self.vehicle_id} {self.mileage}km>"
