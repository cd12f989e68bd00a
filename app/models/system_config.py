# app/models/system_config.py
"""
Key/value system settings; holds the install date and activation flag
used by the trial license gate.
"""

from sqlalchemy import Column, String, Text
from app.database import Base


class SystemConfig(Base):
    __tablename__ = "system_config"

    key = Column(String(100), primary_key=True)
    value = Column(Text)

    def __repr__(self):
        return f"<SystemConfig {self.key}={self.value}>"
