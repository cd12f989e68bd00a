# app/models/user.py
"""
Users table: login accounts.
Role is "admin" or "user"; admins see and edit every vehicle.
"""

from sqlalchemy import Column, Integer, String
from app.database import Base


class User(Base):
    __tablename__ = "users"
    # Never hand a deleted user's id to a new account
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), default="user", nullable=False)  # admin | user

    def __repr__(self):
        return f"<User {self.id} {self.username} role={self.role}>"
