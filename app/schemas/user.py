# app/schemas/user.py
from pydantic import BaseModel
from typing import Optional

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = {ROLE_ADMIN, ROLE_USER}


class CallingUser(BaseModel):
    """Identity handed to every service call. Services never read the session."""
    id: int
    username: str = ""
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class UserLogin(BaseModel):
    username: str
    password: str


class UserRegister(BaseModel):
    username: str
    password: str


class UserCreate(UserRegister):
    role: str = ROLE_USER


class UserUpdate(BaseModel):
    role: str
    password: Optional[str] = None


class PasswordChange(BaseModel):
    old_password: str
    new_password: str


class UserOut(BaseModel):
    id: int
    username: str
    role: str

    class Config:
        from_attributes = True


class UserBrief(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True
