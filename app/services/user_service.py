# app/services/user_service.py
"""
User accounts: login check, admin user management, self-service
registration and password change, and the default admin seed.
"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import settings
from app.database import commit_or_raise
from app.exceptions import InvalidInput, NotFound
from app.models.share_request import ShareRequest
from app.models.user import User
from app.models.vehicle_share import VehicleShare
from app.schemas.user import ROLE_ADMIN, ROLE_USER, ROLES, CallingUser
from app.utils.logger import get_logger
from app.utils.security import get_password_hash, verify_password

logger = get_logger(__name__)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id).all()


def authenticate(db: Session, username: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login for username={username!r}")
        return None
    return user


def create_user(db: Session, username: str, password: str, role: str = ROLE_USER) -> User:
    if not username or not password:
        raise InvalidInput("Missing fields")
    if role not in ROLES:
        raise InvalidInput(f"Unknown role: {role}")
    if db.query(User).filter(User.username == username).first():
        raise InvalidInput("Username already exists")

    user = User(username=username, hashed_password=get_password_hash(password), role=role)
    db.add(user)
    commit_or_raise(db, f"create user {username}")
    db.refresh(user)
    logger.info(f"User {user.id} ({username}) created with role={role}")
    return user


def update_user(db: Session, user_id: int, role: str, password: Optional[str] = None) -> User:
    if role not in ROLES:
        raise InvalidInput(f"Unknown role: {role}")
    user = get_user(db, user_id)
    if not user:
        raise NotFound("User not found")
    user.role = role
    if password:
        user.hashed_password = get_password_hash(password)
    commit_or_raise(db, f"update user {user_id}")
    logger.info(f"User {user_id} updated (role={role}, password_changed={bool(password)})")
    return user


def delete_user(db: Session, acting_user: CallingUser, user_id: int) -> None:
    if user_id == acting_user.id:
        raise InvalidInput("Cannot delete yourself")
    user = get_user(db, user_id)
    if not user:
        raise NotFound("User not found")
    # Vehicles stay (admins still see them); grants and requests go
    db.query(VehicleShare).filter(or_(
        VehicleShare.shared_by_user_id == user_id,
        VehicleShare.shared_to_user_id == user_id,
    )).delete(synchronize_session=False)
    db.query(ShareRequest).filter(or_(
        ShareRequest.shared_by_user_id == user_id,
        ShareRequest.shared_to_user_id == user_id,
    )).delete(synchronize_session=False)
    db.delete(user)
    commit_or_raise(db, f"delete user {user_id}")
    logger.info(f"User {user_id} deleted by admin {acting_user.id}")


def change_password(db: Session, user: CallingUser, old_password: str, new_password: str) -> None:
    if not new_password:
        raise InvalidInput("New password required")
    stored = get_user(db, user.id)
    if not stored:
        raise NotFound("User not found")
    if not verify_password(old_password, stored.hashed_password):
        raise InvalidInput("Current password is incorrect")
    stored.hashed_password = get_password_hash(new_password)
    commit_or_raise(db, f"change password for user {user.id}")
    logger.info(f"User {user.id} changed their password")


def ensure_default_admin(db: Session) -> None:
    """Create the bootstrap admin account on first start."""
    username = settings.DEFAULT_ADMIN_USERNAME
    if db.query(User).filter(User.username == username).first():
        return
    create_user(db, username, settings.DEFAULT_ADMIN_PASSWORD, ROLE_ADMIN)
    logger.info(f"Default admin account '{username}' created")
