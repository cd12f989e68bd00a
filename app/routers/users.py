# app/routers/users.py
"""User management: self-service endpoints plus admin-only CRUD."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, require_admin
from app.schemas.user import CallingUser, PasswordChange, UserBrief, UserCreate, UserOut, UserRegister, UserUpdate
from app.services import share_service, user_service

router = APIRouter()


@router.get("/users/me", response_model=UserOut, summary="Current user")
def me(user: CallingUser = Depends(get_current_user)):
    return UserOut(id=user.id, username=user.username, role=user.role)


@router.get("/users/shareable", response_model=list[UserBrief], summary="Users a vehicle can be shared with")
def shareable_users(user: CallingUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return share_service.list_shareable_users(db, user)


@router.get("/users/search", response_model=list[UserBrief], summary="Search non-admin users by name")
def search_users(q: str = "", user: CallingUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return share_service.search_users(db, user, q)


@router.post("/users/create", summary="Register a regular user account")
def register_user(body: UserRegister, user: CallingUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    user_service.create_user(db, body.username, body.password)
    return {"success": True}


@router.post("/users/change-password", summary="Change own password")
def change_password(body: PasswordChange, user: CallingUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    user_service.change_password(db, user, body.old_password, body.new_password)
    return {"success": True}


# ── Admin ────────────────────────────────────────────────────────────────────

@router.get("/users", response_model=list[UserOut], summary="Admin: list users")
def list_users(admin: CallingUser = Depends(require_admin), db: Session = Depends(get_db)):
    return user_service.list_users(db)


@router.post("/users", summary="Admin: create a user with a role")
def create_user(body: UserCreate, admin: CallingUser = Depends(require_admin), db: Session = Depends(get_db)):
    created = user_service.create_user(db, body.username, body.password, body.role)
    return {"success": True, "id": created.id}


@router.put("/users/{user_id}", summary="Admin: change role and/or password")
def update_user(user_id: int, body: UserUpdate, admin: CallingUser = Depends(require_admin),
                db: Session = Depends(get_db)):
    user_service.update_user(db, user_id, body.role, body.password)
    return {"success": True}


@router.delete("/users/{user_id}", summary="Admin: delete a user")
def delete_user(user_id: int, admin: CallingUser = Depends(require_admin), db: Session = Depends(get_db)):
    user_service.delete_user(db, admin, user_id)
    return {"success": True}
