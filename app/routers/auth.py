# app/routers/auth.py
"""Login / logout. The session is a signed JWT in an http-only cookie."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.schemas.user import UserLogin
from app.services.user_service import authenticate
from app.utils.logger import get_logger
from app.utils.security import create_access_token

router = APIRouter()
logger = get_logger(__name__)


@router.post("/login", summary="Log in and receive the session cookie")
def login(body: UserLogin, response: Response, db: Session = Depends(get_db)):
    user = authenticate(db, body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": str(user.id), "role": user.role})
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="strict",
    )
    logger.info(f"User {user.id} ({user.username}) logged in")
    return {"success": True, "role": user.role}


@router.get("/logout", summary="Clear the session cookie")
def logout(response: Response):
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME)
    return {"success": True}
