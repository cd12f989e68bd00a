# app/main.py
"""
FastAPI application entry point.
Includes request logging, error handlers, the license gate, and all routers.
"""

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import auth, backup, health, license, share_requests, users, vehicles
from app.database import SessionLocal, create_tables
from app.dependencies import require_valid_license
from app.exceptions import VehicleTrackerError
from app.services.license_service import ensure_license_rows
from app.services.user_service import ensure_default_admin
from app.config import settings
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Vehicle Permit Tracker API",
    description="Vehicle permits, sharing between users, maintenance history.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the front-end origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(VehicleTrackerError)
async def domain_exception_handler(request: Request, exc: VehicleTrackerError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
# Open: login, license, health
app.include_router(auth.router,    prefix="/api", tags=["Auth"])
app.include_router(license.router, prefix="/api", tags=["License"])
app.include_router(health.router,  prefix="/api", tags=["Health"])

# Everything else requires a valid (trial or activated) license
licensed = [Depends(require_valid_license)]
app.include_router(users.router,          prefix="/api", tags=["Users"],          dependencies=licensed)
app.include_router(vehicles.router,       prefix="/api", tags=["Vehicles"],       dependencies=licensed)
app.include_router(share_requests.router, prefix="/api", tags=["Share Requests"], dependencies=licensed)
app.include_router(backup.router,         prefix="/api", tags=["Backup"],         dependencies=licensed)


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Vehicle Permit Tracker starting up...")
    create_tables()
    db = SessionLocal()
    try:
        ensure_default_admin(db)
        ensure_license_rows(db)
    finally:
        db.close()
    logger.info("Database tables ready")
    logger.info(f"Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Vehicle Permit Tracker shutting down...")
