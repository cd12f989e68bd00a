# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite works for single-machine installs).
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings
from app.exceptions import StorageError
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,   # Auto-reconnect if DB connection drops
        "pool_size": 10,
        "max_overflow": 20,
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,                  # Set True to log all SQL queries (debug only)
    **_engine_options(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.user import User                       # noqa
    from app.models.vehicle import Vehicle                 # noqa
    from app.models.vehicle_share import VehicleShare      # noqa
    from app.models.share_request import ShareRequest      # noqa
    from app.models.vehicle_log import MaintenanceLog, FuelLog, MileageLog  # noqa
    from app.models.system_config import SystemConfig      # noqa

    Base.metadata.create_all(bind=bind or engine)


def commit_or_raise(db, action: str):
    """Commit the session; on failure roll back and raise StorageError."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure during {action}: {e}")
        raise StorageError(f"Could not {action}") from e
