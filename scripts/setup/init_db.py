# scripts/setup/init_db.py
"""
Initialize database — creates all tables, the default admin account
and the license/trial rows.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables, engine
from app.config import settings
from app.services.license_service import ensure_license_rows, get_license_status
from app.services.user_service import ensure_default_admin
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError


def main():
    print("Vehicle Permit Tracker — DB Initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except SQLAlchemyError as e:
        print(f"Cannot connect to database: {e}")
        sys.exit(1)

    print("\nCreating tables...")
    create_tables()

    db = SessionLocal()
    try:
        ensure_default_admin(db)
        ensure_license_rows(db)
        status = get_license_status(db)
    finally:
        db.close()

    tables = sorted(inspect(engine).get_table_names())
    print(f"\nTables in database ({len(tables)} total):")
    for t in tables:
        print(f"   - {t}")

    print(f"\nAdmin account: {settings.DEFAULT_ADMIN_USERNAME}")
    if status.is_activated:
        print("License: activated")
    else:
        print(f"License: trial, {status.trial_remaining} day(s) remaining")

    print("\nDatabase ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_IP} --port {settings.BACKEND_PORT}")


if __name__ == "__main__":
    main()
