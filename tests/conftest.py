# tests/conftest.py
"""
Shared fixtures: an in-memory SQLite session with every table created,
user/vehicle factories, and a TestClient wired to that session.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import create_tables
from app.models.user import User
from app.schemas.user import ROLE_ADMIN, ROLE_USER, CallingUser
from app.services import vehicle_repository


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(username, role=ROLE_USER, hashed_password="not-a-real-hash"):
        user = User(username=username, hashed_password=hashed_password, role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return CallingUser(id=user.id, username=user.username, role=user.role)
    return _make


@pytest.fixture
def admin(make_user):
    return make_user("root", ROLE_ADMIN)


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def make_vehicle(db):
    def _make(owner, plate="ABC-123", days_valid=30, on_hold=False, **fields):
        data = {
            "owner_name": fields.pop("owner_name", "Owner"),
            "plate_number": plate,
            "vehicle_name": fields.pop("vehicle_name", "Van"),
            "permit_expiry_date": date.today() + timedelta(days=days_valid),
            "is_on_hold": on_hold,
            **fields,
        }
        return vehicle_repository.insert(db, owner_id=owner.id, fields=data)
    return _make


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient
    from app.database import get_db
    from app.main import app

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    # No context manager: skip startup hooks, tables already exist
    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    from app.config import settings
    from app.utils.security import create_access_token

    def _login(user: CallingUser):
        client.cookies.set(settings.AUTH_COOKIE_NAME, create_access_token({"sub": str(user.id), "role": user.role}))
        return client
    return _login
