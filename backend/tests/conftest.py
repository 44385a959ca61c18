"""
Shared fixtures: in-memory SQLite, test secrets and cheap bcrypt rounds.

Environment must be set before anything under `airmon` is imported, since
settings, the engine and the password context are built at import time.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-signing-secret"
os.environ["API_KEY"] = "test-device-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import timedelta
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from airmon.core.database import Base, SessionLocal, engine, init_db, utcnow
from airmon.core.security import create_access_token
from airmon.main import app
from airmon.models.sensor_reading import SensorReading
from airmon.services import users

API_KEY = "test-device-key"
PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_db():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user(db):
    return users.create_user(
        db,
        username="alice",
        email="alice@example.com",
        password=PASSWORD,
        firstName="Alice",
        lastName="Liddell",
    )


@pytest.fixture
def auth_headers(user) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


def add_reading(db, age: timedelta = timedelta(0), **overrides: Any) -> SensorReading:
    """Insert a reading whose createdAt lies `age` in the past."""
    fields = {
        "sensor_id": "sensor_001",
        "temperature": 22.0,
        "humidity": 50.0,
        "air_quality": 40,
        "category": "good",
    }
    fields.update(overrides)
    created = utcnow() - age
    reading = SensorReading(created_at=created, updated_at=created, **fields)
    db.add(reading)
    db.commit()
    db.refresh(reading)
    return reading
