"""
database.py — Database Session & Connection Management

Purpose:
- Create the SQLAlchemy Engine + Session factory used by the backend.
- Expose a FastAPI dependency `get_db()` that yields a session per-request.
- Own the shared declarative `Base` so all models register on one metadata.
- Create the schema on startup (`init_db`); there are no migrations.

Key Characteristics:
- Synchronous SQLAlchemy engine; routes are plain `def` so FastAPI runs
  them in its thread pool.
- Session is opened at the start of a request and closed after the response.
- Consistency is per-statement; no transaction spans a whole logical operation.

This module does NOT:
- Define ORM models (see airmon/models/*).
- Perform any queries or business logic.
"""

from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from airmon.core.config import settings


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_db_url(db_url: str) -> str:
    """
    Use psycopg (v3) for bare postgresql:// URLs.
    """
    db_url = db_url.strip()
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)
    if db_url.startswith("postgresql://") and "+" not in db_url.split("://")[0]:
        db_url = db_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return db_url


def build_engine(db_url: str) -> Engine:
    db_url = normalize_db_url(db_url)

    if db_url.startswith("sqlite"):
        # In-memory SQLite must share one connection across threads
        kwargs = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, **kwargs)

    return create_engine(
        db_url,
        pool_pre_ping=True  # Ensures connections are valid before use
    )


# -----------------------------------------------------------------------------
# SQLAlchemy Engine
# -----------------------------------------------------------------------------

engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine
)


def init_db() -> None:
    """Create tables and indexes that do not exist yet."""
    # Register models on Base.metadata
    from airmon.models import sensor_reading, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------

def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: yields a database session for the duration of the request.

    Usage in API endpoint:
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
