# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL. All models are auto-imported here
so create_tables() creates every table in one call.

Every storage call is bounded: pool checkout, connect and (on PostgreSQL)
statement execution all time out instead of hanging the request.
"""

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.config import settings


def _build_engine(url: str):
    if url.startswith("sqlite"):
        # Local runs and tests; one shared connection for in-memory databases
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    return create_engine(
        url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        connect_args={
            "connect_timeout": settings.DB_CONNECT_TIMEOUT,
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        },
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


engine = _build_engine(settings.DATABASE_URL)
read_engine = _build_engine(settings.READ_REPLICA_URL) if settings.READ_REPLICA_URL else engine

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
ReadSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=read_engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_read_db():
    """
    FastAPI dependency for aggregation reads.
    Uses the read replica when READ_REPLICA_URL is set, so results may lag
    the primary by up to STATS_REFRESH_SECONDS.
    """
    db = ReadSessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db):
    """Unit of work: commits on clean exit, rolls back on any exception."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def create_tables():
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.organization import Organization      # noqa
    from app.models.camera import Camera                  # noqa
    from app.models.anomaly import AnomalyRule            # noqa
    from app.models.anomaly_alert import AnomalyAlert     # noqa

    Base.metadata.create_all(bind=engine)
