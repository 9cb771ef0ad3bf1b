"""
Database configuration for SQLAlchemy + SQLite.

The engine and session factory are built by the app lifespan from
Settings and stored on app.state; nothing is created at import time.
"""

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""
    pass


def make_engine(database_url: str, **kwargs) -> Engine:
    # SQLite needs check_same_thread=False for FastAPI because FastAPI uses threads.
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False},
        **kwargs,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory used by dependency injection and the cleanup job."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create tables if they do not exist yet."""
    # Import registers the models on Base.metadata.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    """
    FastAPI dependency that yields a DB session per request,
    then closes it cleanly afterwards.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
