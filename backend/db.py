"""
Database setup for the FastAPI backend.
Provides SQLAlchemy engine/session utilities (SQLite by default).
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from settings import settings


DATABASE_URL = settings.DATABASE_URL

# check_same_thread=False allows usage across FastAPI threads
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args, echo=settings.SQL_ECHO)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db() -> None:
    """Create tables if they don't exist."""
    from repositories import models  # noqa: F401  Ensures models are registered

    Base.metadata.create_all(bind=engine)


def get_session():
    """FastAPI dependency-style session generator."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
