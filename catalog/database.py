"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 for the Catalog API.

The relational database is the single source of truth for every entity.
The Redis cache and the Elasticsearch index only ever hold derived copies
that can be thrown away and rebuilt from here.

Session Management Pattern
==========================
We use the "session per request" pattern:
1. Request arrives -> create a new session
2. Use session for all database operations in that request
3. Commit on success, rollback on failure
4. Close session when request ends

This is implemented using FastAPI's dependency injection.
"""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from catalog.config import get_settings

settings = get_settings()


def _engine_options(database_url: str) -> dict[str, Any]:
    """
    Build engine keyword arguments for the configured backend.

    SQLite does not use a connection pool with a fixed size, so the
    pool parameters only apply to server databases.
    """
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,  # Verify connections are alive before using
    }


# =============================================================================
# Database Engine
# =============================================================================
engine = create_engine(
    settings.database_url,
    echo=settings.debug,  # Log SQL in debug mode
    **_engine_options(settings.database_url),
)


# =============================================================================
# Session Factory
# =============================================================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

        class Book(Base):
            __tablename__ = "books"
            ...
    """
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Creates a session, yields it to the route handler and closes it when
    the request ends (the finally block runs even if an exception occurs).

    Yields:
        SQLAlchemy Session instance
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """
    Create all database tables.

    Useful for development and for the seed script.
    """
    Base.metadata.create_all(bind=engine)

