"""Database session management."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from comment_guard.config import settings


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool options for the configured backend."""
    if database_url.startswith("sqlite"):
        # One shared connection so an in-memory database survives across sessions
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


# Create engine
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_session() -> Generator[Session, None, None]:
    """Get a database session (for FastAPI dependency injection)."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
    """Get a database session as a context manager (for use outside of FastAPI)."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(create_tables: bool = False) -> None:
    """Verify database connectivity, optionally creating missing tables."""
    from comment_guard.db.models import Base

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))

    if create_tables:
        Base.metadata.create_all(bind=engine)
