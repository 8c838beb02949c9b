"""Database configuration and session management for the sql store backend."""

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .core.config import settings

DATABASE_URL = settings.database_url

# Create base class for models
Base = declarative_base()


def make_engine(url: str) -> Engine:
    """Create an engine with database-specific tuning."""
    if url.startswith("sqlite"):
        # In-memory SQLite lives in one connection; share it across threads
        # or every session would see an empty database.
        if url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})
    # Detects stale connections before use.
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


engine = make_engine(DATABASE_URL)