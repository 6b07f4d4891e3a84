"""Database engine and session factory.

The engine is created lazily from ``TV_DATABASE_URL`` so importing the
package never opens a connection or loads a database driver.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def database_url() -> str:
    explicit = os.getenv("TV_DATABASE_URL")
    if explicit:
        return explicit
    base = Path(os.getenv("TV_DATA_ROOT", ".")) / "data"
    base.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{base / 'tradeverify.db'}"


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    return create_engine(
        url,
        pool_size=10,  # Keep 10 connections in pool
        max_overflow=20,  # Allow 20 additional connections
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,  # Recycle connections after 1 hour
    )


@lru_cache(maxsize=None)
def get_engine() -> Engine:
    return build_engine(database_url())


def get_session_factory(engine: Engine | None = None) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine or get_engine())


@contextmanager
def get_standalone_session(factory: sessionmaker | None = None) -> Generator[Session, None, None]:
    """Context manager for standalone database sessions.

    Usage in scripts:
        with get_standalone_session() as session:
            session.add(event_row)
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """Create tables (tests and local development)."""
    from tradeverify.db.models import Base

    Base.metadata.create_all(bind=engine or get_engine())


def drop_all(engine: Engine | None = None) -> None:
    """Drop all tables (for testing only)."""
    from tradeverify.db.models import Base

    Base.metadata.drop_all(bind=engine or get_engine())
