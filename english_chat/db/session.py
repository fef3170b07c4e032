"""Database session and engine management."""
from __future__ import annotations

from functools import lru_cache
from typing import Iterator

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from english_chat.config import Settings, get_settings


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``database_url`` with pooling suited to the backend."""

    options: dict = {"pool_pre_ping": True, "echo": echo}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(pool_size=10, max_overflow=20, pool_recycle=3600)
    return create_engine(database_url, **options)


def build_session_factory(config: Settings) -> sessionmaker[Session]:
    """Return a session factory bound to the database configured in ``config``."""

    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=build_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO),
        expire_on_commit=False,  # Keep objects usable after commit
    )


@lru_cache()
def get_session_factory() -> sessionmaker[Session]:
    """Return the session factory for the process-wide settings."""

    return build_session_factory(get_settings())


def get_db() -> Iterator[Session]:
    """Yield a database session for request lifecycle."""

    db = get_session_factory()()
    try:
        yield db
    except Exception as exc:
        logger.error("Database session error", error=str(exc))
        db.rollback()
        raise
    finally:
        db.close()
