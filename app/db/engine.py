# =============================================================================
# Database Engine & Session Management
# =============================================================================
#
# DESIGN DECISION: Async SQLAlchemy engine, built explicitly at startup.
# The engine and session factory are created by the application lifespan
# (app/main.py) and handed to the key store. Nothing here is a module-level
# singleton, so tests can point a fresh engine at a temporary database.
#
# SESSION LIFECYCLE:
# Every key store operation opens one session, executes exactly one
# statement, commits (for writes) and closes. The pool hands the
# connection back immediately afterwards.
# =============================================================================

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import Settings
from app.db.models import Base
from app.errors import FatalStartupError

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database URL.

    Pool sizing applies to server databases only; SQLite manages its own
    pool and rejects the pool_size/max_overflow arguments.

    hide_parameters keeps bound values (hashes, caller metadata) out of
    exception messages and therefore out of the logs.
    """
    kwargs: dict = {"echo": settings.debug, "hide_parameters": True}
    if not settings.database_url.startswith("sqlite"):
        kwargs["pool_size"] = settings.db_pool_size
        kwargs["max_overflow"] = settings.db_max_overflow
        kwargs["pool_pre_ping"] = True
    return create_async_engine(settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create the session factory bound to `engine`.

    expire_on_commit=False keeps returned rows readable after commit
    without a second round-trip.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def check_connection(engine: AsyncEngine) -> None:
    """Run `SELECT 1` against the store. Raises FatalStartupError if unreachable."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error("Key store unreachable at startup: %s", e)
        raise FatalStartupError("Key store is unreachable") from e


async def create_tables(engine: AsyncEngine) -> None:
    """Create the api_keys table if it does not exist (no-op otherwise)."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError) as e:
        logger.error("Failed to create key store tables: %s", e)
        raise FatalStartupError("Could not create key store tables") from e
