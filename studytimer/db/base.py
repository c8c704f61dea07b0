"""
Database Base Configuration

Sets up the async SQLAlchemy engine, the session factory and the transaction
scope shared by all stores.

Usage:
    from studytimer.db.base import create_engine, create_session_factory, session_scope

    engine = create_engine()
    session_factory = create_session_factory(engine)

    async with session_scope(session_factory) as db:
        await db.execute(...)

A store method called with ``db=`` joins the caller's transaction instead of
opening its own, so several stores can commit (or roll back) together.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from studytimer.config import settings, yaml_config

logger = logging.getLogger(__name__)

# Key in AsyncSession.info holding notifiers to fire after commit
PENDING_NOTIFICATIONS = "pending_notifications"

# Get pool configuration from yaml config
db_config: dict[str, Any] = yaml_config.get("database", {})
pool_size: int = db_config.get("pool_size", 5)
max_overflow: int = db_config.get("max_overflow", 10)
pool_timeout: int = db_config.get("pool_timeout", 30)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """
    Create the async engine.

    SQLite URLs get foreign key enforcement; other backends get the pool
    options from config/default.yaml.
    """
    url = url or settings.DATABASE_URL
    echo = settings.DATABASE_ECHO if echo is None else echo

    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=echo)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_async_engine(
            url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            echo=echo,
        )

    logger.debug(f"Created database engine for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Import models AFTER Base is defined to avoid circular imports.
# This ensures all models are registered with Base.metadata.
from studytimer.db import models  # noqa: F401, E402


def notify_after_commit(db: AsyncSession, notifier: Any) -> None:
    """Queue ``notifier.notify()`` to run once ``db``'s transaction commits."""
    pending = db.info.setdefault(PENDING_NOTIFICATIONS, [])
    if notifier not in pending:
        pending.append(notifier)


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
    db: Optional[AsyncSession] = None,
) -> AsyncIterator[AsyncSession]:
    """
    Transaction scope for store operations.

    With ``db`` given, joins that session: the caller owns commit, rollback
    and notification. Otherwise opens a session, commits on success, rolls
    back on any exception and then fires the notifiers queued with
    notify_after_commit().
    """
    if db is not None:
        yield db
        return

    async with session_factory() as session:
        async with session.begin():
            yield session
        pending = session.info.pop(PENDING_NOTIFICATIONS, [])

    for notifier in pending:
        notifier.notify()


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database tables.

    Called on application startup to create tables that don't exist.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(engine: AsyncEngine) -> None:
    """Drop every table (test teardown)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
