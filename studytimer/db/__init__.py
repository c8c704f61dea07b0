"""Database package."""

from studytimer.db.base import (
    Base,
    create_engine,
    create_session_factory,
    drop_db,
    init_db,
    notify_after_commit,
    session_scope,
)

__all__ = [
    "Base",
    "create_engine",
    "create_session_factory",
    "drop_db",
    "init_db",
    "notify_after_commit",
    "session_scope",
]
