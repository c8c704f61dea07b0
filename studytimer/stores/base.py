"""
Store Base

Common plumbing for the stores: the session factory, the transaction
scope, the change notifier and the conversion of exceptions into Failure
results.

Every public store method returns a Result. Methods accept an optional
``db`` session so a caller can run several stores in one transaction:

    async with session_scope(session_factory) as db:
        (await sessions.finish(session_id, ..., db=db)).unwrap()
        (await reviews.insert_all(drafts, db=db)).unwrap()

``unwrap()`` raises DomainException on failure, which rolls the shared
transaction back; ``store_operation`` turns it back into a Failure.
"""

import functools
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import Any, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studytimer.db.base import notify_after_commit, session_scope
from studytimer.models.result import DomainError, DomainException, Failure, Result
from studytimer.stores.broadcast import ChangeNotifier, Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")


def store_operation(message: str) -> Callable:
    """
    Convert exceptions raised by an async operation into Failure results.

    DomainException → its DomainError, SQLAlchemyError → DATABASE,
    anything else → UNKNOWN (logged with traceback).
    """

    def decorator(fn: Callable[..., Awaitable[Result[Any]]]) -> Callable[..., Awaitable[Result[Any]]]:
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs) -> Result[Any]:
            try:
                return await fn(*args, **kwargs)
            except DomainException as e:
                return Failure(e.error)
            except SQLAlchemyError as e:
                logger.error(f"{message}: {e}")
                return Failure(DomainError.database(message, cause=e))
            except Exception as e:
                logger.exception(f"Unexpected error: {message}")
                return Failure(DomainError.unknown(message, cause=e))

        return wrapper

    return decorator


class BaseStore:
    """Base class for stores backed by an async session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Optional[ChangeNotifier] = None,
    ):
        self.session_factory = session_factory
        self.notifier = notifier or ChangeNotifier(type(self).__name__)
        self._cascade_notifiers: list[ChangeNotifier] = []

    def transaction(
        self, db: Optional[AsyncSession] = None
    ) -> AbstractAsyncContextManager[AsyncSession]:
        """Open a transaction, or join ``db`` when given."""
        return session_scope(self.session_factory, db)

    def subscribe(self) -> Subscription:
        """Subscribe to committed changes of this store."""
        return self.notifier.subscribe()

    def cascade_to(self, *stores: "BaseStore") -> None:
        """
        Also signal ``stores`` when a delete here reaches their rows through
        an ON DELETE rule in the database.
        """
        for store in stores:
            if store.notifier not in self._cascade_notifiers:
                self._cascade_notifiers.append(store.notifier)

    def _changed(self, db: AsyncSession, cascade: bool = False) -> None:
        notify_after_commit(db, self.notifier)
        if cascade:
            for notifier in self._cascade_notifiers:
                notify_after_commit(db, notifier)

    async def _watch(
        self, query: Callable[[], Awaitable[Result[T]]]
    ) -> AsyncIterator[Result[T]]:
        """Yield ``query()`` now and again after every committed change."""
        async with self.subscribe() as subscription:
            yield await query()
            async for _ in subscription:
                yield await query()
