"""
Store Change Broadcast

Each store owns a ChangeNotifier. Readers subscribe to it and are signalled
after every committed mutation of that store.

Subscriptions conflate: a subscriber holds at most ``queue_size`` pending
signals and extra signals are dropped, so a slow reader wakes up once and
re-queries the latest committed state instead of replaying every change.

Usage:
    async with task_store.subscribe() as subscription:
        async for version in subscription:
            tasks = await task_store.get_all_active()

Nothing here holds a lock across an ``await``; closing a subscription
(or leaving the ``async with``) unregisters it immediately.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Optional

from studytimer.config import settings

logger = logging.getLogger(__name__)


class Subscription:
    """A single reader's view of a ChangeNotifier."""

    def __init__(self, notifier: "ChangeNotifier", queue_size: int):
        self._notifier = notifier
        self._queue: asyncio.Queue[int] = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _signal(self, version: int) -> None:
        if self._closed:
            return
        try:
            self._queue.put_nowait(version)
        except asyncio.QueueFull:
            # Conflated into the signal already waiting
            pass

    async def next_change(self) -> Optional[int]:
        """Wait for the next change; None once the subscription is closed."""
        if self._closed:
            return None
        await self._queue.get()
        if self._closed:
            return None
        return self._notifier.version

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._notifier._remove(self)
        # Wake a reader blocked in next_change()
        if self._queue.empty():
            self._queue.put_nowait(self._notifier.version)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> int:
        version = await self.next_change()
        if version is None:
            raise StopAsyncIteration
        return version

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class ChangeNotifier:
    """
    Broadcast channel for one store.

    ``version`` counts committed changes, so readers can tell which commit
    they last observed.
    """

    def __init__(self, name: str, queue_size: Optional[int] = None):
        self.name = name
        self.version = 0
        self._queue_size = queue_size or settings.SUBSCRIPTION_QUEUE_SIZE
        self._subscribers: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self._queue_size)
        self._subscribers.append(subscription)
        logger.debug(f"{self.name}: subscriber added ({self.subscriber_count} active)")
        return subscription

    def notify(self) -> None:
        self.version += 1
        for subscription in list(self._subscribers):
            subscription._signal(self.version)

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)
            logger.debug(f"{self.name}: subscriber removed ({self.subscriber_count} active)")


async def merge_changes(*subscriptions: Subscription) -> AsyncIterator[int]:
    """
    Yield whenever any of ``subscriptions`` signals.

    Stops as soon as one of them is closed. Signals arriving together are
    reported once.
    """
    while True:
        waiters = {asyncio.ensure_future(s.next_change()) for s in subscriptions}
        try:
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()
        versions = [waiter.result() for waiter in done]
        if any(version is None for version in versions):
            return
        yield max(versions)
