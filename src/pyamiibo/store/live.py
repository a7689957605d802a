"""Live queries: subscribable result sets re-emitted after each commit.

Every emission carries the table version it was read at.  Versions are
taken in the same critical section as the read, so a subscriber can
drop anything older than what it already yielded and delivery stays in
commit order even when publications race.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Emission(Generic[T]):
    version: int
    value: T


class Subscription(Generic[T]):
    """One subscriber's stream of a live query.

    Lazy: nothing is read until the first ``__anext__``, which yields the
    current snapshot.  Writes committed after the subscription was
    created are yielded afterwards; while the subscriber is not pulling,
    only the newest pending emission is kept.  The stream only ends when
    the subscriber calls :meth:`close` (or the store closes).
    """

    def __init__(self, live: LiveQuery[T]) -> None:
        self._live = live
        self._pending: Emission[T] | None = None
        self._wakeup = asyncio.Event()
        self._started = False
        self._closed = False
        self.version = -1
        """Version of the last yielded value (``-1`` before the first)."""

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def source_version(self) -> int:
        """Latest version the underlying query has read or published."""
        return self._live.version

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        if not self._started:
            self._started = True
            emission = await self._live.read()
            self.version = emission.version
            return emission.value
        while True:
            await self._wakeup.wait()
            if self._closed:
                raise StopAsyncIteration
            self._wakeup.clear()
            emission, self._pending = self._pending, None
            if emission is None or emission.version <= self.version:
                continue
            self.version = emission.version
            return emission.value

    def _push(self, emission: Emission[T]) -> None:
        if self._pending is None or emission.version > self._pending.version:
            self._pending = emission
        self._wakeup.set()

    def close(self) -> None:
        """Unsubscribe.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._live.discard(self)
        self._pending = None
        self._wakeup.set()

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()


class LiveQuery(Generic[T]):
    """Fan-out point for one query over one table."""

    def __init__(self, name: str, read: Callable[[], Awaitable[Emission[T]]]) -> None:
        self._name = name
        self._read = read
        self._subscribers: set[Subscription[T]] = set()
        self.version = -1

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription[T]:
        subscription = Subscription(self)
        self._subscribers.add(subscription)
        _logger.debug("%s: subscriber added (%d active)", self._name, len(self._subscribers))
        return subscription

    def discard(self, subscription: Subscription[T]) -> None:
        self._subscribers.discard(subscription)
        _logger.debug("%s: subscriber removed (%d active)", self._name, len(self._subscribers))

    async def read(self) -> Emission[T]:
        emission = await self._read()
        self.version = max(self.version, emission.version)
        return emission

    def publish(self, emission: Emission[T]) -> None:
        self.version = max(self.version, emission.version)
        for subscription in list(self._subscribers):
            subscription._push(emission)

    def close_all(self) -> None:
        for subscription in list(self._subscribers):
            subscription.close()
