"""Synchronizer: remote → local store orchestration.

The synchronizer holds no persistent state.  It fetches from the remote
source, writes through the local store, and lets the store's live
queries notify readers.  Errors are never retried or translated here;
they propagate to the caller unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pyamiibo._constants import MAX_ITEMS
from pyamiibo.client import RemoteSource
from pyamiibo.models.detail import Detail
from pyamiibo.models.item import Item
from pyamiibo.store.live import Subscription
from pyamiibo.store.local import LocalStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")

_REFRESH_TOKEN = "refresh"


class Synchronizer:
    """Refreshes the item table and serves cache-aside detail lookups."""

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteSource,
        *,
        max_items: int = MAX_ITEMS,
        single_flight: bool = True,
    ) -> None:
        self._store = store
        self._remote = remote
        self._max_items = max_items
        self._single_flight_enabled = single_flight
        self._inflight: dict[str, asyncio.Task[Any]] = {}

    @property
    def store(self) -> LocalStore:
        return self._store

    # ------------------------------------------------------------------
    # Single-flight
    # ------------------------------------------------------------------

    async def _single_flight(self, token: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Join the in-flight operation for *token*, or start one.

        The shared task is shielded: a cancelled caller stops waiting but
        the fetch+write still runs to completion.
        """
        if not self._single_flight_enabled:
            return await factory()

        task = self._inflight.get(token)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[token] = task

            def _on_done(done: asyncio.Task[Any]) -> None:
                if self._inflight.get(token) is done:
                    del self._inflight[token]
                # Retrieve the outcome so an unawaited failure is not reported as lost.
                if not done.cancelled() and done.exception() is not None:
                    _logger.debug("%s finished with %r", token, done.exception())

            task.add_done_callback(_on_done)
        else:
            _logger.debug("Joining in-flight %s", token)
        result: T = await asyncio.shield(task)
        return result

    # ------------------------------------------------------------------
    # Item list
    # ------------------------------------------------------------------

    async def refresh_all(self) -> None:
        """Fetch the catalogue and atomically replace the local item table.

        Keeps the first ``max_items`` entries in fetch order.  On a remote
        failure nothing is written; on a storage failure the previous
        table content is preserved by the store.
        """
        await self._single_flight(_REFRESH_TOKEN, self._refresh_all)

    async def _refresh_all(self) -> None:
        payloads = await self._remote.fetch_all_items()
        items: list[Item] = [payload.to_item() for payload in payloads[: self._max_items]]
        await self._store.replace_all(items)
        _logger.debug("Refresh stored %d of %d fetched items", len(items), len(payloads))

    def observe_items(self) -> Subscription[list[Item]]:
        return self._store.get_all()

    def observe_count(self) -> Subscription[int]:
        return self._store.count()

    # ------------------------------------------------------------------
    # Detail
    # ------------------------------------------------------------------

    async def get_detail(self, key: str) -> Detail:
        """Cache-aside detail lookup.

        A cached detail is returned without touching the network.  On a
        miss the remote result is written to the store before it is
        returned, so later lookups for *key* are served locally.
        """
        cached = await self._store.get_detail(key)
        if cached is not None:
            _logger.debug("Detail cache hit for %r", key)
            return cached
        return await self._single_flight(f"detail:{key}", lambda: self._fetch_detail(key))

    async def _fetch_detail(self, key: str) -> Detail:
        payload = await self._remote.fetch_detail(key)
        detail = payload.to_detail()
        await self._store.put_detail(detail, key=key)
        return detail
