"""List screen reducer.

Folds two event sources into one :data:`ListViewState`:

* emissions of the store's live item query, and
* explicit :meth:`ItemListReducer.refresh` commands.

Transition rules:

1. :meth:`start` subscribes to the item query and launches a refresh.
2. A refresh first shows the last snapshot seen on the subscription:
   ``ListLoading`` when empty, else ``ListSuccess(refreshing=True)``.
3. When the synchronizer succeeds the reducer waits for the
   subscription to deliver the store's current version and shows
   ``ListSuccess(refreshing=False)``; on failure it shows ``ListError``
   carrying whatever snapshot is cached.
4. A non-empty emission shows ``ListSuccess``, keeping the refreshing
   flag of a current success.  An empty emission never changes the
   state: it must not flicker an informative state to an empty list.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from pyamiibo.exceptions import AmiiboError
from pyamiibo.models.item import Item
from pyamiibo.state.view_state import (
    DEFAULT_LIST_ERROR,
    ListError,
    ListLoading,
    ListSuccess,
    ListViewState,
    failure_message,
)
from pyamiibo.store.live import Subscription
from pyamiibo.sync import Synchronizer

_logger = logging.getLogger(__name__)


class ItemListReducer:
    """Current state of the list screen.

    Usage::

        reducer = ItemListReducer(synchronizer, on_state=render)
        reducer.start()
        ...
        await reducer.close()
    """

    def __init__(
        self,
        synchronizer: Synchronizer,
        *,
        on_state: Callable[[ListViewState], None] | None = None,
    ) -> None:
        self._sync = synchronizer
        self._on_state = on_state
        self._state: ListViewState = ListLoading()
        self._snapshot: list[Item] = []
        self._seen_version = -1
        self._subscription: Subscription[list[Item]] | None = None
        self._consumer: asyncio.Task[None] | None = None
        self._consumer_finished = False
        self._changed = asyncio.Condition()
        self._refresh_tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def state(self) -> ListViewState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> asyncio.Task[None]:
        """Subscribe to the item table and launch the initial refresh.

        Returns the refresh task so callers may await the first outcome.
        """
        if self._subscription is not None or self._closed:
            raise RuntimeError("ItemListReducer can only be started once")
        self._subscription = self._sync.observe_items()
        self._consumer = asyncio.create_task(self._consume(self._subscription))
        return self.launch_refresh()

    async def close(self) -> None:
        """Unsubscribe and stop publishing states.

        A refresh already in flight keeps running and still writes to the
        store; only its state transitions are dropped.
        """
        if self._closed:
            return
        self._closed = True
        if self._subscription is not None:
            self._subscription.close()
        if self._consumer is not None:
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
        async with self._changed:
            self._changed.notify_all()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def launch_refresh(self) -> asyncio.Task[None]:
        """Fire-and-forget :meth:`refresh` (what a pull-to-refresh gesture calls)."""
        task = asyncio.create_task(self.refresh())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)
        return task

    async def refresh(self) -> None:
        """Refresh the catalogue and publish the outcome."""
        if self._closed:
            return
        await self._wait_for(lambda: self._seen_version >= 0)

        current = list(self._snapshot)
        if current:
            self._set_state(ListSuccess(items=current, refreshing=True))
        else:
            self._set_state(ListLoading())

        try:
            await self._sync.refresh_all()
        except AmiiboError as exc:
            _logger.warning("Catalogue refresh failed: %s", exc)
            await self._catch_up()
            self._set_state(
                ListError(message=failure_message(exc, DEFAULT_LIST_ERROR), cached_items=list(self._snapshot))
            )
            return
        except Exception as exc:
            _logger.exception("Unexpected error during catalogue refresh")
            await self._catch_up()
            self._set_state(
                ListError(message=failure_message(exc, DEFAULT_LIST_ERROR), cached_items=list(self._snapshot))
            )
            return

        await self._catch_up()
        if self._snapshot:
            self._set_state(ListSuccess(items=list(self._snapshot), refreshing=False))
        else:
            self._set_state(ListLoading())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: ListViewState) -> None:
        if self._closed or state == self._state:
            return
        _logger.debug("List state %s -> %s", self._state.kind, state.kind)
        self._state = state
        if self._on_state is not None:
            self._on_state(state)

    def _on_items(self, items: list[Item]) -> None:
        self._snapshot = items
        if not items:
            return
        current = self._state
        refreshing = current.refreshing if isinstance(current, ListSuccess) else False
        self._set_state(ListSuccess(items=list(items), refreshing=refreshing))

    async def _consume(self, subscription: Subscription[list[Item]]) -> None:
        try:
            async for items in subscription:
                self._on_items(items)
                async with self._changed:
                    self._seen_version = subscription.version
                    self._changed.notify_all()
        except AmiiboError as exc:
            _logger.warning("Item subscription failed: %s", exc)
            self._set_state(
                ListError(message=failure_message(exc, DEFAULT_LIST_ERROR), cached_items=list(self._snapshot))
            )
        except Exception as exc:
            _logger.exception("Unexpected error in item subscription")
            self._set_state(
                ListError(message=failure_message(exc, DEFAULT_LIST_ERROR), cached_items=list(self._snapshot))
            )
        finally:
            self._consumer_finished = True
            async with self._changed:
                self._changed.notify_all()

    async def _wait_for(self, predicate: Callable[[], bool]) -> None:
        """Wait until *predicate* holds or no more emissions can arrive."""
        if self._subscription is None:
            return
        async with self._changed:
            await self._changed.wait_for(lambda: predicate() or self._consumer_finished or self._closed)

    async def _catch_up(self) -> None:
        """Wait until the subscription has delivered the store's latest version."""
        if self._subscription is None:
            return
        target = self._subscription.source_version
        await self._wait_for(lambda: self._seen_version >= target)
