"""Detail screen reducer: one fixed key, explicit reloads, no live query."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pyamiibo.exceptions import AmiiboError
from pyamiibo.state.view_state import (
    DEFAULT_DETAIL_ERROR,
    DetailError,
    DetailLoading,
    DetailSuccess,
    DetailViewState,
    failure_message,
)
from pyamiibo.sync import Synchronizer

_logger = logging.getLogger(__name__)


class ItemDetailReducer:
    """Current state of the detail screen for ``key``.

    Every load starts from :class:`DetailLoading`; an error never keeps a
    previously loaded detail.  When loads overlap only the most recently
    started one publishes its outcome.
    """

    def __init__(
        self,
        synchronizer: Synchronizer,
        key: str,
        *,
        on_state: Callable[[DetailViewState], None] | None = None,
    ) -> None:
        self._sync = synchronizer
        self._key = key
        self._on_state = on_state
        self._state: DetailViewState = DetailLoading()
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._initial: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def state(self) -> DetailViewState:
        return self._state

    def start(self) -> asyncio.Task[None]:
        """Launch the initial load and return its task.

        Idempotent: later calls return the same task instead of loading again.
        """
        if self._initial is None:
            self._initial = self.launch_reload()
        return self._initial

    def launch_reload(self) -> asyncio.Task[None]:
        task = asyncio.create_task(self.reload())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def reload(self) -> None:
        """Load (or retry loading) the detail for the reducer's key."""
        if self._closed:
            return
        self._generation += 1
        generation = self._generation
        self._set_state(DetailLoading(), generation)
        try:
            detail = await self._sync.get_detail(self._key)
        except AmiiboError as exc:
            _logger.warning("Detail load for %r failed: %s", self._key, exc)
            self._set_state(DetailError(message=failure_message(exc, DEFAULT_DETAIL_ERROR)), generation)
            return
        except Exception as exc:
            _logger.exception("Unexpected error loading detail for %r", self._key)
            self._set_state(DetailError(message=failure_message(exc, DEFAULT_DETAIL_ERROR)), generation)
            return
        self._set_state(DetailSuccess(detail=detail), generation)

    async def close(self) -> None:
        """Stop publishing; pending loads may still complete and cache their result."""
        self._closed = True

    def _set_state(self, state: DetailViewState, generation: int) -> None:
        if self._closed or generation != self._generation or state == self._state:
            return
        _logger.debug("Detail state for %r %s -> %s", self._key, self._state.kind, state.kind)
        self._state = state
        if self._on_state is not None:
            self._on_state(state)
