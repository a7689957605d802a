"""Composition root: explicitly constructed, long-lived handles."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyamiibo.client import AmiiboApiClient, RemoteSource
from pyamiibo.config import AmiiboConfig
from pyamiibo.exceptions import AmiiboError
from pyamiibo.state.detail_reducer import ItemDetailReducer
from pyamiibo.state.list_reducer import ItemListReducer
from pyamiibo.state.view_state import DetailViewState, ListViewState
from pyamiibo.store.local import LocalStore
from pyamiibo.sync import Synchronizer

_logger = logging.getLogger(__name__)


class AmiiboApp:
    """Owns the store, the remote client and the synchronizer.

    Usage::

        async with AmiiboApp(AmiiboConfig.from_env()) as app:
            reducer = app.list_reducer(on_state=render)
            reducer.start()

    Reducers created here are closed when the app exits.
    """

    def __init__(
        self,
        config: AmiiboConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        remote: RemoteSource | None = None,
    ) -> None:
        self._config = config
        self._session = session
        self._remote_override = remote
        self._client: AmiiboApiClient | None = None
        self._store: LocalStore | None = None
        self._synchronizer: Synchronizer | None = None
        self._reducers: list[ItemListReducer | ItemDetailReducer] = []

    async def __aenter__(self) -> AmiiboApp:
        self._store = LocalStore.open(self._config.db_path)
        remote: RemoteSource
        if self._remote_override is not None:
            remote = self._remote_override
        else:
            self._client = AmiiboApiClient(self._config, session=self._session)
            remote = await self._client.__aenter__()
        self._synchronizer = Synchronizer(
            self._store,
            remote,
            max_items=self._config.max_items,
            single_flight=self._config.single_flight,
        )
        _logger.debug("AmiiboApp started (db=%s)", self._config.db_path)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        for reducer in self._reducers:
            await reducer.close()
        self._reducers.clear()
        if self._client is not None:
            await self._client.__aexit__(*exc)
            self._client = None
        if self._store is not None:
            self._store.close()
            self._store = None
        self._synchronizer = None

    @property
    def config(self) -> AmiiboConfig:
        return self._config

    @property
    def store(self) -> LocalStore:
        if self._store is None:
            raise AmiiboError("App not started. Use 'async with AmiiboApp(...) as app:'")
        return self._store

    @property
    def synchronizer(self) -> Synchronizer:
        if self._synchronizer is None:
            raise AmiiboError("App not started. Use 'async with AmiiboApp(...) as app:'")
        return self._synchronizer

    def list_reducer(self, *, on_state: Callable[[ListViewState], None] | None = None) -> ItemListReducer:
        reducer = ItemListReducer(self.synchronizer, on_state=on_state)
        self._reducers.append(reducer)
        return reducer

    def detail_reducer(
        self,
        key: str,
        *,
        on_state: Callable[[DetailViewState], None] | None = None,
    ) -> ItemDetailReducer:
        """Create a detail reducer for *key*; its initial load starts immediately."""
        reducer = ItemDetailReducer(self.synchronizer, key, on_state=on_state)
        self._reducers.append(reducer)
        reducer.start()
        return reducer
