"""Async remote source backed by the AmiiboAPI."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import aiohttp

from pyamiibo._api import amiibo as _amiibo_api
from pyamiibo._transport import HttpTransport, Transport
from pyamiibo.config import AmiiboConfig
from pyamiibo.exceptions import AmiiboError
from pyamiibo.models.detail import DetailPayload
from pyamiibo.models.item import ItemPayload

_logger = logging.getLogger(__name__)


class RemoteSource(Protocol):
    """The two remote operations the synchronizer needs.

    ``fetch_all_items`` raises :class:`~pyamiibo.exceptions.AmiiboNetworkError`
    or :class:`~pyamiibo.exceptions.AmiiboProtocolError`; ``fetch_detail``
    may additionally raise :class:`~pyamiibo.exceptions.AmiiboNotFoundError`.
    """

    async def fetch_all_items(self) -> list[ItemPayload]:
        ...

    async def fetch_detail(self, key: str) -> DetailPayload:
        ...


class AmiiboApiClient:
    """Async client for the AmiiboAPI.

    Usage::

        async with AmiiboApiClient(config) as client:
            items = await client.fetch_all_items()
    """

    def __init__(
        self,
        config: AmiiboConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> AmiiboApiClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise AmiiboError("Client not initialized. Use 'async with AmiiboApiClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    async def fetch_all_items(self) -> list[ItemPayload]:
        """Fetch the full catalogue in upstream order."""
        payloads = await _amiibo_api.fetch_items(self._require_transport())
        _logger.debug("Fetched %d catalogue entries", len(payloads))
        return payloads

    async def fetch_detail(self, key: str) -> DetailPayload:
        """Fetch one record, looked up by id or name per ``config.detail_key``."""
        return await _amiibo_api.fetch_detail(self._require_transport(), key, self._config.detail_key)
