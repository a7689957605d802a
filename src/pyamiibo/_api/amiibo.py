"""Catalogue endpoint: /amiibo/.

Both remote operations use the same endpoint; detail lookups add a
filter (``name`` or ``id``) and the ``showgames`` flag.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from pyamiibo._constants import DETAIL_KEY_ID, ITEMS_ENDPOINT
from pyamiibo._transport import Transport
from pyamiibo.exceptions import AmiiboNetworkError, AmiiboNotFoundError, AmiiboProtocolError
from pyamiibo.models.detail import DetailPayload
from pyamiibo.models.item import ItemPayload


def _unwrap_amiibo(body: Any, endpoint: str) -> list[Any]:
    """Return the ``amiibo`` entries as a list.

    The API answers list queries with ``{"amiibo": [...]}`` and id
    queries with ``{"amiibo": {...}}``.
    """
    if not isinstance(body, dict) or "amiibo" not in body:
        raise AmiiboProtocolError(f"Missing 'amiibo' field from {endpoint}", endpoint=endpoint)
    entries = body["amiibo"]
    if isinstance(entries, dict):
        return [entries]
    if not isinstance(entries, list):
        raise AmiiboProtocolError(
            f"Unexpected 'amiibo' type from {endpoint}: {type(entries).__name__}",
            endpoint=endpoint,
        )
    return entries


def parse_item_list(body: Any, endpoint: str = ITEMS_ENDPOINT) -> list[ItemPayload]:
    """Parse the catalogue response into payload models, keeping fetch order."""
    entries = _unwrap_amiibo(body, endpoint)
    try:
        return [ItemPayload.model_validate(entry) for entry in entries]
    except ValidationError as exc:
        raise AmiiboProtocolError(f"Invalid item payload from {endpoint}: {exc}", endpoint=endpoint) from exc


def parse_detail(body: Any, key: str, endpoint: str = ITEMS_ENDPOINT) -> DetailPayload:
    """Parse a detail response and return its first entry."""
    entries = _unwrap_amiibo(body, endpoint)
    if not entries:
        raise AmiiboNotFoundError(f"No amiibo found for {key!r}", key=key)
    try:
        return DetailPayload.model_validate(entries[0])
    except ValidationError as exc:
        raise AmiiboProtocolError(f"Invalid detail payload from {endpoint}: {exc}", endpoint=endpoint) from exc


def build_detail_params(key: str, key_kind: str) -> dict[str, str]:
    """Query parameters selecting one record, with compatible games included."""
    if key_kind == DETAIL_KEY_ID:
        # Stored ids are "head-tail"; the API expects the 16 hex chars joined.
        return {"id": key.replace("-", ""), "showgames": ""}
    return {"name": key, "showgames": ""}


async def fetch_items(transport: Transport) -> list[ItemPayload]:
    """Fetch the full catalogue."""
    body = await transport.get_json(ITEMS_ENDPOINT)
    return parse_item_list(body)


async def fetch_detail(transport: Transport, key: str, key_kind: str) -> DetailPayload:
    """Fetch one record by id or name."""
    try:
        body = await transport.get_json(ITEMS_ENDPOINT, build_detail_params(key, key_kind))
    except AmiiboNetworkError as exc:
        if exc.status_code == 404:
            raise AmiiboNotFoundError(f"No amiibo found for {key!r}", key=key) from exc
        raise
    return parse_detail(body, key)
