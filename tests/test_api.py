"""Tests for the /amiibo/ endpoint module and the aiohttp transport."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import aiohttp
import pytest

from pyamiibo._api.amiibo import build_detail_params, fetch_detail, fetch_items, parse_item_list
from pyamiibo._transport import HttpTransport
from pyamiibo.client import AmiiboApiClient
from pyamiibo.config import AmiiboConfig
from pyamiibo.exceptions import AmiiboError, AmiiboNetworkError, AmiiboNotFoundError, AmiiboProtocolError


def _entry(head: str, name: str) -> dict[str, Any]:
    return {"head": head, "tail": "00000002", "name": name, "gameSeries": "Super Mario", "image": "x", "type": "Figure"}


class _StaticTransport:
    def __init__(self, body: Any = None, error: Exception | None = None) -> None:
        self._body = body
        self._error = error
        self.requests: list[tuple[str, dict[str, str]]] = []

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        self.requests.append((endpoint, dict(params or {})))
        if self._error is not None:
            raise self._error
        return self._body


# ------------------------------------------------------------------
# Endpoint module
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_fetch_items_keeps_upstream_order() -> None:
    transport = _StaticTransport({"amiibo": [_entry("02", "Zelda"), _entry("01", "Link")]})
    payloads = await fetch_items(transport)
    assert [p.name for p in payloads] == ["Zelda", "Link"]
    assert transport.requests == [("amiibo/", {})]


def test_parse_item_list_missing_envelope() -> None:
    with pytest.raises(AmiiboProtocolError):
        parse_item_list({"data": []})


def test_parse_item_list_invalid_entry() -> None:
    with pytest.raises(AmiiboProtocolError):
        parse_item_list({"amiibo": [{"name": "no head"}]})


def test_detail_params() -> None:
    assert build_detail_params("00000000-00000002", "id") == {"id": "0000000000000002", "showgames": ""}
    assert build_detail_params("Mario", "name") == {"name": "Mario", "showgames": ""}


@pytest.mark.asyncio
async def test_fetch_detail_by_name_takes_first_entry() -> None:
    transport = _StaticTransport({"amiibo": [_entry("00", "Mario"), _entry("01", "Mario")]})
    payload = await fetch_detail(transport, "Mario", "name")
    assert payload.head == "00"
    assert transport.requests == [("amiibo/", {"name": "Mario", "showgames": ""})]


@pytest.mark.asyncio
async def test_fetch_detail_by_id_accepts_single_object() -> None:
    transport = _StaticTransport({"amiibo": _entry("00000000", "Mario")})
    payload = await fetch_detail(transport, "00000000-00000002", "id")
    assert payload.to_detail().id == "00000000-00000002"


@pytest.mark.asyncio
async def test_fetch_detail_empty_result_is_not_found() -> None:
    with pytest.raises(AmiiboNotFoundError) as exc_info:
        await fetch_detail(_StaticTransport({"amiibo": []}), "Nobody", "name")
    assert exc_info.value.key == "Nobody"


@pytest.mark.asyncio
async def test_fetch_detail_http_404_is_not_found() -> None:
    error = AmiiboNetworkError("HTTP 404", status_code=404, endpoint="amiibo/")
    with pytest.raises(AmiiboNotFoundError):
        await fetch_detail(_StaticTransport(error=error), "Nobody", "name")


@pytest.mark.asyncio
async def test_fetch_detail_other_status_stays_network_error() -> None:
    error = AmiiboNetworkError("HTTP 503", status_code=503, endpoint="amiibo/")
    with pytest.raises(AmiiboNetworkError) as exc_info:
        await fetch_detail(_StaticTransport(error=error), "Mario", "name")
    assert not isinstance(exc_info.value, AmiiboNotFoundError)
    assert exc_info.value.status_code == 503


# ------------------------------------------------------------------
# Client
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_client_uses_configured_detail_key() -> None:
    transport = _StaticTransport({"amiibo": [_entry("00", "Mario")]})
    async with AmiiboApiClient(AmiiboConfig(detail_key="name"), transport=transport) as client:
        await client.fetch_detail("Mario")
    assert transport.requests[0][1]["name"] == "Mario"


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = AmiiboApiClient(AmiiboConfig())
    with pytest.raises(AmiiboError):
        await client.fetch_all_items()


# ------------------------------------------------------------------
# Transport
# ------------------------------------------------------------------


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: BaseException | None = None) -> None:
        self._response = response
        self._error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append((url, kwargs))
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


def _transport(session: _FakeSession) -> HttpTransport:
    config = AmiiboConfig(base_url="http://api.test/api/", user_agent="tests")
    return HttpTransport(config, session)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_transport_decodes_json() -> None:
    session = _FakeSession(_FakeResponse(200, '{"amiibo": []}'))
    body = await _transport(session).get_json("amiibo/", {"name": "Mario"})
    assert body == {"amiibo": []}
    url, kwargs = session.calls[0]
    assert url == "http://api.test/api/amiibo/"
    assert kwargs["params"] == {"name": "Mario"}
    assert kwargs["headers"]["user-agent"] == "tests"


@pytest.mark.asyncio
async def test_transport_non_2xx_keeps_status() -> None:
    session = _FakeSession(_FakeResponse(404, '{"code": 404, "error": "Not Found"}'))
    with pytest.raises(AmiiboNetworkError) as exc_info:
        await _transport(session).get_json("amiibo/")
    assert exc_info.value.status_code == 404
    assert exc_info.value.endpoint == "amiibo/"


@pytest.mark.asyncio
async def test_transport_connection_error() -> None:
    session = _FakeSession(error=aiohttp.ClientConnectionError("offline"))
    with pytest.raises(AmiiboNetworkError) as exc_info:
        await _transport(session).get_json("amiibo/")
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_transport_timeout() -> None:
    session = _FakeSession(error=TimeoutError())
    with pytest.raises(AmiiboNetworkError, match="timed out"):
        await _transport(session).get_json("amiibo/")


@pytest.mark.asyncio
async def test_transport_invalid_json_is_protocol_error() -> None:
    session = _FakeSession(_FakeResponse(200, "<html>maintenance</html>"))
    with pytest.raises(AmiiboProtocolError):
        await _transport(session).get_json("amiibo/")
