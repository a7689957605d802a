from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import pytest

from pyamiibo.exceptions import AmiiboNotFoundError
from pyamiibo.models.detail import DetailPayload
from pyamiibo.models.item import ItemPayload
from pyamiibo.store.local import LocalStore


def item_payload(head: str, name: str) -> ItemPayload:
    return ItemPayload.model_validate(
        {
            "head": head,
            "tail": "00000002",
            "name": name,
            "gameSeries": "Super Mario",
            "image": f"https://img/{head}.png",
        }
    )


def detail_payload(head: str, name: str) -> DetailPayload:
    return DetailPayload.model_validate(
        {
            "head": head,
            "tail": "00000002",
            "name": name,
            "character": name,
            "gameSeries": "Super Mario",
            "amiiboSeries": "Super Smash Bros.",
            "type": "Figure",
            "image": f"https://img/{head}.png",
            "release": {"eu": "2014-11-28", "na": None},
            "gamesSwitch": [{"gameName": "Super Smash Bros. Ultimate"}],
            "games3DS": [{"gameName": "Mario Party"}],
        }
    )


@dataclass
class FakeRemote:
    """In-memory remote source with call counting and an optional gate.

    Each fetch captures its outcome when called, then waits for ``gate``
    (if set), so tests can hold requests in flight.  ``item_batches`` (if non-empty)
    hands out one batch per call instead of ``items``.
    """

    items: list[ItemPayload] = field(default_factory=list)
    item_batches: list[list[ItemPayload]] = field(default_factory=list)
    details: dict[str, DetailPayload] = field(default_factory=dict)
    items_error: Exception | None = None
    detail_error: Exception | None = None
    gate: asyncio.Event | None = None
    calls: dict[str, int] = field(default_factory=dict)

    def _record_call(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    async def fetch_all_items(self) -> list[ItemPayload]:
        self._record_call("items")
        batch = self.item_batches.pop(0) if self.item_batches else list(self.items)
        error = self.items_error
        if self.gate is not None:
            await self.gate.wait()
        if error is not None:
            raise error
        return batch

    async def fetch_detail(self, key: str) -> DetailPayload:
        self._record_call(f"detail:{key}")
        error = self.detail_error
        payload = self.details.get(key)
        if self.gate is not None:
            await self.gate.wait()
        if error is not None:
            raise error
        if payload is None:
            raise AmiiboNotFoundError(f"No amiibo found for {key!r}", key=key)
        return payload


async def eventually(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll *predicate* until it holds (store calls complete in worker threads)."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def store() -> Iterator[LocalStore]:
    s = LocalStore.open()
    yield s
    s.close()
