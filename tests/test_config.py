from __future__ import annotations

import pytest

from pyamiibo._constants import BASE_URL, MAX_ITEMS
from pyamiibo.config import AmiiboConfig
from pyamiibo.exceptions import AmiiboConfigError


def test_defaults() -> None:
    config = AmiiboConfig()
    assert config.base_url == BASE_URL
    assert config.max_items == MAX_ITEMS == 20
    assert config.detail_key == "id"
    assert config.single_flight is True
    assert config.db_path == ":memory:"


def test_base_url_gets_trailing_slash() -> None:
    assert AmiiboConfig(base_url="http://localhost:8080/api").base_url == "http://localhost:8080/api/"


@pytest.mark.parametrize(
    "kwargs",
    [{"max_items": 0}, {"request_timeout": 0}, {"detail_key": "uuid"}],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(AmiiboConfigError):
        AmiiboConfig(**kwargs)  # type: ignore[arg-type]


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AMIIBO_DB_PATH", "/tmp/amiibo.sqlite")
    monkeypatch.setenv("AMIIBO_MAX_ITEMS", "5")
    monkeypatch.setenv("AMIIBO_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("AMIIBO_DETAIL_KEY", "name")
    monkeypatch.setenv("AMIIBO_SINGLE_FLIGHT", "off")

    config = AmiiboConfig.from_env()

    assert config.db_path == "/tmp/amiibo.sqlite"
    assert config.max_items == 5
    assert config.request_timeout == 2.5
    assert config.detail_key == "name"
    assert config.single_flight is False


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AMIIBO_MAX_ITEMS", "5")
    monkeypatch.setenv("AMIIBO_SINGLE_FLIGHT", "0")

    config = AmiiboConfig.from_env(max_items=7, single_flight=True)

    assert config.max_items == 7
    assert config.single_flight is True


def test_from_env_bad_number(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AMIIBO_MAX_ITEMS", "many")
    with pytest.raises(AmiiboConfigError):
        AmiiboConfig.from_env()
