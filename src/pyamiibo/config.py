"""Client configuration for pyamiibo."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyamiibo._constants import BASE_URL, DETAIL_KEY_ID, DETAIL_KEYS, MAX_ITEMS, REQUEST_TIMEOUT, USER_AGENT
from pyamiibo.exceptions import AmiiboConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class AmiiboConfig:
    """Library configuration.

    Parameters
    ----------
    base_url : str
        Remote API base URL, ending with a slash.
    db_path : str
        SQLite database file. ``":memory:"`` keeps the store in memory
        for the lifetime of the process.
    max_items : int
        Number of items kept from each catalogue refresh (first N in
        fetch order).
    request_timeout : float
        Total HTTP request timeout in seconds.
    detail_key : str
        What a detail lookup key refers to: ``"id"`` (the stable
        ``head-tail`` item id) or ``"name"`` (the display name).
    single_flight : bool
        Coalesce concurrent refreshes (and concurrent detail fetches for
        the same key) into one shared in-flight operation.  When
        disabled, concurrent refreshes race and the last write wins.
    user_agent : str
        User-Agent header sent with every request.
    """

    base_url: str = BASE_URL
    db_path: str = ":memory:"
    max_items: int = MAX_ITEMS
    request_timeout: float = REQUEST_TIMEOUT
    detail_key: str = DETAIL_KEY_ID
    single_flight: bool = True
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if self.max_items <= 0:
            raise AmiiboConfigError(f"max_items must be positive, got {self.max_items}")
        if self.request_timeout <= 0:
            raise AmiiboConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.detail_key not in DETAIL_KEYS:
            raise AmiiboConfigError(f"detail_key must be one of {sorted(DETAIL_KEYS)}, got {self.detail_key!r}")
        if not self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url + "/")

    @classmethod
    def from_env(cls, **overrides: Any) -> AmiiboConfig:
        """Create configuration from environment variables.

        Reads optional ``AMIIBO_*`` variables. Explicit keyword arguments
        override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "AMIIBO_BASE_URL": "base_url",
            "AMIIBO_DB_PATH": "db_path",
            "AMIIBO_DETAIL_KEY": "detail_key",
            "AMIIBO_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            max_items_env = env.get("AMIIBO_MAX_ITEMS")
            if max_items_env is not None and "max_items" not in overrides:
                config_kwargs["max_items"] = int(max_items_env)

            timeout_env = env.get("AMIIBO_REQUEST_TIMEOUT")
            if timeout_env is not None and "request_timeout" not in overrides:
                config_kwargs["request_timeout"] = float(timeout_env)
        except ValueError as exc:
            raise AmiiboConfigError(f"Invalid numeric environment value: {exc}") from exc

        if "single_flight" not in overrides:
            config_kwargs["single_flight"] = _env_bool(env.get("AMIIBO_SINGLE_FLIGHT"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
