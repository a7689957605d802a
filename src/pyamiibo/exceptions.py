"""Custom exception hierarchy for pyamiibo."""

from __future__ import annotations


class AmiiboError(Exception):
    """Base exception for all pyamiibo errors."""


class AmiiboConfigError(AmiiboError):
    """Invalid or missing configuration."""


class AmiiboNetworkError(AmiiboError):
    """Transport-level failure (connectivity, timeout, unexpected HTTP status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class AmiiboProtocolError(AmiiboError):
    """Remote answered, but the payload is malformed or unexpected."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class AmiiboNotFoundError(AmiiboError):
    """Remote has no record matching the requested key."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class AmiiboStorageError(AmiiboError):
    """Local store read or write failure.

    A failed write never leaves a partially applied change behind; the
    table is rolled back to its state before the call.
    """

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)
