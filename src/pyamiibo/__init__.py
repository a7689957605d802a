"""pyamiibo - Offline-first Amiibo catalogue sync core."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyamiibo")
except PackageNotFoundError:
    __version__ = "0+local"
from pyamiibo.app import AmiiboApp
from pyamiibo.client import AmiiboApiClient, RemoteSource
from pyamiibo.config import AmiiboConfig
from pyamiibo.exceptions import (
    AmiiboConfigError,
    AmiiboError,
    AmiiboNetworkError,
    AmiiboNotFoundError,
    AmiiboProtocolError,
    AmiiboStorageError,
)
from pyamiibo.models import CompatibleGame, Detail, DetailPayload, Item, ItemPayload
from pyamiibo.state import (
    DetailError,
    DetailLoading,
    DetailSuccess,
    DetailViewState,
    ItemDetailReducer,
    ItemListReducer,
    ListError,
    ListLoading,
    ListSuccess,
    ListViewState,
)
from pyamiibo.store import LocalStore, Subscription
from pyamiibo.sync import Synchronizer

__all__ = [
    "__version__",
    "AmiiboApiClient",
    "AmiiboApp",
    "AmiiboConfig",
    "AmiiboConfigError",
    "AmiiboError",
    "AmiiboNetworkError",
    "AmiiboNotFoundError",
    "AmiiboProtocolError",
    "AmiiboStorageError",
    "CompatibleGame",
    "Detail",
    "DetailError",
    "DetailLoading",
    "DetailPayload",
    "DetailSuccess",
    "DetailViewState",
    "Item",
    "ItemDetailReducer",
    "ItemListReducer",
    "ItemPayload",
    "ListError",
    "ListLoading",
    "ListSuccess",
    "ListViewState",
    "LocalStore",
    "RemoteSource",
    "Subscription",
    "Synchronizer",
]
