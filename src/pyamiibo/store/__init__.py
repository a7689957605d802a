"""Local store layer.

This package is the single source of truth the UI renders from.  All
mutation goes through :meth:`LocalStore.replace_all` and
:meth:`LocalStore.put_detail`; readers subscribe to live queries.
"""

from pyamiibo.store.live import Emission, LiveQuery, Subscription
from pyamiibo.store.local import LocalStore

__all__ = ["Emission", "LiveQuery", "LocalStore", "Subscription"]
