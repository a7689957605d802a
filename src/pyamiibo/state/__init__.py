"""View-state layer.

Reducers turn store emissions and user commands into one immutable
snapshot per screen.  They are the only place where a failure becomes a
user-visible message.
"""

from pyamiibo.state.detail_reducer import ItemDetailReducer
from pyamiibo.state.list_reducer import ItemListReducer
from pyamiibo.state.view_state import (
    DetailError,
    DetailLoading,
    DetailSuccess,
    DetailViewState,
    ListError,
    ListLoading,
    ListSuccess,
    ListViewState,
)

__all__ = [
    "DetailError",
    "DetailLoading",
    "DetailSuccess",
    "DetailViewState",
    "ItemDetailReducer",
    "ItemListReducer",
    "ListError",
    "ListLoading",
    "ListSuccess",
    "ListViewState",
]
