"""Data models for the Amiibo catalogue."""

from pyamiibo.models._base import AmiiboPayloadModel
from pyamiibo.models.detail import (
    CompatibleGame,
    Detail,
    DetailPayload,
    GamePayload,
    ReleasePayload,
    normalize_games,
)
from pyamiibo.models.item import Item, ItemPayload, make_item_id

__all__ = [
    "AmiiboPayloadModel",
    "CompatibleGame",
    "Detail",
    "DetailPayload",
    "GamePayload",
    "Item",
    "ItemPayload",
    "ReleasePayload",
    "make_item_id",
    "normalize_games",
]
