"""Catalogue item models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pyamiibo.models._base import AmiiboPayloadModel


def make_item_id(head: str, tail: str) -> str:
    """Build the stable ``<head>-<tail>`` identifier."""
    return f"{head}-{tail}"


class Item(BaseModel):
    """A catalogue row as stored locally and shown in the list screen."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    """Stable ``head-tail`` identifier."""
    name: str
    series: str
    """Game series the figure belongs to."""
    image_url: str


class ItemPayload(AmiiboPayloadModel):
    """One entry of the ``/amiibo/`` catalogue response."""

    head: str
    tail: str
    name: str
    game_series: str = ""
    image: str = ""

    def to_item(self) -> Item:
        return Item(
            id=make_item_id(self.head, self.tail),
            name=self.name,
            series=self.game_series,
            image_url=self.image,
        )
