"""Immutable view states rendered by the UI.

Each screen's state is a closed, discriminated union: a renderer can
``match`` on the concrete class (or on ``kind``) and a type checker
will flag any variant left unhandled.
"""

from __future__ import annotations

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from pyamiibo.models.detail import Detail
from pyamiibo.models.item import Item

DEFAULT_LIST_ERROR = "Unknown error while loading data"
DEFAULT_DETAIL_ERROR = "Unable to load detail"


class _ViewState(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ------------------------------------------------------------------
# List screen
# ------------------------------------------------------------------


class ListLoading(_ViewState):
    """No data to show yet."""

    kind: Literal["loading"] = "loading"


class ListSuccess(_ViewState):
    """Items to render; ``refreshing`` drives a non-blocking progress indicator."""

    kind: Literal["success"] = "success"
    items: list[Item] = Field(..., min_length=1)
    refreshing: bool = False


class ListError(_ViewState):
    """A refresh failed.

    With ``cached_items`` the UI keeps showing the grid plus a retry
    affordance; without, it shows a full error view.
    """

    kind: Literal["error"] = "error"
    message: str
    cached_items: list[Item] = Field(default_factory=list)


ListViewState: TypeAlias = Annotated[ListLoading | ListSuccess | ListError, Field(discriminator="kind")]


# ------------------------------------------------------------------
# Detail screen
# ------------------------------------------------------------------


class DetailLoading(_ViewState):
    kind: Literal["loading"] = "loading"


class DetailSuccess(_ViewState):
    kind: Literal["success"] = "success"
    detail: Detail


class DetailError(_ViewState):
    kind: Literal["error"] = "error"
    message: str


DetailViewState: TypeAlias = Annotated[DetailLoading | DetailSuccess | DetailError, Field(discriminator="kind")]


def failure_message(exc: BaseException, default: str) -> str:
    """User-visible text for a failed command."""
    text = str(exc).strip()
    return text or default
