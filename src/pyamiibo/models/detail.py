"""Detail models and the payload → domain mapping."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pyamiibo._constants import PLATFORM_3DS, PLATFORM_SWITCH, PLATFORM_WII_U
from pyamiibo.models._base import AmiiboPayloadModel
from pyamiibo.models.item import make_item_id


class CompatibleGame(BaseModel):
    """A game the figure works with, tagged with its platform."""

    model_config = ConfigDict(frozen=True)

    name: str
    platform: str


def normalize_games(games: list[CompatibleGame]) -> list[CompatibleGame]:
    """De-duplicate by name (first occurrence wins) and sort by name."""
    seen: dict[str, CompatibleGame] = {}
    for game in games:
        seen.setdefault(game.name, game)
    return sorted(seen.values(), key=lambda game: game.name)


class Detail(BaseModel):
    """Full record shown in the detail screen."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    character: str = ""
    series: str = ""
    sub_series: str = ""
    kind: str = ""
    """Figure type (``Figure``, ``Card``, ``Yarn``...)."""
    image_url: str = ""
    release_na: str | None = None
    release_eu: str | None = None
    release_jp: str | None = None
    release_au: str | None = None
    compatible_games: list[CompatibleGame] = Field(default_factory=list)


class ReleasePayload(AmiiboPayloadModel):
    au: str | None = None
    eu: str | None = None
    jp: str | None = None
    na: str | None = None


class GamePayload(AmiiboPayloadModel):
    game_name: str
    game_id: list[str] = Field(default_factory=list, alias="gameID")


class DetailPayload(AmiiboPayloadModel):
    """One entry of the ``/amiibo/?...&showgames`` response."""

    head: str
    tail: str
    name: str
    character: str = ""
    game_series: str = ""
    amiibo_series: str = ""
    kind: str = Field(default="", alias="type")
    image: str = ""
    release: ReleasePayload | None = None
    games_3ds: list[GamePayload] = Field(default_factory=list, alias="games3DS")
    games_switch: list[GamePayload] = Field(default_factory=list, alias="gamesSwitch")
    games_wii_u: list[GamePayload] = Field(default_factory=list, alias="gamesWiiU")

    def to_detail(self) -> Detail:
        games: list[CompatibleGame] = []
        for platform, entries in (
            (PLATFORM_3DS, self.games_3ds),
            (PLATFORM_SWITCH, self.games_switch),
            (PLATFORM_WII_U, self.games_wii_u),
        ):
            games.extend(CompatibleGame(name=entry.game_name, platform=platform) for entry in entries)

        release = self.release or ReleasePayload()
        return Detail(
            id=make_item_id(self.head, self.tail),
            name=self.name,
            character=self.character,
            series=self.game_series,
            sub_series=self.amiibo_series,
            kind=self.kind,
            image_url=self.image,
            release_na=release.na,
            release_eu=release.eu,
            release_jp=release.jp,
            release_au=release.au,
            compatible_games=normalize_games(games),
        )
