from pydantic import BaseModel
from typing import Optional

from nfl_hub.ingestion.schema import Game, RosterPlayer, Standing


class ScoresResponse(BaseModel):
    provider: str
    season: int
    season_type: int
    week: int
    games: list[Game]
    count: int
    message: Optional[str] = None


class StandingsResponse(BaseModel):
    provider: str
    season: int
    view: str
    groups: dict[str, list[Standing]]
    count: int


class PlayersResponse(BaseModel):
    provider: str
    players: list[RosterPlayer]
    count: int
    limited: bool
    positions: list[str]
    teams: list[str]


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    status: Optional[int] = None
