"""Canonical, provider-agnostic entities produced by the parsers.

Both upstream providers are normalized into these models; pages and the
aggregation helpers never see raw provider JSON.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

ProviderName = Literal["espn", "sportsdata"]
PositionGroup = Literal["offense", "defense", "specialTeams", "other"]
CategoryType = Literal["team", "athlete", "topic"]
GameState = Literal["scheduled", "in_progress", "final"]

POSITION_GROUPS: tuple[str, ...] = ("offense", "defense", "specialTeams", "other")


class SeasonType(IntEnum):
    PRESEASON = 1
    REGULAR = 2
    POSTSEASON = 3


class _Entity(BaseModel):
    model_config = ConfigDict(frozen=True)


class LineScore(_Entity):
    quarter1: Optional[int] = None
    quarter2: Optional[int] = None
    quarter3: Optional[int] = None
    quarter4: Optional[int] = None
    overtime: Optional[int] = None

    def quarters(self) -> tuple[Optional[int], ...]:
        return (self.quarter1, self.quarter2, self.quarter3, self.quarter4)

    def total(self) -> Optional[int]:
        """Sum of the recorded periods, None when no quarter was recorded."""
        recorded = [value for value in (*self.quarters(), self.overtime) if value is not None]
        if not recorded:
            return None
        return sum(recorded)


class Team(_Entity):
    team_id: int = 0
    key: str
    city: str = ""
    name: str = ""
    full_name: str = ""
    conference: str = ""
    division: str = ""
    primary_color: str = ""
    secondary_color: str = ""
    logo_url: str = ""
    word_mark_url: str = ""
    head_coach: str = ""
    bye_week: int = 0
    stadium_id: int = 0

    @property
    def division_label(self) -> str:
        return f"{self.conference} {self.division}".strip()


class Game(_Entity):
    """A scheduled, live or finished game.

    Scores are None until recorded; a recorded 0 stays 0. The three progress
    flags are derived from one ``GameState`` by the parsers, so exactly one of
    scheduled / in progress / over holds.
    """

    game_key: str
    provider: ProviderName
    season: int = 0
    season_type: SeasonType = SeasonType.REGULAR
    week: int = 0
    kickoff: Optional[datetime] = None

    home_team: str = ""
    away_team: str = ""
    home_team_name: str = ""
    away_team_name: str = ""
    home_team_logo: str = ""
    away_team_logo: str = ""

    home_score: Optional[int] = None
    away_score: Optional[int] = None
    home_line_score: LineScore = LineScore()
    away_line_score: LineScore = LineScore()

    has_started: bool = False
    is_in_progress: bool = False
    is_over: bool = False
    closed: bool = False
    is_overtime: bool = False

    quarter: Optional[str] = None
    time_remaining: Optional[str] = None
    possession: Optional[str] = None
    down: Optional[int] = None
    distance: Optional[int] = None
    yard_line: Optional[int] = None
    yard_line_territory: Optional[str] = None
    red_zone: Optional[bool] = None
    down_and_distance: Optional[str] = None

    channel: Optional[str] = None
    point_spread: Optional[float] = None
    over_under: Optional[float] = None
    status_detail: str = ""
    venue: str = ""
    stadium_id: Optional[int] = None

    @property
    def state(self) -> GameState:
        if self.is_over:
            return "final"
        if self.is_in_progress:
            return "in_progress"
        return "scheduled"


class Scoreboard(_Entity):
    season: int
    season_type: SeasonType
    week: int
    games: tuple[Game, ...] = ()


class Standing(_Entity):
    season: int = 0
    season_type: SeasonType = SeasonType.REGULAR
    conference: str = ""
    division: str = ""
    team: str
    name: str = ""
    team_id: int = 0

    wins: int = 0
    losses: int = 0
    ties: int = 0
    percentage: float = 0.0
    points_for: int = 0
    points_against: int = 0
    net_points: int = 0
    touchdowns: int = 0

    division_wins: int = 0
    division_losses: int = 0
    division_ties: int = 0
    conference_wins: int = 0
    conference_losses: int = 0
    conference_ties: int = 0
    home_wins: int = 0
    home_losses: int = 0
    away_wins: int = 0
    away_losses: int = 0
    streak: int = 0
    division_rank: int = 0
    conference_rank: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def division_label(self) -> str:
        return f"{self.conference} {self.division}".strip()


class RosterPlayer(_Entity):
    player_id: str
    team: str = ""
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    jersey: str = ""
    position: str = ""
    position_group: PositionGroup = "other"
    height: str = ""
    weight: str = ""
    age: Optional[int] = None
    birth_date: Optional[date] = None
    experience: int = 0
    college: str = ""
    headshot: str = ""
    status: str = "Active"
    active: bool = True


class NewsCategory(_Entity):
    type: CategoryType
    description: str


class NewsArticle(_Entity):
    article_id: str
    headline: str
    description: str = ""
    published: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    byline: str = ""
    is_premium: bool = False
    categories: tuple[NewsCategory, ...] = ()
    article_url: str = ""
    image_url: str = ""
    image_alt: str = ""


@dataclass(frozen=True)
class EspnRecord:
    """One raw object from the public ESPN site API."""

    payload: Any
    provider: Literal["espn"] = "espn"


@dataclass(frozen=True)
class SportsDataRecord:
    """One raw object from the keyed SportsDataIO API."""

    payload: Any
    provider: Literal["sportsdata"] = "sportsdata"


ProviderRecord = Union[EspnRecord, SportsDataRecord]


def progress_flags(state: GameState) -> dict[str, bool]:
    """Expand a game state into the three progress flags a Game carries."""
    return {
        "has_started": state != "scheduled",
        "is_in_progress": state == "in_progress",
        "is_over": state == "final",
    }


def position_group_for(label: Any) -> PositionGroup:
    """Map a provider's position-group label onto the four fixed groups."""
    if not isinstance(label, str):
        return "other"
    cleaned = label.replace("_", "").replace(" ", "").lower()
    if cleaned in {"offense", "off"}:
        return "offense"
    if cleaned in {"defense", "def"}:
        return "defense"
    if cleaned in {"specialteams", "specialteam", "st"}:
        return "specialTeams"
    return "other"


def season_type_from(value: Any, default: SeasonType = SeasonType.REGULAR) -> SeasonType:
    try:
        return SeasonType(int(value))
    except (TypeError, ValueError):
        return default
