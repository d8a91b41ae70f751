"""Provider-agnostic entry points over the two parsers.

Callers wrap raw provider JSON in ``EspnRecord`` or ``SportsDataRecord`` and
get canonical entities back without knowing which parser ran.
"""

from __future__ import annotations

from typing import Any, Mapping

from nfl_hub.ingestion import espn_parser, sportsdata_parser
from nfl_hub.ingestion.divisions import NFL_DIVISIONS, DivisionInfo
from nfl_hub.ingestion.schema import (
    EspnRecord,
    Game,
    NewsArticle,
    ProviderRecord,
    RosterPlayer,
    Scoreboard,
    SeasonType,
    SportsDataRecord,
    Standing,
    Team,
)


def _unsupported(record: Any) -> TypeError:
    return TypeError(f"Unsupported provider record: {type(record).__name__}")


def to_game(record: ProviderRecord) -> Game:
    if isinstance(record, EspnRecord):
        return espn_parser.parse_game(record.payload)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_game(record.payload)
    raise _unsupported(record)


def to_team(
    record: ProviderRecord,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> Team:
    if isinstance(record, EspnRecord):
        return espn_parser.parse_team(record.payload, divisions)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_team(record.payload, divisions)
    raise _unsupported(record)


def to_standing(
    record: ProviderRecord,
    *,
    season: int = 0,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> Standing:
    if isinstance(record, EspnRecord):
        return espn_parser.parse_standing(record.payload, season=season, divisions=divisions)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_standing(record.payload, season=season, divisions=divisions)
    raise _unsupported(record)


def to_roster_player(record: ProviderRecord, group: Any = None) -> RosterPlayer:
    if isinstance(record, EspnRecord):
        return espn_parser.parse_roster_player(record.payload, group)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_player(record.payload, group)
    raise _unsupported(record)


def to_roster(record: ProviderRecord, team: str = "") -> list[RosterPlayer]:
    """ESPN rosters are grouped by position; SportsDataIO returns a flat list."""
    if isinstance(record, EspnRecord):
        return espn_parser.parse_roster(record.payload, team)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_players(record.payload)
    raise _unsupported(record)


def to_news_article(record: ProviderRecord) -> NewsArticle:
    if isinstance(record, EspnRecord):
        return espn_parser.parse_article(record.payload)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_article(record.payload)
    raise _unsupported(record)


def parse_scoreboard(
    record: ProviderRecord,
    *,
    season: int = 0,
    season_type: SeasonType = SeasonType.REGULAR,
    week: int = 0,
) -> Scoreboard:
    """Parse one week of games.

    The ESPN payload carries its own season and week; SportsDataIO returns a
    bare list, so the requested season/week are used instead.
    """

    if isinstance(record, EspnRecord):
        return espn_parser.parse_scoreboard(record.payload)
    if isinstance(record, SportsDataRecord):
        games = sportsdata_parser.parse_games(record.payload)
        return Scoreboard(season=season, season_type=season_type, week=week, games=tuple(games))
    raise _unsupported(record)


def parse_teams(
    record: ProviderRecord,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> list[Team]:
    if isinstance(record, EspnRecord):
        return espn_parser.parse_teams(record.payload, divisions)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_teams(record.payload, divisions)
    raise _unsupported(record)


def parse_standings(
    record: ProviderRecord,
    *,
    season: int = 0,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> list[Standing]:
    if isinstance(record, EspnRecord):
        return espn_parser.parse_standings(record.payload, season=season, divisions=divisions)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_standings(record.payload, season=season, divisions=divisions)
    raise _unsupported(record)


def parse_news(record: ProviderRecord) -> list[NewsArticle]:
    if isinstance(record, EspnRecord):
        return espn_parser.parse_news(record.payload)
    if isinstance(record, SportsDataRecord):
        return sportsdata_parser.parse_news(record.payload)
    raise _unsupported(record)
