"""Parser for SportsDataIO v3 NFL payloads.

SportsDataIO returns flat PascalCase objects (one per game, team, standing,
player or article). Kickoff times are Eastern wall-clock times without an
offset, so they are localised to America/New_York here.
"""

from __future__ import annotations

from typing import Any, Mapping
from zoneinfo import ZoneInfo

from nfl_hub.errors import NormalizationError
from nfl_hub.ingestion.coerce import (
    coalesce_bool,
    coalesce_float,
    coalesce_int,
    coalesce_str,
    optional_bool,
    optional_str,
    parse_date,
    parse_datetime,
)
from nfl_hub.ingestion.divisions import (
    NFL_DIVISIONS,
    DivisionInfo,
    canonical_key,
    division_for,
)
from nfl_hub.ingestion.schema import (
    Game,
    GameState,
    LineScore,
    NewsArticle,
    NewsCategory,
    RosterPlayer,
    Standing,
    Team,
    position_group_for,
    progress_flags,
    season_type_from,
)
from nfl_hub.team_logos import get_team_logo

EASTERN = ZoneInfo("America/New_York")

_FINAL_STATUSES = {"final", "f/ot", "closed"}
_LIVE_STATUSES = {"inprogress", "in progress"}


def _require_mapping(value: Any, field: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise NormalizationError(field, "expected an object")
    return value


def _require_list(value: Any, field: str) -> list[Any]:
    if not isinstance(value, list):
        raise NormalizationError(field, "expected a list")
    return value


def _game_state(raw: Mapping[str, Any]) -> GameState:
    if coalesce_bool(raw.get("IsOver")) or coalesce_bool(raw.get("Closed")):
        return "final"
    if coalesce_bool(raw.get("IsInProgress")) or coalesce_bool(raw.get("HasStarted")):
        return "in_progress"
    status = coalesce_str(raw.get("Status")).strip().lower()
    if status in _FINAL_STATUSES:
        return "final"
    if status in _LIVE_STATUSES:
        return "in_progress"
    return "scheduled"


def _line_score(raw: Mapping[str, Any], side: str) -> LineScore:
    return LineScore(
        quarter1=coalesce_int(raw.get(f"{side}ScoreQuarter1")),
        quarter2=coalesce_int(raw.get(f"{side}ScoreQuarter2")),
        quarter3=coalesce_int(raw.get(f"{side}ScoreQuarter3")),
        quarter4=coalesce_int(raw.get(f"{side}ScoreQuarter4")),
        overtime=coalesce_int(raw.get(f"{side}ScoreOvertime")),
    )


def is_bye(raw: Any) -> bool:
    """Schedules list bye weeks as pseudo games against team "BYE"."""
    if not isinstance(raw, Mapping):
        return False
    return "BYE" in {
        coalesce_str(raw.get("HomeTeam")).upper(),
        coalesce_str(raw.get("AwayTeam")).upper(),
    }


def parse_game(raw: Any) -> Game:
    raw = _require_mapping(raw, "game")
    game_key = coalesce_str(raw.get("GameKey") or raw.get("ScoreID") or raw.get("GameID"))
    if not game_key:
        raise NormalizationError("GameKey", "is missing")

    state = _game_state(raw)
    recorded = state != "scheduled"
    in_progress = state == "in_progress"
    home_key = canonical_key(coalesce_str(raw.get("HomeTeam")))
    away_key = canonical_key(coalesce_str(raw.get("AwayTeam")))
    home_line = _line_score(raw, "Home")
    away_line = _line_score(raw, "Away")
    quarter = optional_str(raw.get("Quarter"))

    return Game(
        game_key=game_key,
        provider="sportsdata",
        season=coalesce_int(raw.get("Season"), 0),
        season_type=season_type_from(raw.get("SeasonType")),
        week=coalesce_int(raw.get("Week"), 0),
        kickoff=parse_datetime(raw.get("DateTime") or raw.get("Date"), EASTERN),
        home_team=home_key,
        away_team=away_key,
        home_team_logo=get_team_logo(home_key),
        away_team_logo=get_team_logo(away_key),
        home_score=coalesce_int(raw.get("HomeScore")) if recorded else None,
        away_score=coalesce_int(raw.get("AwayScore")) if recorded else None,
        home_line_score=home_line if recorded else LineScore(),
        away_line_score=away_line if recorded else LineScore(),
        closed=coalesce_bool(raw.get("Closed")),
        is_overtime=(
            home_line.overtime is not None
            or away_line.overtime is not None
            or (quarter or "").upper() == "OT"
            or coalesce_str(raw.get("Status")).upper() == "F/OT"
        )
        and recorded,
        quarter=quarter if in_progress else None,
        time_remaining=optional_str(raw.get("TimeRemaining")) if in_progress else None,
        possession=optional_str(raw.get("Possession")) if in_progress else None,
        down=coalesce_int(raw.get("Down")) if in_progress else None,
        distance=coalesce_int(raw.get("Distance")) if in_progress else None,
        yard_line=coalesce_int(raw.get("YardLine")) if in_progress else None,
        yard_line_territory=optional_str(raw.get("YardLineTerritory")) if in_progress else None,
        red_zone=optional_bool(raw.get("RedZone")) if in_progress else None,
        down_and_distance=optional_str(raw.get("DownAndDistance")) if in_progress else None,
        channel=optional_str(raw.get("Channel")),
        point_spread=coalesce_float(raw.get("PointSpread")),
        over_under=coalesce_float(raw.get("OverUnder")),
        status_detail=coalesce_str(raw.get("Status")),
        stadium_id=coalesce_int(raw.get("StadiumID")),
        **progress_flags(state),
    )


def parse_games(payload: Any) -> list[Game]:
    """Parse a list of games, skipping bye-week entries and duplicate keys."""

    games: list[Game] = []
    seen_keys: set[str] = set()
    for raw in _require_list(payload, "games"):
        if is_bye(raw):
            continue
        game = parse_game(raw)
        if game.game_key in seen_keys:
            continue
        seen_keys.add(game.game_key)
        games.append(game)
    return games


def parse_team(
    raw: Any,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> Team:
    raw = _require_mapping(raw, "team")
    key = canonical_key(coalesce_str(raw.get("Key")))
    if not key:
        raise NormalizationError("Key", "is missing")

    known = division_for(key, divisions)
    city = coalesce_str(raw.get("City"))
    name = coalesce_str(raw.get("Name"))

    return Team(
        team_id=coalesce_int(raw.get("TeamID"), 0),
        key=key,
        city=city,
        name=name,
        full_name=coalesce_str(raw.get("FullName")) or f"{city} {name}".strip(),
        conference=coalesce_str(raw.get("Conference")) or (known.conference if known else ""),
        division=coalesce_str(raw.get("Division")) or (known.division if known else ""),
        primary_color=coalesce_str(raw.get("PrimaryColor")),
        secondary_color=coalesce_str(raw.get("SecondaryColor")),
        logo_url=coalesce_str(raw.get("WikipediaLogoUrl") or raw.get("WikipediaLogoURL"))
        or get_team_logo(key),
        word_mark_url=coalesce_str(
            raw.get("WikipediaWordMarkUrl") or raw.get("WikipediaWordMarkURL")
        ),
        head_coach=coalesce_str(raw.get("HeadCoach")),
        bye_week=coalesce_int(raw.get("ByeWeek"), 0),
        stadium_id=coalesce_int(raw.get("StadiumID"), 0),
    )


def parse_teams(
    payload: Any,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> list[Team]:
    return [parse_team(raw, divisions) for raw in _require_list(payload, "teams")]


# Standing field -> SportsDataIO field, all integers
_STANDING_FIELDS: dict[str, str] = {
    "wins": "Wins",
    "losses": "Losses",
    "ties": "Ties",
    "points_for": "PointsFor",
    "points_against": "PointsAgainst",
    "touchdowns": "Touchdowns",
    "division_wins": "DivisionWins",
    "division_losses": "DivisionLosses",
    "division_ties": "DivisionTies",
    "conference_wins": "ConferenceWins",
    "conference_losses": "ConferenceLosses",
    "conference_ties": "ConferenceTies",
    "home_wins": "HomeWins",
    "home_losses": "HomeLosses",
    "away_wins": "AwayWins",
    "away_losses": "AwayLosses",
    "streak": "Streak",
    "division_rank": "DivisionRank",
    "conference_rank": "ConferenceRank",
}


def parse_standing(
    raw: Any,
    *,
    season: int = 0,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> Standing:
    raw = _require_mapping(raw, "standing")
    key = canonical_key(coalesce_str(raw.get("Team")))
    if not key:
        raise NormalizationError("Team", "is missing")

    counts = {field: coalesce_int(raw.get(name), 0) for field, name in _STANDING_FIELDS.items()}
    known = division_for(key, divisions)

    percentage = coalesce_float(raw.get("Percentage"))
    if percentage is None:
        played = counts["wins"] + counts["losses"] + counts["ties"]
        percentage = (counts["wins"] + counts["ties"] / 2) / played if played else 0.0
    net_points = coalesce_int(raw.get("NetPoints"))
    if net_points is None:
        net_points = counts["points_for"] - counts["points_against"]

    return Standing(
        season=coalesce_int(raw.get("Season"), season),
        season_type=season_type_from(raw.get("SeasonType")),
        conference=coalesce_str(raw.get("Conference")) or (known.conference if known else ""),
        division=coalesce_str(raw.get("Division")) or (known.division if known else ""),
        team=key,
        name=coalesce_str(raw.get("Name")),
        team_id=coalesce_int(raw.get("TeamID"), 0),
        percentage=percentage,
        net_points=net_points,
        **counts,
    )


def parse_standings(
    payload: Any,
    *,
    season: int = 0,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> list[Standing]:
    return [
        parse_standing(raw, season=season, divisions=divisions)
        for raw in _require_list(payload, "standings")
    ]


def parse_player(raw: Any, group: Any = None) -> RosterPlayer:
    raw = _require_mapping(raw, "player")
    player_id = coalesce_str(raw.get("PlayerID"))
    if not player_id:
        raise NormalizationError("PlayerID", "is missing")

    first_name = coalesce_str(raw.get("FirstName"))
    last_name = coalesce_str(raw.get("LastName"))
    status = coalesce_str(raw.get("Status")) or "Active"
    weight = coalesce_int(raw.get("Weight"))

    return RosterPlayer(
        player_id=player_id,
        team=canonical_key(coalesce_str(raw.get("Team"))),
        first_name=first_name,
        last_name=last_name,
        full_name=coalesce_str(raw.get("Name")) or f"{first_name} {last_name}".strip(),
        jersey=coalesce_str(raw.get("Number")),
        position=coalesce_str(raw.get("Position")),
        position_group=position_group_for(group if group is not None else raw.get("PositionCategory")),
        height=coalesce_str(raw.get("Height")),
        weight=f"{weight} lbs" if weight else "",
        age=coalesce_int(raw.get("Age")),
        birth_date=parse_date(raw.get("BirthDate")),
        experience=coalesce_int(raw.get("Experience"), 0),
        college=coalesce_str(raw.get("College")),
        headshot=coalesce_str(raw.get("PhotoUrl")),
        status=status,
        active=coalesce_bool(raw.get("Active"), status.lower() == "active"),
    )


def parse_players(payload: Any) -> list[RosterPlayer]:
    return [parse_player(raw) for raw in _require_list(payload, "players")]


def _categories(raw: Mapping[str, Any]) -> tuple[NewsCategory, ...]:
    categories: list[NewsCategory] = []
    team = canonical_key(coalesce_str(raw.get("Team")))
    if team:
        categories.append(NewsCategory(type="team", description=team))
    for label in coalesce_str(raw.get("Categories")).split(","):
        label = label.strip()
        if label and all(category.description != label for category in categories):
            categories.append(NewsCategory(type="topic", description=label))
    return tuple(categories)


def parse_article(raw: Any) -> NewsArticle:
    raw = _require_mapping(raw, "article")
    headline = coalesce_str(raw.get("Title")).strip()
    if not headline:
        raise NormalizationError("Title", "is missing")
    updated = parse_datetime(raw.get("Updated"), EASTERN)

    return NewsArticle(
        article_id=coalesce_str(raw.get("NewsID")) or headline,
        headline=headline,
        description=coalesce_str(raw.get("Content")),
        published=updated,
        last_modified=updated,
        byline=coalesce_str(raw.get("Author")),
        categories=_categories(raw),
        article_url=coalesce_str(raw.get("Url")),
    )


def parse_news(payload: Any) -> list[NewsArticle]:
    return [parse_article(raw) for raw in _require_list(payload, "news")]
