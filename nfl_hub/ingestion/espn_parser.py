"""Parser for ESPN site API payloads (scoreboard, teams, standings, roster, news)."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from nfl_hub.errors import NormalizationError
from nfl_hub.ingestion.coerce import (
    coalesce_bool,
    coalesce_float,
    coalesce_int,
    coalesce_str,
    dig,
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
    split_division_label,
)
from nfl_hub.ingestion.schema import (
    Game,
    GameState,
    LineScore,
    NewsArticle,
    NewsCategory,
    RosterPlayer,
    Scoreboard,
    SeasonType,
    Standing,
    Team,
    position_group_for,
    progress_flags,
    season_type_from,
)

_CATEGORY_TYPES = {"team", "athlete", "topic"}

# ESPN standings stat name -> Standing field
_STANDING_STATS: dict[str, str] = {
    "wins": "wins",
    "losses": "losses",
    "ties": "ties",
    "pointsFor": "points_for",
    "pointsAgainst": "points_against",
    "divisionWins": "division_wins",
    "divisionLosses": "division_losses",
    "divisionTies": "division_ties",
    "streak": "streak",
    "playoffSeed": "conference_rank",
}


def _require_mapping(value: Any, field: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise NormalizationError(field, "expected an object")
    return value


def _require_id(payload: Mapping[str, Any], field: str = "id") -> str:
    value = coalesce_str(payload.get(field))
    if not value:
        raise NormalizationError(field, "is missing")
    return value


def _optional_list(payload: Mapping[str, Any], field: str) -> list[Any]:
    value = payload.get(field)
    if value is None:
        return []
    if not isinstance(value, list):
        raise NormalizationError(field, "expected a list")
    return value


def _normalize_state(status: Any) -> GameState:
    status_type = dig(status, "type") or {}
    state = status_type.get("state") if isinstance(status_type, Mapping) else None
    name = coalesce_str(status_type.get("name") if isinstance(status_type, Mapping) else None).lower()
    if "postpon" in name or "cancel" in name:
        return "scheduled"
    if isinstance(state, str):
        state_lower = state.lower()
        if state_lower == "in":
            return "in_progress"
        if state_lower == "post":
            return "final"
    return "scheduled"


def _line_score(competitor: Mapping[str, Any] | None) -> LineScore:
    if not competitor:
        return LineScore()
    periods = competitor.get("linescores")
    if not isinstance(periods, list):
        return LineScore()
    values = [
        coalesce_int(period.get("value")) if isinstance(period, Mapping) else None
        for period in periods
    ]
    quarters = values[:4] + [None] * (4 - len(values[:4]))
    # Every overtime period after the fourth quarter folds into one total
    overtime_periods = [value for value in values[4:] if value is not None]
    return LineScore(
        quarter1=quarters[0],
        quarter2=quarters[1],
        quarter3=quarters[2],
        quarter4=quarters[3],
        overtime=sum(overtime_periods) if overtime_periods else None,
    )


def _team_logo(team: Mapping[str, Any]) -> str:
    logo = coalesce_str(team.get("logo"))
    if logo:
        return logo
    return coalesce_str(dig(team, "logos", 0, "href"))


def _split_competitors(competitors: Iterable[Any]) -> tuple[dict | None, dict | None]:
    home = None
    away = None
    for competitor in competitors:
        if not isinstance(competitor, dict):
            continue
        home_away = competitor.get("homeAway")
        if home_away == "home":
            home = competitor
        elif home_away == "away":
            away = competitor
    return home, away


def _channel(competition: Mapping[str, Any]) -> str | None:
    broadcasts = competition.get("broadcasts")
    if isinstance(broadcasts, list) and broadcasts:
        names = dig(broadcasts, 0, "names")
        if isinstance(names, list):
            joined = "/".join(name for name in names if isinstance(name, str))
            if joined:
                return joined
    return optional_str(competition.get("broadcast"))


def _situation(
    competition: Mapping[str, Any],
    team_keys_by_id: Mapping[str, str],
) -> dict[str, Any]:
    situation = competition.get("situation")
    if not isinstance(situation, Mapping):
        return {}
    possession_id = coalesce_str(situation.get("possession"))
    return {
        "possession": team_keys_by_id.get(possession_id) or None,
        "down": coalesce_int(situation.get("down")),
        "distance": coalesce_int(situation.get("distance")),
        "yard_line": coalesce_int(situation.get("yardLine")),
        "red_zone": optional_bool(situation.get("isRedZone")),
        "down_and_distance": optional_str(
            situation.get("shortDownDistanceText") or situation.get("downDistanceText")
        ),
    }


def parse_game(
    event: Any,
    *,
    default_season: int = 0,
    default_season_type: SeasonType = SeasonType.REGULAR,
    default_week: int = 0,
) -> Game:
    """Parse one scoreboard event into a Game."""

    event = _require_mapping(event, "event")
    game_key = _require_id(event)

    competitions = event.get("competitions")
    if not isinstance(competitions, list) or not competitions:
        raise NormalizationError("competitions", "expected a non-empty list")
    competition = _require_mapping(competitions[0], "competitions")
    competitors = _optional_list(competition, "competitors")

    home, away = _split_competitors(competitors)
    home_team = home.get("team") if home and isinstance(home.get("team"), dict) else {}
    away_team = away.get("team") if away and isinstance(away.get("team"), dict) else {}

    status = competition.get("status") or event.get("status") or {}
    state = _normalize_state(status)
    period = coalesce_int(status.get("period"), 0) if isinstance(status, Mapping) else 0
    in_progress = state == "in_progress"
    recorded = state != "scheduled"

    home_key = canonical_key(coalesce_str(home_team.get("abbreviation")))
    away_key = canonical_key(coalesce_str(away_team.get("abbreviation")))
    team_keys_by_id = {
        coalesce_str(home_team.get("id")): home_key,
        coalesce_str(away_team.get("id")): away_key,
    }

    venue = competition.get("venue") if isinstance(competition.get("venue"), Mapping) else {}

    return Game(
        game_key=game_key,
        provider="espn",
        season=coalesce_int(dig(event, "season", "year"), default_season),
        season_type=season_type_from(dig(event, "season", "type"), default_season_type),
        week=coalesce_int(dig(event, "week", "number"), default_week),
        kickoff=parse_datetime(event.get("date") or competition.get("date")),
        home_team=home_key,
        away_team=away_key,
        home_team_name=coalesce_str(home_team.get("displayName") or home_team.get("name")),
        away_team_name=coalesce_str(away_team.get("displayName") or away_team.get("name")),
        home_team_logo=_team_logo(home_team),
        away_team_logo=_team_logo(away_team),
        home_score=coalesce_int(home.get("score")) if home and recorded else None,
        away_score=coalesce_int(away.get("score")) if away and recorded else None,
        home_line_score=_line_score(home) if recorded else LineScore(),
        away_line_score=_line_score(away) if recorded else LineScore(),
        closed=state == "final",
        is_overtime=recorded and period > 4,
        quarter=str(period) if in_progress and period else None,
        time_remaining=optional_str(status.get("displayClock")) if in_progress else None,
        channel=_channel(competition),
        status_detail=coalesce_str(dig(status, "type", "shortDetail")),
        venue=coalesce_str(venue.get("fullName")),
        stadium_id=coalesce_int(venue.get("id")),
        **(_situation(competition, team_keys_by_id) if in_progress else {}),
        **progress_flags(state),
    )


def parse_scoreboard(scoreboard_json: Any) -> Scoreboard:
    """Parse an ESPN scoreboard response into a Scoreboard."""

    payload = _require_mapping(scoreboard_json, "scoreboard")
    season = coalesce_int(dig(payload, "season", "year"), 0)
    season_type = season_type_from(dig(payload, "season", "type"))
    week = coalesce_int(dig(payload, "week", "number"), 0)

    seen_keys: set[str] = set()
    games: list[Game] = []
    for event in _optional_list(payload, "events"):
        game = parse_game(
            event,
            default_season=season,
            default_season_type=season_type,
            default_week=week,
        )
        if game.game_key in seen_keys:
            continue
        seen_keys.add(game.game_key)
        games.append(game)

    return Scoreboard(season=season, season_type=season_type, week=week, games=tuple(games))


def parse_team(
    raw: Any,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> Team:
    team = _require_mapping(raw, "team")
    if isinstance(team.get("team"), Mapping):
        team = team["team"]
    key = canonical_key(coalesce_str(team.get("abbreviation")))
    if not key:
        raise NormalizationError("abbreviation", "is missing")
    info = division_for(key, divisions)

    return Team(
        team_id=coalesce_int(team.get("id"), 0),
        key=key,
        city=coalesce_str(team.get("location")),
        name=coalesce_str(team.get("name")),
        full_name=coalesce_str(team.get("displayName")),
        conference=info.conference if info else "",
        division=info.division if info else "",
        primary_color=coalesce_str(team.get("color")),
        secondary_color=coalesce_str(team.get("alternateColor")),
        logo_url=_team_logo(team),
    )


def parse_teams(
    teams_json: Any,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> list[Team]:
    payload = _require_mapping(teams_json, "teams")
    teams: list[Team] = []
    for sport in _optional_list(payload, "sports"):
        for league in _optional_list(_require_mapping(sport, "sports"), "leagues"):
            for entry in _optional_list(_require_mapping(league, "leagues"), "teams"):
                teams.append(parse_team(entry, divisions))
    return teams


def _stat_lookup(stats: list[Any]) -> dict[str, Any]:
    lookup: dict[str, Any] = {}
    for stat in stats:
        if isinstance(stat, Mapping) and isinstance(stat.get("name"), str):
            lookup[stat["name"]] = stat.get("value")
    return lookup


def parse_standing(
    entry: Any,
    *,
    season: int = 0,
    season_type: SeasonType = SeasonType.REGULAR,
    group: DivisionInfo | None = None,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> Standing:
    """Parse one standings entry; each named stat defaults to 0 when absent."""

    entry = _require_mapping(entry, "entry")
    team = _require_mapping(entry.get("team"), "team")
    key = canonical_key(coalesce_str(team.get("abbreviation")))
    if not key:
        raise NormalizationError("abbreviation", "is missing")

    stats = _stat_lookup(_optional_list(entry, "stats"))
    counts = {field: coalesce_int(stats.get(name), 0) for name, field in _STANDING_STATS.items()}

    known = division_for(key, divisions)
    conference = (group.conference if group else "") or (known.conference if known else "")
    division = (group.division if group else "") or (known.division if known else "")

    percentage = coalesce_float(stats.get("winPercent"))
    if percentage is None:
        percentage = _win_percentage(counts["wins"], counts["losses"], counts["ties"])
    net_points = coalesce_int(stats.get("pointDifferential"))
    if net_points is None:
        net_points = coalesce_int(stats.get("differential"))
    if net_points is None:
        net_points = counts["points_for"] - counts["points_against"]

    return Standing(
        season=season,
        season_type=season_type,
        conference=conference,
        division=division,
        team=key,
        name=coalesce_str(team.get("displayName") or team.get("name")),
        team_id=coalesce_int(team.get("id"), 0),
        percentage=percentage,
        net_points=net_points,
        **counts,
    )


def _win_percentage(wins: int, losses: int, ties: int) -> float:
    played = wins + losses + ties
    if played == 0:
        return 0.0
    return (wins + ties / 2) / played


def _group_label(node: Mapping[str, Any], parent: DivisionInfo | None) -> DivisionInfo | None:
    for candidate in (node.get("name"), node.get("abbreviation")):
        if isinstance(candidate, str):
            label = split_division_label(candidate.replace("Conference", "").strip())
            if label:
                return label
    abbreviation = coalesce_str(node.get("abbreviation")).upper()
    if abbreviation in {"AFC", "NFC"}:
        return DivisionInfo(abbreviation, "")
    return parent


def parse_standings(
    standings_json: Any,
    *,
    season: int = 0,
    divisions: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> list[Standing]:
    """Walk conference (and optional division) groups down to the entries."""

    payload = _require_mapping(standings_json, "standings")
    standings: list[Standing] = []

    def walk(node: Mapping[str, Any], parent: DivisionInfo | None) -> None:
        label = _group_label(node, parent)
        block = node.get("standings")
        if isinstance(block, Mapping):
            block_season = coalesce_int(block.get("season"), season)
            block_type = season_type_from(block.get("seasonType"))
            for entry in _optional_list(block, "entries"):
                standings.append(
                    parse_standing(
                        entry,
                        season=block_season,
                        season_type=block_type,
                        group=label,
                        divisions=divisions,
                    )
                )
        for child in _optional_list(node, "children"):
            walk(_require_mapping(child, "children"), label)

    walk(payload, None)
    return standings


def parse_roster_player(athlete: Any, group: Any = None, team: str = "") -> RosterPlayer:
    athlete = _require_mapping(athlete, "athlete")
    player_id = _require_id(athlete)
    status_type = coalesce_str(dig(athlete, "status", "type")).lower()

    return RosterPlayer(
        player_id=player_id,
        team=team,
        first_name=coalesce_str(athlete.get("firstName")),
        last_name=coalesce_str(athlete.get("lastName")),
        full_name=coalesce_str(athlete.get("fullName") or athlete.get("displayName")),
        jersey=coalesce_str(athlete.get("jersey")),
        position=coalesce_str(dig(athlete, "position", "abbreviation")),
        position_group=position_group_for(group),
        height=coalesce_str(athlete.get("displayHeight")),
        weight=coalesce_str(athlete.get("displayWeight")),
        age=coalesce_int(athlete.get("age")),
        birth_date=parse_date(athlete.get("dateOfBirth")),
        experience=coalesce_int(dig(athlete, "experience", "years"), 0),
        college=coalesce_str(dig(athlete, "college", "shortName") or dig(athlete, "college", "name")),
        headshot=coalesce_str(dig(athlete, "headshot", "href")),
        status=coalesce_str(dig(athlete, "status", "name"), "Active") or "Active",
        active=status_type in {"", "active"},
    )


def parse_roster(roster_json: Any, team: str = "") -> list[RosterPlayer]:
    """Flatten "position group -> athletes" into one list, keeping the group."""

    payload = _require_mapping(roster_json, "roster")
    if not team:
        team = canonical_key(coalesce_str(dig(payload, "team", "abbreviation")))

    players: list[RosterPlayer] = []
    for group in _optional_list(payload, "athletes"):
        group = _require_mapping(group, "athletes")
        if "items" not in group and "id" in group:
            players.append(parse_roster_player(group, None, team))
            continue
        label = group.get("position")
        for athlete in _optional_list(group, "items"):
            players.append(parse_roster_player(athlete, label, team))
    return players


def _categories(raw_categories: list[Any]) -> tuple[NewsCategory, ...]:
    seen: set[tuple[str, str]] = set()
    categories: list[NewsCategory] = []
    for category in raw_categories:
        if not isinstance(category, Mapping):
            continue
        category_type = coalesce_str(category.get("type")).lower()
        description = coalesce_str(category.get("description")).strip()
        if category_type not in _CATEGORY_TYPES or not description:
            continue
        if (category_type, description) in seen:
            continue
        seen.add((category_type, description))
        categories.append(NewsCategory(type=category_type, description=description))
    return tuple(categories)


def parse_article(raw: Any) -> NewsArticle:
    article = _require_mapping(raw, "article")
    headline = coalesce_str(article.get("headline")).strip()
    if not headline:
        raise NormalizationError("headline", "is missing")

    images = article.get("images") if isinstance(article.get("images"), list) else []
    image = images[0] if images and isinstance(images[0], Mapping) else {}

    return NewsArticle(
        article_id=coalesce_str(article.get("id")) or headline,
        headline=headline,
        description=coalesce_str(article.get("description")),
        published=parse_datetime(article.get("published")),
        last_modified=parse_datetime(article.get("lastModified")),
        byline=coalesce_str(article.get("byline")),
        is_premium=coalesce_bool(article.get("premium")),
        categories=_categories(_optional_list(article, "categories")),
        article_url=coalesce_str(dig(article, "links", "web", "href")),
        image_url=coalesce_str(image.get("url")),
        image_alt=coalesce_str(image.get("alt") or image.get("caption")),
    )


def parse_news(news_json: Any) -> list[NewsArticle]:
    payload = _require_mapping(news_json, "news")
    return [parse_article(article) for article in _optional_list(payload, "articles")]
