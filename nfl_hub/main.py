from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Awaitable, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from nfl_hub.errors import ConfigurationError, NflHubError, NormalizationError, UpstreamError
from nfl_hub.formatting import (
    format_game_date,
    format_game_time,
    format_net_points,
    format_news_date,
    format_percentage,
    game_status_text,
    season_type_label,
    season_type_short_label,
    season_weeks,
    week_label,
)
from nfl_hub.ingestion.schema import SeasonType, season_type_from
from nfl_hub.log_buffer import get_buffer_handler, install_buffer_handler
from nfl_hub.schemas import ErrorResponse, PlayersResponse, ScoresResponse, StandingsResponse
from nfl_hub.service import NflDataService
from nfl_hub.settings import get_settings
from nfl_hub.team_logos import get_team_logo, league_logo_url
from nfl_hub.views import (
    POSITION_GROUP_LABELS,
    filter_players,
    group_games_by_week,
    group_roster_by_position_group,
    group_standings_by_division,
    group_teams_by_division,
    player_facets,
    rank_by_conference,
    rank_overall,
    sort_games_by_kickoff,
    sort_games_for_display,
    split_by_conference,
)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
CACHE_CONTROL = "public, max-age=60"
STANDINGS_VIEWS = ("division", "conference", "overall")
PLAYER_RESULT_LIMIT = 100

app = FastAPI(title="NFL Hub")
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
logger = logging.getLogger(__name__)

T = TypeVar("T")


def _display_tz():
    return get_settings().tz


templates.env.globals["team_logo_url"] = get_team_logo
templates.env.globals["league_logo_url"] = league_logo_url
templates.env.globals["position_group_labels"] = POSITION_GROUP_LABELS
templates.env.filters["game_date"] = lambda value: format_game_date(value, _display_tz())
templates.env.filters["game_time"] = lambda value: format_game_time(value, _display_tz())
templates.env.filters["news_date"] = lambda value: format_news_date(value, _display_tz())
templates.env.filters["game_status"] = lambda game: game_status_text(game, _display_tz())
templates.env.filters["pct"] = format_percentage
templates.env.filters["net_points"] = format_net_points
templates.env.filters["season_type_label"] = season_type_label
templates.env.filters["season_type_short"] = season_type_short_label


@lru_cache(maxsize=1)
def get_service() -> NflDataService:
    return NflDataService(get_settings())


@app.on_event("startup")
async def startup() -> None:
    settings = get_settings()
    install_buffer_handler(settings.log_level)
    logger.info("App starting up, provider=%s", settings.provider)
    if settings.provider == "sportsdata" and not settings.sportsdata_api_key:
        logger.warning("NFL_DATA_PROVIDER=sportsdata but SPORTSDATA_API_KEY is not set")


@app.exception_handler(NflHubError)
async def nfl_hub_error_handler(request: Request, exc: NflHubError) -> JSONResponse:
    """JSON endpoints let errors propagate here; pages catch them earlier."""
    if isinstance(exc, ConfigurationError):
        status_code = 503
        body = ErrorResponse(error="configuration", detail=str(exc))
    elif isinstance(exc, UpstreamError):
        status_code = 502
        body = ErrorResponse(error="upstream", detail=exc.message, status=exc.status)
    else:
        status_code = 502
        body = ErrorResponse(error="normalization", detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _error_context(exc: NflHubError) -> dict[str, str]:
    if isinstance(exc, ConfigurationError):
        return {
            "kind": "configuration",
            "message": "Data provider is not configured. Set SPORTSDATA_API_KEY "
            "or switch NFL_DATA_PROVIDER to espn.",
        }
    if isinstance(exc, UpstreamError):
        return {"kind": "upstream", "message": "Data is temporarily unavailable. Try again later."}
    return {"kind": "normalization", "message": "The data provider returned data we could not read."}


async def _load_section(label: str, loader: Awaitable[T], default: T) -> tuple[T, dict | None]:
    """Await one page section, turning provider failures into a section error."""
    try:
        return await loader, None
    except (ConfigurationError, UpstreamError, NormalizationError) as exc:
        logger.warning("Section %s failed: %s", label, exc)
        return default, _error_context(exc)


def _render(request: Request, template: str, context: dict[str, Any], status_code: int = 200):
    settings = get_settings()
    response = templates.TemplateResponse(
        request,
        template,
        {"provider": settings.provider, **context},
        status_code=status_code,
    )
    response.headers["Cache-Control"] = CACHE_CONTROL
    return response


def _season_type(value: int | None) -> SeasonType:
    return season_type_from(value, SeasonType.REGULAR)


def _week(value: int | None, season_type: SeasonType) -> int | None:
    if value is None:
        return None
    if value not in season_weeks(season_type):
        raise HTTPException(status_code=400, detail="week is out of range for the season type")
    return value


@app.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    season: int | None = None,
    week: int | None = None,
    season_type: int | None = None,
    service: NflDataService = Depends(get_service),
):
    kind = _season_type(season_type)
    scoreboard, error = await _load_section(
        "scores",
        service.scoreboard(season, _week(week, kind), kind),
        None,
    )
    games = sort_games_for_display(scoreboard.games) if scoreboard else []
    shown_type = scoreboard.season_type if scoreboard else kind
    return _render(
        request,
        "scores.html",
        {
            "games": games,
            "season": scoreboard.season if scoreboard else (season or service.current_season()),
            "season_type": shown_type,
            "week": scoreboard.week if scoreboard else (week or service.current_week()),
            "weeks": season_weeks(shown_type),
            "week_label": week_label,
            "season_types": list(SeasonType),
            "error": error,
            "active_page": "scores",
        },
    )


@app.get("/schedule", response_class=HTMLResponse)
async def schedule(
    request: Request,
    season: int | None = None,
    season_type: int | None = None,
    service: NflDataService = Depends(get_service),
):
    kind = _season_type(season_type)
    season = season or service.current_season()
    games, error = await _load_section("schedule", service.season_schedule(season, kind), [])
    return _render(
        request,
        "schedule.html",
        {
            "weeks": group_games_by_week(sort_games_by_kickoff(games)),
            "season": season,
            "season_type": kind,
            "week_label": week_label,
            "error": error,
            "active_page": "schedule",
        },
    )


def _standings_groups(standings, view: str) -> dict:
    if view == "overall":
        return {"NFL": rank_overall(standings)}
    if view == "conference":
        return rank_by_conference(standings)
    return group_standings_by_division(standings)


@app.get("/standings", response_class=HTMLResponse)
async def standings_page(
    request: Request,
    view: str = "division",
    season: int | None = None,
    service: NflDataService = Depends(get_service),
):
    if view not in STANDINGS_VIEWS:
        view = "division"
    season = season or service.current_season()
    standings, error = await _load_section("standings", service.standings(season), [])
    groups = _standings_groups(standings, view)
    return _render(
        request,
        "standings.html",
        {
            "groups": groups,
            "conferences": split_by_conference(groups) if view == "division" else None,
            "view": view,
            "views": STANDINGS_VIEWS,
            "season": season,
            "error": error,
            "active_page": "standings",
        },
    )


@app.get("/teams", response_class=HTMLResponse)
async def teams_page(request: Request, service: NflDataService = Depends(get_service)):
    teams, error = await _load_section("teams", service.teams(), [])
    grouped = group_teams_by_division(teams)
    return _render(
        request,
        "teams.html",
        {
            "divisions": grouped,
            "conferences": split_by_conference(grouped),
            "error": error,
            "active_page": "teams",
        },
    )


@app.get("/teams/{team_key}", response_class=HTMLResponse)
async def team_page(
    request: Request,
    team_key: str,
    service: NflDataService = Depends(get_service),
):
    team, error = await _load_section("team", service.team(team_key), None)
    if team is None and error is None:
        raise HTTPException(status_code=404, detail="Team not found")

    roster_groups = group_roster_by_position_group([])
    if team is not None:
        roster, error = await _load_section("roster", service.team_roster(team), [])
        roster_groups = group_roster_by_position_group(roster)
    return _render(
        request,
        "team.html",
        {
            "team": team,
            "team_key": team_key.upper(),
            "roster_groups": roster_groups,
            "error": error,
            "active_page": "teams",
        },
    )


def _capped_players(players, search, position, team, limit: int) -> tuple[list, bool]:
    """Filtered players plus whether more matches existed than *limit*."""
    matches = filter_players(players, search, position, team, limit=limit + 1)
    return matches[:limit], len(matches) > limit


@app.get("/players", response_class=HTMLResponse)
async def players_page(
    request: Request,
    search: str | None = None,
    position: str | None = None,
    team: str | None = None,
    service: NflDataService = Depends(get_service),
):
    players, error = await _load_section("players", service.players(), [])
    results, limited = _capped_players(players, search, position, team, PLAYER_RESULT_LIMIT)
    return _render(
        request,
        "players.html",
        {
            "players": results,
            "limited": limited,
            "facets": player_facets(players),
            "search": search or "",
            "position": position or "",
            "team": team or "",
            "error": error,
            "active_page": "players",
        },
    )


@app.get("/players/{player_id}", response_class=HTMLResponse)
async def player_page(
    request: Request,
    player_id: str,
    service: NflDataService = Depends(get_service),
):
    player, error = await _load_section("player", service.player(player_id), None)
    if player is None and error is None:
        raise HTTPException(status_code=404, detail="Player not found")
    return _render(
        request,
        "player.html",
        {"player": player, "error": error, "active_page": "players"},
    )


@app.get("/news", response_class=HTMLResponse)
async def news_page(request: Request, service: NflDataService = Depends(get_service)):
    articles, error = await _load_section("news", service.news(), [])
    return _render(
        request,
        "news.html",
        {"articles": articles, "error": error, "active_page": "news"},
    )


@app.get("/api/scores", response_model=ScoresResponse)
async def api_scores(
    season: int | None = None,
    week: int | None = None,
    season_type: int | None = None,
    service: NflDataService = Depends(get_service),
):
    kind = _season_type(season_type)
    scoreboard = await service.scoreboard(season, _week(week, kind), kind)
    games = sort_games_for_display(scoreboard.games)
    return ScoresResponse(
        provider=service.provider,
        season=scoreboard.season,
        season_type=int(scoreboard.season_type),
        week=scoreboard.week,
        games=games,
        count=len(games),
        message=None if games else "No games found for requested week.",
    )


@app.get("/api/standings", response_model=StandingsResponse)
async def api_standings(
    view: str = "division",
    season: int | None = None,
    service: NflDataService = Depends(get_service),
):
    if view not in STANDINGS_VIEWS:
        raise HTTPException(status_code=400, detail=f"view must be one of {', '.join(STANDINGS_VIEWS)}")
    season = season or service.current_season()
    standings = await service.standings(season)
    return StandingsResponse(
        provider=service.provider,
        season=season,
        view=view,
        groups=_standings_groups(standings, view),
        count=len(standings),
    )


@app.get("/api/players", response_model=PlayersResponse)
async def api_players(
    search: str | None = None,
    position: str | None = None,
    team: str | None = None,
    limit: int = PLAYER_RESULT_LIMIT,
    service: NflDataService = Depends(get_service),
):
    if limit < 1:
        raise HTTPException(status_code=400, detail="limit must be >= 1")
    players = await service.players()
    results, limited = _capped_players(players, search, position, team, limit)
    facets = player_facets(players)
    return PlayersResponse(
        provider=service.provider,
        players=results,
        count=len(results),
        limited=limited,
        positions=facets["positions"],
        teams=facets["teams"],
    )


@app.get("/api/logs")
def api_logs(limit: int = 100, level: str | None = None):
    handler = get_buffer_handler()
    return {"entries": handler.entries(limit=limit, min_level=level)}


@app.get("/ping")
def ping():
    return {"status": "ok"}
