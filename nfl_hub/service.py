"""Provider-agnostic data access for the pages.

Each public coroutine fetches through the configured provider's client,
normalizes the payload and returns canonical entities. Blocking HTTP calls
run in worker threads; multi-slice reads (a whole season, every roster) are
gathered in parallel and a failing slice degrades to an empty list.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Callable, Optional, TypeVar

from nfl_hub.errors import NormalizationError, UpstreamError
from nfl_hub.formatting import current_season, current_week, espn_week_dates, season_weeks
from nfl_hub.ingestion import normalize
from nfl_hub.ingestion.espn_client import EspnClient
from nfl_hub.ingestion.http_client import ResponseCache
from nfl_hub.ingestion.schema import (
    EspnRecord,
    Game,
    NewsArticle,
    RosterPlayer,
    Scoreboard,
    SeasonType,
    SportsDataRecord,
    Standing,
    Team,
)
from nfl_hub.ingestion.sportsdata_client import SportsDataClient
from nfl_hub.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NflDataService:
    def __init__(
        self,
        settings: Settings,
        espn: EspnClient | None = None,
        sportsdata: SportsDataClient | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings
        cache = ResponseCache(settings.cache_ttl_seconds)
        self.espn = espn or EspnClient.from_settings(settings, cache)
        self.sportsdata = sportsdata or SportsDataClient.from_settings(settings, cache)
        self._today = today

    @property
    def provider(self) -> str:
        return self.settings.provider

    @property
    def uses_espn(self) -> bool:
        return self.provider == "espn"

    def current_season(self) -> int:
        return current_season(self.provider, self._today())

    def current_week(self) -> int:
        return current_week(self._today())

    def _wrap(self, payload: Any) -> EspnRecord | SportsDataRecord:
        if self.uses_espn:
            return EspnRecord(payload)
        return SportsDataRecord(payload)

    async def _load(self, fetch: Callable[[], Any], parse: Callable[[Any], T]) -> T:
        payload = await asyncio.to_thread(fetch)
        return parse(self._wrap(payload))

    async def _degrade(self, label: str, load: Callable[[], Any], default: T) -> T:
        """Run one slice of a parallel read; expected failures become ``default``."""
        try:
            return await load()
        except (UpstreamError, NormalizationError) as exc:
            logger.warning("%s slice %s failed: %s", self.provider, label, exc)
            return default

    async def scoreboard(
        self,
        season: Optional[int] = None,
        week: Optional[int] = None,
        season_type: SeasonType = SeasonType.REGULAR,
    ) -> Scoreboard:
        """Games of one week; with no week given, the provider's current week."""

        if self.uses_espn:
            if week is None:
                return await self._load(self.espn.scoreboard, normalize.parse_scoreboard)
            past_season = bool(season) and season != self.current_season()
            # Without dates ESPN answers for the current season only
            if past_season and season_type == SeasonType.REGULAR:
                fetch = lambda: self.espn.scoreboard(dates=espn_week_dates(season, week))
            elif past_season:
                fetch = lambda: self.espn.scoreboard(
                    season_type=int(season_type), week=week, dates=str(season)
                )
            else:
                fetch = lambda: self.espn.scoreboard(season_type=int(season_type), week=week)
            board = await self._load(fetch, normalize.parse_scoreboard)
            season = season or board.season or self.current_season()
            # ESPN can answer with the neighbouring week's events; keep the requested one
            games = tuple(
                game
                for game in board.games
                if game.week == week
                and game.season_type == season_type
                and (not game.season or game.season == season)
            )
            return Scoreboard(season=season, season_type=season_type, week=week, games=games)

        season = season or self.current_season()
        week = week or min(self.current_week(), season_weeks(season_type)[-1])
        return await self._load(
            lambda: self.sportsdata.scores_by_week(season, week, season_type),
            lambda record: normalize.parse_scoreboard(
                record, season=season, season_type=season_type, week=week
            ),
        )

    async def season_schedule(
        self,
        season: Optional[int] = None,
        season_type: SeasonType = SeasonType.REGULAR,
    ) -> list[Game]:
        season = season or self.current_season()
        if not self.uses_espn:
            return await self._load(
                lambda: self.sportsdata.schedules(season, season_type),
                lambda record: list(normalize.parse_scoreboard(record).games),
            )

        async def load_week(week: int) -> list[Game]:
            board = await self.scoreboard(season, week, season_type)
            return list(board.games)

        weeks = season_weeks(season_type)
        slices = await asyncio.gather(
            *(self._degrade(f"week {week}", lambda week=week: load_week(week), []) for week in weeks)
        )
        return [game for games in slices for game in games]

    async def teams(self) -> list[Team]:
        if self.uses_espn:
            return await self._load(self.espn.teams, normalize.parse_teams)
        return await self._load(self.sportsdata.teams, normalize.parse_teams)

    async def team(self, key: str) -> Team | None:
        key = key.upper()
        for team in await self.teams():
            if team.key == key:
                return team
        return None

    async def team_roster(self, team: Team) -> list[RosterPlayer]:
        if self.uses_espn:
            return await self._load(
                lambda: self.espn.team_roster(team.team_id),
                lambda record: normalize.to_roster(record, team.key),
            )
        return await self._load(
            lambda: self.sportsdata.players_by_team(team.key),
            normalize.to_roster,
        )

    async def standings(
        self,
        season: Optional[int] = None,
        season_type: SeasonType = SeasonType.REGULAR,
    ) -> list[Standing]:
        season = season or self.current_season()
        if self.uses_espn:
            return await self._load(
                lambda: self.espn.standings(season),
                lambda record: normalize.parse_standings(record, season=season),
            )
        return await self._load(
            lambda: self.sportsdata.standings(season, season_type),
            lambda record: normalize.parse_standings(record, season=season),
        )

    async def players(self) -> list[RosterPlayer]:
        """League-wide player index.

        ESPN has no such endpoint, so every team roster is gathered instead;
        a roster that fails to load is left out.
        """

        if not self.uses_espn:
            return await self._load(self.sportsdata.players, normalize.to_roster)

        teams = await self.teams()
        rosters = await asyncio.gather(
            *(
                self._degrade(f"roster {team.key}", lambda team=team: self.team_roster(team), [])
                for team in teams
            )
        )
        return [player for roster in rosters for player in roster]

    async def player(self, player_id: str) -> RosterPlayer | None:
        if not self.uses_espn:
            return await self._load(
                lambda: self.sportsdata.player(player_id),
                lambda record: None if record.payload is None else normalize.to_roster_player(record),
            )
        for player in await self.players():
            if player.player_id == player_id:
                return player
        return None

    async def news(self, limit: Optional[int] = None) -> list[NewsArticle]:
        limit = limit or self.settings.news_limit
        if self.uses_espn:
            return await self._load(lambda: self.espn.news(limit), normalize.parse_news)
        articles = await self._load(self.sportsdata.news, normalize.parse_news)
        return articles[:limit]
