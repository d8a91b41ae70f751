"""SportsDataIO HTTP client (keyed commercial API)."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from nfl_hub.errors import ConfigurationError
from nfl_hub.ingestion.http_client import ResponseCache, UpstreamClient
from nfl_hub.ingestion.schema import SeasonType
from nfl_hub.settings import DEFAULT_SPORTSDATA_BASE_URL, Settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "Ocp-Apim-Subscription-Key"

_SEASON_SUFFIXES = {
    SeasonType.PRESEASON: "PRE",
    SeasonType.REGULAR: "",
    SeasonType.POSTSEASON: "POST",
}


def season_code(season: int, season_type: SeasonType | int = SeasonType.REGULAR) -> str:
    """Season path segment: 2024, 2024PRE or 2024POST."""
    try:
        suffix = _SEASON_SUFFIXES[SeasonType(season_type)]
    except ValueError:
        suffix = ""
    return f"{season}{suffix}"


class SportsDataClient(UpstreamClient):
    """Keyed SportsDataIO endpoints.

    A missing key raises ``ConfigurationError`` on fetch rather than at
    construction, so pages can still render a static message.
    """

    provider = "sportsdata"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_SPORTSDATA_BASE_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, **kwargs)
        self.api_key = api_key

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cache: ResponseCache | None = None,
    ) -> "SportsDataClient":
        return cls(
            settings.sportsdata_api_key,
            settings.sportsdata_base_url,
            timeout_seconds=settings.upstream_timeout_seconds,
            max_attempts=settings.upstream_max_attempts,
            cache=cache if cache is not None else ResponseCache(settings.cache_ttl_seconds),
        )

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ConfigurationError("Missing SportsDataIO API key (SPORTSDATA_API_KEY)")
        headers = super()._headers()
        headers[API_KEY_HEADER] = self.api_key
        return headers

    def teams(self) -> Any:
        return self.fetch("scores/json/Teams")

    def players(self) -> Any:
        return self.fetch("stats/json/Players")

    def players_by_team(self, team_key: str) -> Any:
        return self.fetch(f"stats/json/Players/{team_key}")

    def player(self, player_id: int | str) -> Any:
        return self.fetch(f"stats/json/Player/{player_id}")

    def scores_by_week(
        self,
        season: int,
        week: int,
        season_type: SeasonType | int = SeasonType.REGULAR,
    ) -> Any:
        return self.fetch(f"scores/json/ScoresByWeek/{season_code(season, season_type)}/{week}")

    def scores_by_season(
        self,
        season: int,
        season_type: SeasonType | int = SeasonType.REGULAR,
    ) -> Any:
        return self.fetch(f"scores/json/Scores/{season_code(season, season_type)}")

    def scores_by_date(self, game_date: date) -> Any:
        return self.fetch(f"scores/json/ScoresByDate/{game_date.isoformat()}")

    def schedules(
        self,
        season: int,
        season_type: SeasonType | int = SeasonType.REGULAR,
    ) -> Any:
        return self.fetch(f"scores/json/Schedules/{season_code(season, season_type)}")

    def standings(
        self,
        season: int,
        season_type: SeasonType | int = SeasonType.REGULAR,
    ) -> Any:
        return self.fetch(f"scores/json/Standings/{season_code(season, season_type)}")

    def news(self) -> Any:
        return self.fetch("scores/json/News")
