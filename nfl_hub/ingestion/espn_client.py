"""ESPN HTTP client for the public NFL site API."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

from nfl_hub.ingestion.http_client import ResponseCache, UpstreamClient
from nfl_hub.settings import DEFAULT_ESPN_BASE_URL, DEFAULT_ESPN_STANDINGS_URL, Settings

logger = logging.getLogger(__name__)


def normalize_dates(value: str | date | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    cleaned = value.strip()
    if not cleaned:
        return None
    if cleaned.lower() == "today":
        return date.today().strftime("%Y%m%d")
    if re.fullmatch(r"\d{4}", cleaned):
        # A bare year selects the whole season
        return cleaned
    if re.fullmatch(r"\d{8}", cleaned):
        return cleaned
    if re.fullmatch(r"\d{8}-\d{8}", cleaned):
        return cleaned
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", cleaned):
        return cleaned.replace("-", "")
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}-\d{4}-\d{2}-\d{2}", cleaned):
        parts = cleaned.split("-")
        start = "".join(parts[:3])
        end = "".join(parts[3:])
        return f"{start}-{end}"
    raise ValueError("dates must be YYYY, YYYYMMDD or YYYYMMDD-YYYYMMDD")


class EspnClient(UpstreamClient):
    """Public ESPN endpoints; no credential is needed."""

    provider = "espn"

    def __init__(
        self,
        base_url: str = DEFAULT_ESPN_BASE_URL,
        *,
        standings_url: str = DEFAULT_ESPN_STANDINGS_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, **kwargs)
        self.standings_url = standings_url

    @classmethod
    def from_settings(cls, settings: Settings, cache: ResponseCache | None = None) -> "EspnClient":
        return cls(
            settings.espn_base_url,
            standings_url=settings.espn_standings_url,
            timeout_seconds=settings.upstream_timeout_seconds,
            max_attempts=settings.upstream_max_attempts,
            cache=cache if cache is not None else ResponseCache(settings.cache_ttl_seconds),
        )

    def scoreboard(
        self,
        season_type: int | None = None,
        week: int | None = None,
        dates: str | date | None = None,
    ) -> Any:
        """Without arguments ESPN answers with the current week."""
        return self.fetch(
            "scoreboard",
            {
                "seasontype": season_type,
                "week": week,
                "dates": normalize_dates(dates),
            },
        )

    def teams(self) -> Any:
        return self.fetch("teams")

    def team_roster(self, team_id: int | str) -> Any:
        return self.fetch(f"teams/{team_id}/roster")

    def standings(self, season: int | None = None) -> Any:
        return self.fetch(self.standings_url, {"season": season})

    def news(self, limit: int = 20) -> Any:
        return self.fetch("news", {"limit": limit})
