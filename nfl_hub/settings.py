from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

PROVIDERS = ("espn", "sportsdata")

DEFAULT_ESPN_BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"
DEFAULT_ESPN_STANDINGS_URL = "https://site.web.api.espn.com/apis/v2/sports/football/nfl/standings"
DEFAULT_SPORTSDATA_BASE_URL = "https://api.sportsdata.io/v3/nfl"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_CACHE_TTL_SECONDS = 60
DEFAULT_DISPLAY_TIMEZONE = "America/New_York"
DEFAULT_NEWS_LIMIT = 20
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    provider: str = "espn"
    sportsdata_api_key: str | None = None
    espn_base_url: str = DEFAULT_ESPN_BASE_URL
    espn_standings_url: str = DEFAULT_ESPN_STANDINGS_URL
    sportsdata_base_url: str = DEFAULT_SPORTSDATA_BASE_URL
    upstream_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    upstream_max_attempts: int = DEFAULT_MAX_ATTEMPTS
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    display_timezone: str = DEFAULT_DISPLAY_TIMEZONE
    news_limit: int = DEFAULT_NEWS_LIMIT
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.display_timezone)


def _env_str(env: Mapping[str, str], name: str, default: str) -> str:
    value = (env.get(name) or "").strip()
    return value or default


def _env_positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s=%s, using default %s", name, raw, default)
        return default
    if value < 1:
        logger.warning("Invalid %s=%s, using default %s", name, raw, default)
        return default
    return value


def _env_positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s=%s, using default %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Invalid %s=%s, using default %s", name, raw, default)
        return default
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment (or the given mapping)."""

    if env is None:
        env = os.environ

    provider = _env_str(env, "NFL_DATA_PROVIDER", "espn").lower()
    if provider not in PROVIDERS:
        logger.warning("Unknown NFL_DATA_PROVIDER=%s, using espn", provider)
        provider = "espn"

    display_timezone = _env_str(env, "DISPLAY_TIMEZONE", DEFAULT_DISPLAY_TIMEZONE)
    try:
        ZoneInfo(display_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Unknown DISPLAY_TIMEZONE=%s, using %s",
            display_timezone,
            DEFAULT_DISPLAY_TIMEZONE,
        )
        display_timezone = DEFAULT_DISPLAY_TIMEZONE

    log_level = _env_str(env, "LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        logger.warning("Unknown LOG_LEVEL=%s, using %s", log_level, DEFAULT_LOG_LEVEL)
        log_level = DEFAULT_LOG_LEVEL

    return Settings(
        provider=provider,
        sportsdata_api_key=(env.get("SPORTSDATA_API_KEY") or "").strip() or None,
        espn_base_url=_env_str(env, "ESPN_BASE_URL", DEFAULT_ESPN_BASE_URL).rstrip("/"),
        espn_standings_url=_env_str(env, "ESPN_STANDINGS_URL", DEFAULT_ESPN_STANDINGS_URL),
        sportsdata_base_url=_env_str(
            env, "SPORTSDATA_BASE_URL", DEFAULT_SPORTSDATA_BASE_URL
        ).rstrip("/"),
        upstream_timeout_seconds=_env_positive_float(
            env, "UPSTREAM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
        ),
        upstream_max_attempts=_env_positive_int(
            env, "UPSTREAM_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS
        ),
        cache_ttl_seconds=_env_positive_int(env, "CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
        display_timezone=display_timezone,
        news_limit=_env_positive_int(env, "NEWS_LIMIT", DEFAULT_NEWS_LIMIT),
        log_level=log_level,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
