from __future__ import annotations

import unittest

from nfl_hub.settings import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_DISPLAY_TIMEZONE,
    DEFAULT_ESPN_BASE_URL,
    load_settings,
)


class LoadSettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = load_settings({})

        self.assertEqual("espn", settings.provider)
        self.assertIsNone(settings.sportsdata_api_key)
        self.assertEqual(DEFAULT_ESPN_BASE_URL, settings.espn_base_url)
        self.assertEqual(DEFAULT_CACHE_TTL_SECONDS, settings.cache_ttl_seconds)
        self.assertEqual("America/New_York", str(settings.tz))

    def test_sportsdata_provider_with_key(self) -> None:
        settings = load_settings(
            {
                "NFL_DATA_PROVIDER": " SportsData ",
                "SPORTSDATA_API_KEY": " abc123 ",
                "SPORTSDATA_BASE_URL": "https://sd.test/v3/nfl/",
            }
        )

        self.assertEqual("sportsdata", settings.provider)
        self.assertEqual("abc123", settings.sportsdata_api_key)
        self.assertEqual("https://sd.test/v3/nfl", settings.sportsdata_base_url)

    def test_unknown_provider_falls_back_to_espn(self) -> None:
        with self.assertLogs("nfl_hub.settings", level="WARNING"):
            settings = load_settings({"NFL_DATA_PROVIDER": "yahoo"})

        self.assertEqual("espn", settings.provider)

    def test_invalid_numbers_use_defaults(self) -> None:
        with self.assertLogs("nfl_hub.settings", level="WARNING") as logs:
            settings = load_settings(
                {
                    "CACHE_TTL_SECONDS": "soon",
                    "UPSTREAM_MAX_ATTEMPTS": "0",
                    "UPSTREAM_TIMEOUT_SECONDS": "-1",
                }
            )

        self.assertEqual(3, len(logs.output))
        self.assertEqual(DEFAULT_CACHE_TTL_SECONDS, settings.cache_ttl_seconds)
        self.assertEqual(2, settings.upstream_max_attempts)
        self.assertEqual(10.0, settings.upstream_timeout_seconds)

    def test_valid_overrides(self) -> None:
        settings = load_settings(
            {
                "CACHE_TTL_SECONDS": "120",
                "NEWS_LIMIT": "5",
                "DISPLAY_TIMEZONE": "America/Chicago",
                "LOG_LEVEL": "debug",
            }
        )

        self.assertEqual(120, settings.cache_ttl_seconds)
        self.assertEqual(5, settings.news_limit)
        self.assertEqual("America/Chicago", settings.display_timezone)
        self.assertEqual("DEBUG", settings.log_level)

    def test_unknown_timezone_and_level_fall_back(self) -> None:
        with self.assertLogs("nfl_hub.settings", level="WARNING"):
            settings = load_settings({"DISPLAY_TIMEZONE": "Mars/Olympus", "LOG_LEVEL": "LOUD"})

        self.assertEqual(DEFAULT_DISPLAY_TIMEZONE, settings.display_timezone)
        self.assertEqual("INFO", settings.log_level)


if __name__ == "__main__":
    unittest.main()
