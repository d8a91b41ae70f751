from __future__ import annotations

import unittest
from datetime import date
from unittest.mock import patch

import requests

from nfl_hub.errors import ConfigurationError, UpstreamError
from nfl_hub.ingestion.espn_client import EspnClient, normalize_dates
from nfl_hub.ingestion.http_client import ResponseCache, build_url
from nfl_hub.ingestion.sportsdata_client import API_KEY_HEADER, SportsDataClient, season_code
from nfl_hub.ingestion.schema import SeasonType


class _FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class ResponseCacheTests(unittest.TestCase):
    def test_entries_expire_after_ttl(self) -> None:
        clock = _Clock()
        cache = ResponseCache(ttl_seconds=60, clock=clock)
        cache.set("k", {"a": 1})

        clock.now += 59
        self.assertEqual({"a": 1}, cache.get("k"))

        clock.now += 1
        self.assertIsNone(cache.get("k"))
        self.assertEqual(0, len(cache))

    def test_expired_entries_are_purged_on_write(self) -> None:
        clock = _Clock()
        cache = ResponseCache(ttl_seconds=60, clock=clock)

        for player_id in range(1000):
            cache.set(f"stats/json/Player/{player_id}", {"PlayerID": player_id})
            clock.now += 61

        self.assertEqual(1, len(cache))

    def test_oldest_entry_is_dropped_when_full(self) -> None:
        cache = ResponseCache(ttl_seconds=60, clock=_Clock(), max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        cache.set("c", 3)

        self.assertEqual(2, len(cache))
        self.assertIsNone(cache.get("a"))
        self.assertEqual(2, cache.get("b"))
        self.assertEqual(3, cache.get("c"))


class BuildUrlTests(unittest.TestCase):
    def test_none_params_are_dropped_and_sorted(self) -> None:
        url = build_url("https://x.test/api/", "/scoreboard", {"week": 2, "dates": None, "seasontype": 2})

        self.assertEqual("https://x.test/api/scoreboard?seasontype=2&week=2", url)

    def test_absolute_endpoint_is_kept(self) -> None:
        url = build_url("https://x.test/api", "https://other.test/standings", {"season": 2024})

        self.assertEqual("https://other.test/standings?season=2024", url)


class EspnClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = EspnClient(
            "https://espn.test/nfl",
            standings_url="https://espn-web.test/standings",
            backoff_seconds=0,
        )

    def test_scoreboard_builds_query_and_caches(self) -> None:
        with patch(
            "nfl_hub.ingestion.http_client.requests.get",
            return_value=_FakeResponse(200, {"events": []}),
        ) as mocked:
            first = self.client.scoreboard(season_type=2, week=3)
            second = self.client.scoreboard(season_type=2, week=3)

        self.assertEqual({"events": []}, first)
        self.assertIs(first, second)
        mocked.assert_called_once()
        self.assertEqual("https://espn.test/nfl/scoreboard?seasontype=2&week=3", mocked.call_args.args[0])
        self.assertEqual(10.0, mocked.call_args.kwargs["timeout"])

    def test_standings_uses_absolute_url(self) -> None:
        with patch(
            "nfl_hub.ingestion.http_client.requests.get",
            return_value=_FakeResponse(200, {"children": []}),
        ) as mocked:
            self.client.standings(2024)

        self.assertEqual("https://espn-web.test/standings?season=2024", mocked.call_args.args[0])

    def test_non_2xx_raises_upstream_error_without_retry(self) -> None:
        with patch(
            "nfl_hub.ingestion.http_client.requests.get",
            return_value=_FakeResponse(404, {"message": "nope"}),
        ) as mocked:
            with self.assertRaises(UpstreamError) as ctx:
                self.client.teams()

        self.assertEqual(404, ctx.exception.status)
        self.assertEqual("https://espn.test/nfl/teams", ctx.exception.url)
        self.assertIn("status=404", str(ctx.exception))
        self.assertEqual(1, mocked.call_count)

    def test_server_error_is_retried(self) -> None:
        responses = [_FakeResponse(503, {}), _FakeResponse(200, {"sports": []})]
        with patch("nfl_hub.ingestion.http_client.requests.get", side_effect=responses) as mocked:
            payload = self.client.teams()

        self.assertEqual({"sports": []}, payload)
        self.assertEqual(2, mocked.call_count)

    def test_timeouts_exhaust_attempts_with_backoff(self) -> None:
        client = EspnClient("https://espn.test/nfl", max_attempts=3, backoff_seconds=0.5)
        with patch(
            "nfl_hub.ingestion.http_client.requests.get",
            side_effect=requests.Timeout("slow"),
        ) as mocked, patch("nfl_hub.ingestion.http_client.time.sleep") as mock_sleep:
            with self.assertRaises(UpstreamError) as ctx:
                client.news(5)

        self.assertIsNone(ctx.exception.status)
        self.assertEqual(3, mocked.call_count)
        self.assertEqual([0.5, 1.0], [call.args[0] for call in mock_sleep.call_args_list])
        self.assertIsInstance(ctx.exception.__cause__, requests.Timeout)

    def test_non_json_body_raises(self) -> None:
        with patch(
            "nfl_hub.ingestion.http_client.requests.get",
            return_value=_FakeResponse(200, ValueError("bad json"), text="<html>"),
        ):
            with self.assertRaises(UpstreamError) as ctx:
                self.client.teams()

        self.assertIn("non-JSON", str(ctx.exception))

    def test_failures_are_not_cached(self) -> None:
        responses = [_FakeResponse(404, {}), _FakeResponse(200, {"sports": []})]
        with patch("nfl_hub.ingestion.http_client.requests.get", side_effect=responses):
            with self.assertRaises(UpstreamError):
                self.client.teams()
            self.assertEqual({"sports": []}, self.client.teams())

    def test_normalize_dates(self) -> None:
        self.assertEqual("20240908", normalize_dates("2024-09-08"))
        self.assertEqual("20240904-20240911", normalize_dates("20240904-20240911"))
        self.assertEqual("2023", normalize_dates("2023"))
        self.assertIsNone(normalize_dates(""))
        with self.assertRaises(ValueError):
            normalize_dates("next week")


class SportsDataClientTests(unittest.TestCase):
    def test_missing_key_raises_configuration_error_on_fetch(self) -> None:
        client = SportsDataClient(None)

        with patch("nfl_hub.ingestion.http_client.requests.get") as mocked:
            with self.assertRaises(ConfigurationError):
                client.teams()

        mocked.assert_not_called()

    def test_key_header_and_season_code(self) -> None:
        client = SportsDataClient("secret", "https://sd.test/v3/nfl")

        with patch(
            "nfl_hub.ingestion.http_client.requests.get",
            return_value=_FakeResponse(200, []),
        ) as mocked:
            client.scores_by_week(2024, 3, SeasonType.POSTSEASON)

        self.assertEqual("https://sd.test/v3/nfl/scores/json/ScoresByWeek/2024POST/3", mocked.call_args.args[0])
        self.assertEqual("secret", mocked.call_args.kwargs["headers"][API_KEY_HEADER])

    def test_season_and_date_score_urls(self) -> None:
        client = SportsDataClient("secret", "https://sd.test/v3/nfl")

        with patch(
            "nfl_hub.ingestion.http_client.requests.get",
            return_value=_FakeResponse(200, []),
        ) as mocked:
            client.scores_by_season(2023, SeasonType.PRESEASON)
            client.scores_by_date(date(2024, 9, 8))

        self.assertEqual(
            [
                "https://sd.test/v3/nfl/scores/json/Scores/2023PRE",
                "https://sd.test/v3/nfl/scores/json/ScoresByDate/2024-09-08",
            ],
            [call.args[0] for call in mocked.call_args_list],
        )

    def test_season_code(self) -> None:
        self.assertEqual("2024", season_code(2024))
        self.assertEqual("2024PRE", season_code(2024, 1))
        self.assertEqual("2024", season_code(2024, 9))


if __name__ == "__main__":
    unittest.main()
