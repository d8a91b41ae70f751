from __future__ import annotations

import unittest
from datetime import datetime
from zoneinfo import ZoneInfo

from nfl_hub.errors import NormalizationError
from nfl_hub.ingestion.schema import SeasonType
from nfl_hub.ingestion.sportsdata_parser import (
    parse_article,
    parse_game,
    parse_games,
    parse_player,
    parse_standing,
    parse_team,
)


def _game(**overrides) -> dict:
    game = {
        "GameKey": "202410101",
        "SeasonType": 1,
        "Season": 2024,
        "Week": 1,
        "Date": "2024-09-05T20:20:00",
        "AwayTeam": "BAL",
        "HomeTeam": "KC",
        "AwayScore": 20,
        "HomeScore": 27,
        "AwayScoreQuarter1": 7,
        "AwayScoreQuarter2": 3,
        "AwayScoreQuarter3": 0,
        "AwayScoreQuarter4": 10,
        "AwayScoreOvertime": None,
        "HomeScoreQuarter1": 7,
        "HomeScoreQuarter2": 6,
        "HomeScoreQuarter3": 7,
        "HomeScoreQuarter4": 7,
        "HomeScoreOvertime": None,
        "Channel": "NBC",
        "PointSpread": -3.0,
        "OverUnder": 46.5,
        "HasStarted": True,
        "IsInProgress": False,
        "IsOver": True,
        "Closed": True,
        "Status": "Final",
        "StadiumID": 12,
    }
    game.update(overrides)
    return game


class SportsDataGameTests(unittest.TestCase):
    def test_final_game(self) -> None:
        game = parse_game(_game())

        self.assertEqual("sportsdata", game.provider)
        self.assertEqual(SeasonType.PRESEASON, game.season_type)
        self.assertEqual((27, 20), (game.home_score, game.away_score))
        self.assertEqual(27, game.home_line_score.total())
        self.assertIsNone(game.home_line_score.overtime)
        self.assertTrue(game.is_over)
        self.assertFalse(game.is_in_progress)
        self.assertFalse(game.is_overtime)
        self.assertEqual(-3.0, game.point_spread)
        self.assertEqual(46.5, game.over_under)
        self.assertEqual("https://a.espncdn.com/i/teamlogos/nfl/500/kc.png", game.home_team_logo)

    def test_naive_date_is_read_as_eastern(self) -> None:
        game = parse_game(_game())

        expected = datetime(2024, 9, 5, 20, 20, tzinfo=ZoneInfo("America/New_York"))
        self.assertEqual(expected, game.kickoff)

    def test_in_progress_game_keeps_situation(self) -> None:
        game = parse_game(
            _game(
                IsOver=False,
                Closed=False,
                IsInProgress=True,
                Status="InProgress",
                Quarter="2",
                TimeRemaining="04:12",
                Possession="KC",
                Down=2,
                Distance=5,
                YardLine=18,
                YardLineTerritory="BAL",
                RedZone=True,
                DownAndDistance="2nd & 5",
            )
        )

        self.assertEqual("in_progress", game.state)
        self.assertEqual("2", game.quarter)
        self.assertEqual("04:12", game.time_remaining)
        self.assertEqual("KC", game.possession)
        self.assertTrue(game.red_zone)
        self.assertEqual("BAL", game.yard_line_territory)

    def test_scheduled_game_scores_are_none(self) -> None:
        game = parse_game(
            _game(
                HasStarted=False,
                IsOver=False,
                Closed=False,
                Status="Scheduled",
                AwayScore=None,
                HomeScore=None,
            )
        )

        self.assertEqual("scheduled", game.state)
        self.assertIsNone(game.home_score)
        self.assertIsNone(game.home_line_score.quarter1)

    def test_status_string_is_used_when_flags_are_missing(self) -> None:
        game = parse_game({"GameKey": "1", "Status": "F/OT", "HomeScoreOvertime": 3})

        self.assertTrue(game.is_over)
        self.assertTrue(game.is_overtime)

    def test_minimal_game_uses_defaults(self) -> None:
        game = parse_game({"GameKey": "1"})

        self.assertEqual("", game.home_team)
        self.assertEqual("", game.home_team_logo)
        self.assertIsNone(game.kickoff)
        self.assertIsNone(game.home_score)
        self.assertIsNone(game.channel)
        self.assertIsNone(game.point_spread)
        self.assertEqual(0, game.season)
        self.assertFalse(game.has_started)

    def test_parse_games_skips_bye_weeks(self) -> None:
        games = parse_games(
            [
                _game(GameKey="1"),
                {"GameKey": "2", "HomeTeam": "BYE", "AwayTeam": "KC", "Week": 6},
                _game(GameKey="1"),
            ]
        )

        self.assertEqual(["1"], [game.game_key for game in games])

    def test_missing_game_key_raises(self) -> None:
        with self.assertRaises(NormalizationError) as ctx:
            parse_game({"HomeTeam": "KC"})
        self.assertEqual("GameKey", ctx.exception.field)

    def test_non_list_payload_raises(self) -> None:
        with self.assertRaises(NormalizationError):
            parse_games({"GameKey": "1"})


class SportsDataTeamTests(unittest.TestCase):
    def test_team_fields(self) -> None:
        team = parse_team(
            {
                "TeamID": 16,
                "Key": "KC",
                "City": "Kansas City",
                "Name": "Chiefs",
                "Conference": "AFC",
                "Division": "West",
                "FullName": "Kansas City Chiefs",
                "ByeWeek": 6,
                "HeadCoach": "Andy Reid",
                "PrimaryColor": "E31837",
                "WikipediaLogoUrl": "https://example.test/kc.svg",
            }
        )

        self.assertEqual(16, team.team_id)
        self.assertEqual("Andy Reid", team.head_coach)
        self.assertEqual(6, team.bye_week)
        self.assertEqual("https://example.test/kc.svg", team.logo_url)

    def test_missing_conference_is_backfilled(self) -> None:
        team = parse_team({"Key": "GB", "City": "Green Bay", "Name": "Packers"})

        self.assertEqual("NFC", team.conference)
        self.assertEqual("North", team.division)
        self.assertEqual("Green Bay Packers", team.full_name)
        self.assertTrue(team.logo_url.endswith("/gb.png"))

    def test_unknown_team_keeps_empty_division(self) -> None:
        team = parse_team({"Key": "XYZ"})

        self.assertEqual("", team.conference)
        self.assertEqual("", team.division_label)

    def test_missing_key_raises(self) -> None:
        with self.assertRaises(NormalizationError) as ctx:
            parse_team({"City": "Nowhere"})
        self.assertEqual("Key", ctx.exception.field)


class SportsDataStandingTests(unittest.TestCase):
    def test_flat_fields(self) -> None:
        row = parse_standing(
            {
                "Season": 2024,
                "SeasonType": 2,
                "Conference": "AFC",
                "Division": "West",
                "Team": "KC",
                "Name": "Kansas City Chiefs",
                "Wins": 15,
                "Losses": 2,
                "Ties": 0,
                "Percentage": 0.882,
                "PointsFor": 385,
                "PointsAgainst": 326,
                "NetPoints": 59,
                "DivisionWins": 5,
                "Streak": 1,
            }
        )

        self.assertEqual(15, row.wins)
        self.assertEqual(59, row.net_points)
        self.assertEqual(5, row.division_wins)
        self.assertEqual(17, row.games_played)

    def test_minimal_standing_derives_percentage_and_net_points(self) -> None:
        row = parse_standing({"Team": "DAL", "Wins": 1, "Ties": 1, "PointsFor": 30, "PointsAgainst": 40})

        self.assertEqual("NFC East", row.division_label)
        self.assertAlmostEqual(0.75, row.percentage)
        self.assertEqual(-10, row.net_points)
        self.assertEqual(0, row.conference_rank)

    def test_missing_team_raises(self) -> None:
        with self.assertRaises(NormalizationError):
            parse_standing({"Wins": 3})


class SportsDataPlayerTests(unittest.TestCase):
    def test_position_category_maps_to_group(self) -> None:
        for category, expected in (("OFF", "offense"), ("DEF", "defense"), ("ST", "specialTeams"), ("", "other")):
            with self.subTest(category=category):
                player = parse_player({"PlayerID": 1, "PositionCategory": category})
                self.assertEqual(expected, player.position_group)

    def test_player_fields(self) -> None:
        player = parse_player(
            {
                "PlayerID": 18890,
                "Team": "KC",
                "Number": 15,
                "FirstName": "Patrick",
                "LastName": "Mahomes",
                "Position": "QB",
                "PositionCategory": "OFF",
                "Status": "Active",
                "Height": "6'2\"",
                "Weight": 225,
                "BirthDate": "1995-09-17T00:00:00",
                "College": "Texas Tech",
                "Experience": 8,
                "Active": True,
            }
        )

        self.assertEqual("18890", player.player_id)
        self.assertEqual("15", player.jersey)
        self.assertEqual("Patrick Mahomes", player.full_name)
        self.assertEqual("225 lbs", player.weight)
        self.assertEqual(17, player.birth_date.day)
        self.assertTrue(player.active)

    def test_inactive_status_without_active_flag(self) -> None:
        player = parse_player({"PlayerID": 2, "Status": "Injured Reserve"})

        self.assertFalse(player.active)

    def test_minimal_player_uses_defaults(self) -> None:
        player = parse_player({"PlayerID": 3})

        self.assertEqual("", player.team)
        self.assertEqual("", player.weight)
        self.assertIsNone(player.age)
        self.assertEqual("Active", player.status)
        self.assertTrue(player.active)


class SportsDataNewsTests(unittest.TestCase):
    def test_article_categories_from_team_and_comma_list(self) -> None:
        article = parse_article(
            {
                "NewsID": 7,
                "Title": "Injury update",
                "Content": "Details",
                "Updated": "2024-09-05T10:00:00",
                "Author": "Staff",
                "Url": "https://example.test/7",
                "Categories": "Injuries, Top Headlines",
                "Team": "KC",
            }
        )

        self.assertEqual("7", article.article_id)
        self.assertEqual(
            [("team", "KC"), ("topic", "Injuries"), ("topic", "Top Headlines")],
            [(c.type, c.description) for c in article.categories],
        )
        self.assertEqual(ZoneInfo("America/New_York"), article.published.tzinfo)

    def test_missing_title_raises(self) -> None:
        with self.assertRaises(NormalizationError) as ctx:
            parse_article({"NewsID": 1})
        self.assertEqual("Title", ctx.exception.field)


if __name__ == "__main__":
    unittest.main()
