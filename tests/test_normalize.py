from __future__ import annotations

import unittest

from nfl_hub.errors import NormalizationError
from nfl_hub.ingestion import normalize
from nfl_hub.ingestion.divisions import NFL_DIVISIONS, DivisionInfo
from nfl_hub.ingestion.schema import EspnRecord, SeasonType, SportsDataRecord


class DispatchTests(unittest.TestCase):
    def test_same_team_from_either_provider(self) -> None:
        espn = normalize.to_team(EspnRecord({"team": {"id": "9", "abbreviation": "GB", "location": "Green Bay"}}))
        sportsdata = normalize.to_team(SportsDataRecord({"Key": "GB", "TeamID": 12, "City": "Green Bay"}))

        self.assertEqual((espn.key, espn.division_label), (sportsdata.key, sportsdata.division_label))
        self.assertEqual("NFC North", espn.division_label)

    def test_injected_division_table_is_used(self) -> None:
        table = dict(NFL_DIVISIONS)
        table["GB"] = DivisionInfo("NFC", "Central")

        team = normalize.to_team(SportsDataRecord({"Key": "GB"}), table)

        self.assertEqual("NFC Central", team.division_label)

    def test_sportsdata_scoreboard_uses_requested_week(self) -> None:
        record = SportsDataRecord([{"GameKey": "1", "Week": 4}, {"GameKey": "2", "Week": 4}])

        board = normalize.parse_scoreboard(record, season=2024, season_type=SeasonType.POSTSEASON, week=4)

        self.assertEqual((2024, SeasonType.POSTSEASON, 4), (board.season, board.season_type, board.week))
        self.assertEqual(["1", "2"], [game.game_key for game in board.games])

    def test_roster_player_group_from_either_provider(self) -> None:
        espn = normalize.to_roster_player(EspnRecord({"id": "1"}), "defense")
        sportsdata = normalize.to_roster_player(SportsDataRecord({"PlayerID": 1, "PositionCategory": "DEF"}))

        self.assertEqual("defense", espn.position_group)
        self.assertEqual("defense", sportsdata.position_group)

    def test_shape_errors_surface_as_normalization_errors(self) -> None:
        with self.assertRaises(NormalizationError):
            normalize.to_game(EspnRecord(["not", "an", "event"]))
        with self.assertRaises(NormalizationError):
            normalize.parse_news(SportsDataRecord({"Title": "not a list"}))

    def test_unknown_record_type_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            normalize.to_game({"GameKey": "1"})


if __name__ == "__main__":
    unittest.main()
