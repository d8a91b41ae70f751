"""Grouping, sorting and filtering of canonical entities for the pages.

Every function here is pure: inputs are never mutated and empty input gives
empty (or empty-valued) output.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional

from nfl_hub.ingestion.divisions import CONFERENCES
from nfl_hub.ingestion.schema import POSITION_GROUPS, Game, RosterPlayer, Standing, Team

POSITION_GROUP_LABELS = {
    "offense": "Offense",
    "defense": "Defense",
    "specialTeams": "Special Teams",
    "other": "Other",
}

_MAX_KICKOFF = datetime.max.replace(tzinfo=timezone.utc)


def _kickoff_key(game: Game) -> datetime:
    return game.kickoff if game.kickoff is not None else _MAX_KICKOFF


def group_games_by_week(games: Iterable[Game]) -> dict[int, list[Game]]:
    """Partition games by week; keys ascend, buckets keep input order."""
    grouped: dict[int, list[Game]] = defaultdict(list)
    for game in games:
        grouped[game.week].append(game)
    return {week: grouped[week] for week in sorted(grouped)}


def sort_games_by_kickoff(games: Iterable[Game]) -> list[Game]:
    return sorted(games, key=_kickoff_key)


def sort_games_for_display(games: Iterable[Game]) -> list[Game]:
    """In-progress games first, then ascending kickoff; unknown kickoff last."""
    return sorted(games, key=lambda game: (not game.is_in_progress, _kickoff_key(game)))


def _division_order(standing: Standing) -> tuple:
    return (-standing.wins, -standing.percentage, -standing.net_points)


def _ranking_order(standing: Standing) -> tuple:
    return (-standing.percentage, -standing.wins, -standing.net_points)


def group_standings_by_division(standings: Iterable[Standing]) -> dict[str, list[Standing]]:
    """Group by "<Conference> <Division>", best record first.

    Ties on wins fall back to percentage, then net points. The official NFL
    tiebreakers (head-to-head, strength of schedule) are not applied.
    """

    grouped: dict[str, list[Standing]] = defaultdict(list)
    for standing in standings:
        grouped[standing.division_label].append(standing)
    return {label: sorted(rows, key=_division_order) for label, rows in sorted(grouped.items())}


def rank_overall(standings: Iterable[Standing]) -> list[Standing]:
    return sorted(standings, key=_ranking_order)


def rank_by_conference(standings: Iterable[Standing]) -> dict[str, list[Standing]]:
    grouped: dict[str, list[Standing]] = {conference: [] for conference in CONFERENCES}
    for standing in standings:
        grouped.setdefault(standing.conference or "Other", []).append(standing)
    return {
        conference: sorted(rows, key=_ranking_order)
        for conference, rows in grouped.items()
        if rows
    }


def split_by_conference(grouped: dict[str, list]) -> dict[str, list[str]]:
    """Split group labels such as "AFC East" into sorted per-conference lists."""
    return {
        conference: sorted(label for label in grouped if label.startswith(conference))
        for conference in CONFERENCES
    }


def group_roster_by_position_group(
    players: Iterable[RosterPlayer],
) -> dict[str, list[RosterPlayer]]:
    grouped: dict[str, list[RosterPlayer]] = {group: [] for group in POSITION_GROUPS}
    for player in players:
        group = player.position_group if player.position_group in grouped else "other"
        grouped[group].append(player)
    return grouped


def group_teams_by_division(teams: Iterable[Team]) -> dict[str, list[Team]]:
    grouped: dict[str, list[Team]] = defaultdict(list)
    for team in teams:
        grouped[team.division_label].append(team)
    return {
        label: sorted(rows, key=lambda team: team.city)
        for label, rows in sorted(grouped.items())
    }


def _player_name(player: RosterPlayer) -> str:
    return (player.full_name or f"{player.first_name} {player.last_name}").lower()


def filter_players(
    players: Iterable[RosterPlayer],
    search: Optional[str] = None,
    position: Optional[str] = None,
    team: Optional[str] = None,
    limit: int = 100,
) -> list[RosterPlayer]:
    needle = (search or "").strip().lower()
    matches: list[RosterPlayer] = []
    for player in players:
        if not player.active:
            continue
        if needle and needle not in _player_name(player):
            continue
        if position and player.position != position:
            continue
        if team and player.team != team:
            continue
        matches.append(player)
        if len(matches) >= limit:
            break
    return matches


def player_facets(players: Iterable[RosterPlayer]) -> dict[str, list[str]]:
    """Distinct positions and teams, for the filter dropdowns."""
    positions: set[str] = set()
    teams: set[str] = set()
    for player in players:
        if player.position:
            positions.add(player.position)
        if player.team:
            teams.add(player.team)
    return {"positions": sorted(positions), "teams": sorted(teams)}
