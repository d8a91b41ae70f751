"""Quick probe: fetch one provider endpoint, normalize it and print a count."""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace
from typing import Sequence

from nfl_hub.errors import NflHubError
from nfl_hub.ingestion.schema import SeasonType
from nfl_hub.service import NflDataService
from nfl_hub.settings import PROVIDERS, load_settings

VIEWS = ("scoreboard", "teams", "standings", "players", "news")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Probe an NFL data provider and print how many records it returns.",
    )
    parser.add_argument(
        "--provider",
        type=str,
        choices=PROVIDERS,
        default=None,
        help="Provider to probe (default: NFL_DATA_PROVIDER or espn).",
    )
    parser.add_argument(
        "--view",
        type=str,
        choices=VIEWS,
        default="scoreboard",
        help="Endpoint to probe (default: scoreboard).",
    )
    parser.add_argument("--season", type=int, default=None, help="Season year.")
    parser.add_argument("--week", type=int, default=None, help="Week number (scoreboard only).")
    parser.add_argument(
        "--season-type",
        type=int,
        choices=[kind.value for kind in SeasonType],
        default=SeasonType.REGULAR.value,
        help="1 preseason, 2 regular season, 3 postseason.",
    )
    return parser.parse_args(argv)


async def _probe(service: NflDataService, args: argparse.Namespace) -> int:
    season_type = SeasonType(args.season_type)
    if args.view == "scoreboard":
        board = await service.scoreboard(args.season, args.week, season_type)
        logging.info("season=%s week=%s", board.season, board.week)
        return len(board.games)
    if args.view == "teams":
        return len(await service.teams())
    if args.view == "standings":
        return len(await service.standings(args.season, season_type))
    if args.view == "players":
        return len(await service.players())
    return len(await service.news())


def main(argv: Sequence[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = _parse_args(argv)
    settings = load_settings()
    if args.provider:
        settings = replace(settings, provider=args.provider)
    service = NflDataService(settings)

    try:
        count = asyncio.run(_probe(service, args))
    except NflHubError as exc:
        logging.error("%s error: %s", settings.provider, exc)
        raise SystemExit(1) from exc

    logging.info(
        "Fetched %s %s records from provider=%s",
        count,
        args.view,
        settings.provider,
    )


if __name__ == "__main__":
    main()
