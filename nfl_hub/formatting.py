"""Display helpers: dates, game status text and season/week arithmetic."""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from nfl_hub.ingestion.schema import Game, SeasonType

DEFAULT_TZ = ZoneInfo("America/New_York")

_SEASON_TYPE_LABELS = {
    SeasonType.PRESEASON: "Preseason",
    SeasonType.REGULAR: "Regular Season",
    SeasonType.POSTSEASON: "Postseason",
}
_SEASON_TYPE_SHORT_LABELS = {
    SeasonType.PRESEASON: "PRE",
    SeasonType.REGULAR: "REG",
    SeasonType.POSTSEASON: "POST",
}
# Postseason: Wild Card, Divisional, Conference, Pro Bowl, Super Bowl
_SEASON_WEEK_COUNTS = {
    SeasonType.PRESEASON: 4,
    SeasonType.REGULAR: 18,
    SeasonType.POSTSEASON: 5,
}
POSTSEASON_WEEK_NAMES = {
    1: "Wild Card",
    2: "Divisional Round",
    3: "Conference Championships",
    4: "Pro Bowl",
    5: "Super Bowl",
}


def _localize(value: datetime, tz: tzinfo | None) -> datetime:
    return value.astimezone(tz or DEFAULT_TZ)


def format_game_date(value: datetime | None, tz: tzinfo | None = None) -> str:
    """E.g. "Sun, Sep 8"; "TBD" when the kickoff is unknown."""
    if value is None:
        return "TBD"
    local = _localize(value, tz)
    return f"{local:%a}, {local:%b} {local.day}"


def format_game_time(value: datetime | None, tz: tzinfo | None = None) -> str:
    if value is None:
        return "TBD"
    local = _localize(value, tz)
    hour = local.hour % 12 or 12
    return f"{hour}:{local:%M} {local:%p}"


def format_news_date(value: datetime | None, tz: tzinfo | None = None) -> str:
    if value is None:
        return ""
    local = _localize(value, tz)
    return f"{local:%b} {local.day}, {local.year}"


def game_status_text(game: Game, tz: tzinfo | None = None) -> str:
    if game.is_over or game.closed:
        return "Final/OT" if game.is_overtime else "Final"
    if game.is_in_progress:
        if game.quarter and game.time_remaining:
            label = "OT" if game.quarter.upper() == "OT" else f"Q{game.quarter}"
            return f"{label} {game.time_remaining}"
        return "In Progress"
    if game.status_detail and game.status_detail.lower() not in {"scheduled", ""}:
        return game.status_detail
    return format_game_time(game.kickoff, tz)


def season_type_label(season_type: int) -> str:
    try:
        return _SEASON_TYPE_LABELS[SeasonType(season_type)]
    except ValueError:
        return "Unknown"


def season_type_short_label(season_type: int) -> str:
    try:
        return _SEASON_TYPE_SHORT_LABELS[SeasonType(season_type)]
    except ValueError:
        return ""


def season_weeks(season_type: int = SeasonType.REGULAR) -> list[int]:
    try:
        count = _SEASON_WEEK_COUNTS[SeasonType(season_type)]
    except ValueError:
        count = _SEASON_WEEK_COUNTS[SeasonType.REGULAR]
    return list(range(1, count + 1))


def week_label(week: int, season_type: int = SeasonType.REGULAR) -> str:
    if season_type == SeasonType.POSTSEASON and week in POSTSEASON_WEEK_NAMES:
        return POSTSEASON_WEEK_NAMES[week]
    return f"Week {week}"


def current_season(provider: str = "espn", today: date | None = None) -> int:
    """Season year that ``today`` belongs to.

    SportsDataIO seasons roll over in September; ESPN keeps the previous
    season until March so the playoffs stay in the same season.
    """

    today = today or date.today()
    rollover_month = 9 if provider == "sportsdata" else 3
    return today.year - 1 if today.month < rollover_month else today.year


def current_week(today: date | None = None) -> int:
    """Approximate regular-season week from weeks elapsed since Sept 1, in 1..18."""
    today = today or date.today()
    season = current_season("sportsdata", today)
    elapsed = (today - date(season, 9, 1)).days // 7
    return max(1, min(18, elapsed + 1))


def espn_week_dates(season: int, week: int) -> str:
    """ESPN ``dates`` range for a regular-season week, e.g. 20240904-20240911.

    Weeks start the Wednesday before the first Thursday of September and
    span seven days.
    """

    kickoff = date(season, 9, 1)
    while kickoff.weekday() != 3:
        kickoff += timedelta(days=1)
    start = kickoff + timedelta(days=(week - 1) * 7 - 1)
    end = start + timedelta(days=7)
    return f"{start:%Y%m%d}-{end:%Y%m%d}"


def format_percentage(value: float) -> str:
    """NFL style: .750, 1.000"""
    text = f"{value:.3f}"
    return text[1:] if text.startswith("0") else text


def format_net_points(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)
