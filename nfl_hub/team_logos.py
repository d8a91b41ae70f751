"""NFL team key to ESPN CDN logo URL mapping."""

from nfl_hub.ingestion.divisions import NFL_DIVISIONS, canonical_key

# ESPN CDN base URL for team logos
_ESPN_LOGO_BASE = "https://a.espncdn.com/i/teamlogos"

# Canonical key -> ESPN CDN abbreviation, where the two differ
_CDN_ABBREVIATIONS: dict[str, str] = {
    "WAS": "wsh",
}

_LEAGUE_LOGO = "https://a.espncdn.com/i/teamlogos/leagues/500/nfl.png"


def get_team_logo(key: str, size: int = 500) -> str:
    """Return ESPN CDN logo URL for a team key such as "KC".

    Returns "" when the key is not one of the 32 NFL teams.
    """
    canonical = canonical_key(key or "")
    if canonical not in NFL_DIVISIONS:
        return ""
    abbrev = _CDN_ABBREVIATIONS.get(canonical, canonical.lower())
    return f"{_ESPN_LOGO_BASE}/nfl/{size}/{abbrev}.png"


def league_logo_url() -> str:
    return _LEAGUE_LOGO
