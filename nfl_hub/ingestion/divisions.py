"""Fixed conference/division alignment of the 32 NFL teams."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple


class DivisionInfo(NamedTuple):
    conference: str
    division: str


CONFERENCES: tuple[str, ...] = ("AFC", "NFC")
DIVISION_NAMES: tuple[str, ...] = ("East", "North", "South", "West")

NFL_DIVISIONS: Mapping[str, DivisionInfo] = MappingProxyType(
    {
        "ARI": DivisionInfo("NFC", "West"),
        "ATL": DivisionInfo("NFC", "South"),
        "BAL": DivisionInfo("AFC", "North"),
        "BUF": DivisionInfo("AFC", "East"),
        "CAR": DivisionInfo("NFC", "South"),
        "CHI": DivisionInfo("NFC", "North"),
        "CIN": DivisionInfo("AFC", "North"),
        "CLE": DivisionInfo("AFC", "North"),
        "DAL": DivisionInfo("NFC", "East"),
        "DEN": DivisionInfo("AFC", "West"),
        "DET": DivisionInfo("NFC", "North"),
        "GB": DivisionInfo("NFC", "North"),
        "HOU": DivisionInfo("AFC", "South"),
        "IND": DivisionInfo("AFC", "South"),
        "JAX": DivisionInfo("AFC", "South"),
        "KC": DivisionInfo("AFC", "West"),
        "LAC": DivisionInfo("AFC", "West"),
        "LAR": DivisionInfo("NFC", "West"),
        "LV": DivisionInfo("AFC", "West"),
        "MIA": DivisionInfo("AFC", "East"),
        "MIN": DivisionInfo("NFC", "North"),
        "NE": DivisionInfo("AFC", "East"),
        "NO": DivisionInfo("NFC", "South"),
        "NYG": DivisionInfo("NFC", "East"),
        "NYJ": DivisionInfo("AFC", "East"),
        "PHI": DivisionInfo("NFC", "East"),
        "PIT": DivisionInfo("AFC", "North"),
        "SEA": DivisionInfo("NFC", "West"),
        "SF": DivisionInfo("NFC", "West"),
        "TB": DivisionInfo("NFC", "South"),
        "TEN": DivisionInfo("AFC", "South"),
        "WAS": DivisionInfo("NFC", "East"),
    }
)

# Abbreviations that differ between providers or survive from relocations.
KEY_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "WSH": "WAS",
        "JAC": "JAX",
        "LA": "LAR",
        "STL": "LAR",
        "OAK": "LV",
        "SD": "LAC",
    }
)


def canonical_key(key: str) -> str:
    upper = key.strip().upper()
    return KEY_ALIASES.get(upper, upper)


def division_for(
    key: str,
    table: Mapping[str, DivisionInfo] = NFL_DIVISIONS,
) -> DivisionInfo | None:
    """Return the conference/division for a team key (e.g., KC).

    Returns None when the key is not in the table.
    """

    if not key:
        return None
    return table.get(canonical_key(key))


def split_division_label(label: str) -> DivisionInfo | None:
    """Split a provider label such as "AFC East" into its two parts."""
    parts = label.split()
    if len(parts) != 2:
        return None
    conference, division = parts[0].upper(), parts[1].capitalize()
    if conference not in CONFERENCES or division not in DIVISION_NAMES:
        return None
    return DivisionInfo(conference, division)
