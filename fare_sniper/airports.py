"""Airport coordinates for the dashboard map (via airportsdata)."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional

import airportsdata


@lru_cache(maxsize=1)
def _iata_db() -> Dict[str, Dict[str, Any]]:
    return airportsdata.load("IATA")


def get_airport(code: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the airportsdata record for *code* or ``None`` if unknown."""
    if not code:
        return None
    return _iata_db().get(code.upper())


def airport_marker(code: Optional[str], color: str) -> Optional[Dict[str, Any]]:
    """Map waypoint for *code*; unknown codes give ``None``."""
    airport = get_airport(code)
    if airport is None:
        return None
    return {
        "code": code.upper(),
        "lat": airport["lat"],
        "lon": airport["lon"],
        "color": color,
        "char": "X",
    }


__all__ = ["get_airport", "airport_marker"]
