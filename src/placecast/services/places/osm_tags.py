"""Interpretation of OpenStreetMap tags into place attributes."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ...models.domain import Coordinate, OpeningHours

logger = logging.getLogger(__name__)

FALLBACK_ADDRESS = "Location available on OpenStreetMap"
DEFAULT_RATING = 4.0

BASE_RATINGS = {
    "museum": 4.3,
    "attraction": 4.2,
    "hotel": 4.0,
    "guest_house": 4.1,
    "viewpoint": 4.4,
    "theme_park": 4.1,
    "zoo": 4.2,
    "aquarium": 4.3,
    "gallery": 4.2,
    "historic": 4.3,
    "theatre": 4.1,
    "cinema": 4.0,
}

CULTURAL_AMENITIES = ("museum", "theatre", "cinema")


def is_point_of_interest(tags: dict[str, Any]) -> bool:
    return bool(
        tags.get("name")
        and (tags.get("tourism") or tags.get("historic") or tags.get("amenity") in CULTURAL_AMENITIES)
    )


def element_coordinate(element: dict[str, Any]) -> Optional[Coordinate]:
    """Nodes carry lat/lon, ways and relations carry a center or a geometry list."""
    if element.get("lat") is not None and element.get("lon") is not None:
        return Coordinate(latitude=float(element["lat"]), longitude=float(element["lon"]))
    center = element.get("center")
    if isinstance(center, dict) and center.get("lat") is not None and center.get("lon") is not None:
        return Coordinate(latitude=float(center["lat"]), longitude=float(center["lon"]))
    geometry = element.get("geometry")
    if isinstance(geometry, list) and geometry:
        first = geometry[0]
        if first.get("lat") is not None and first.get("lon") is not None:
            return Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
    return None


def address_from_tags(tags: dict[str, Any]) -> str:
    parts: list[str] = []
    for key in ("addr:housenumber", "addr:street"):
        if tags.get(key):
            parts.append(str(tags[key]))
    if tags.get("addr:city"):
        parts.append(str(tags["addr:city"]))
    elif tags.get("addr:suburb"):
        parts.append(str(tags["addr:suburb"]))
    if tags.get("addr:postcode"):
        parts.append(str(tags["addr:postcode"]))
    if parts:
        return ", ".join(parts)

    for key in ("address", "contact:address"):
        if tags.get(key):
            return str(tags[key])
    return FALLBACK_ADDRESS


def rating_from_tags(tags: dict[str, Any]) -> float:
    score = tags.get("review:score")
    if score:
        try:
            return float(score)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring unparseable review:score {score!r}")
    for key in ("tourism", "amenity"):
        rating = BASE_RATINGS.get(tags.get(key) or "")
        if rating is not None:
            return rating
    if tags.get("historic"):
        return BASE_RATINGS["historic"]
    return DEFAULT_RATING


def types_from_tags(tags: dict[str, Any]) -> list[str]:
    types: list[str] = []
    if tags.get("tourism"):
        types.append(str(tags["tourism"]))
    if tags.get("historic"):
        types.append("historic")
    if tags.get("amenity") in CULTURAL_AMENITIES:
        types.append(str(tags["amenity"]))
    if tags.get("leisure"):
        types.append(str(tags["leisure"]))
    return types or ["attraction"]


def opening_hours_from_tags(tags: dict[str, Any], now: Optional[datetime] = None) -> OpeningHours:
    """Split an ``opening_hours`` tag into lines, or fall back to category defaults.

    ``open_now`` is a coarse daytime heuristic; the OSM opening-hours grammar is
    not evaluated.
    """
    now = now or datetime.now()
    raw = tags.get("opening_hours")
    if raw:
        lines = [period.strip() for period in str(raw).split(";") if period.strip()]
        return OpeningHours(open_now=9 <= now.hour < 18, weekday_text=lines or [str(raw)])
    return default_opening_hours(tags, now)


def default_opening_hours(tags: dict[str, Any], now: datetime) -> OpeningHours:
    hour = now.hour
    is_weekend = now.weekday() >= 5
    if tags.get("tourism") == "museum" or tags.get("amenity") == "museum":
        return OpeningHours(
            open_now=not is_weekend and 9 <= hour < 17,
            weekday_text=["Monday to Friday: 9:00 - 17:00", "Saturday: 10:00 - 16:00", "Sunday: closed"],
        )
    if tags.get("tourism") == "attraction" or tags.get("historic"):
        return OpeningHours(open_now=8 <= hour < 18, weekday_text=["Every day: 8:00 - 18:00"])
    if tags.get("amenity") in ("theatre", "cinema"):
        return OpeningHours(open_now=10 <= hour < 22, weekday_text=["Monday to Sunday: 10:00 - 22:00"])
    return OpeningHours(open_now=9 <= hour < 18, weekday_text=["Business hours: 9:00 - 18:00"])
