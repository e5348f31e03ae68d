"""Geospatial helper functions."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from shapely.geometry import Point, box

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_m(origin: Coordinate, destination: Coordinate) -> float:
    return haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude) * 1000.0


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box in degrees. The interior is open, as in the curated city areas."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, coordinate: Coordinate) -> bool:
        # shapely works in (x, y) = (lon, lat)
        area = box(self.min_lon, self.min_lat, self.max_lon, self.max_lat)
        return area.contains(Point(coordinate.longitude, coordinate.latitude))


def jitter(coordinate: Coordinate, max_offset_deg: float = 0.005, rng: random.Random | None = None) -> Coordinate:
    """Return a coordinate displaced by up to ``max_offset_deg`` on each axis, clamped to valid ranges."""
    rng = rng or random
    lat = coordinate.latitude + rng.uniform(-max_offset_deg, max_offset_deg)
    lon = coordinate.longitude + rng.uniform(-max_offset_deg, max_offset_deg)
    return Coordinate(latitude=max(-90.0, min(90.0, lat)), longitude=max(-180.0, min(180.0, lon)))


def format_duration(seconds: float) -> str:
    minutes = round(seconds / 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    return f"{hours}h {remaining}min" if remaining else f"{hours}h"


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.1f} km"
