"""Coordinate validation performed before any external lookup."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any

from ..errors import InvalidInput
from ..models.domain import Coordinate

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


def _check_axis(name: str, value: Any, bounds: tuple[float, float]) -> float:
    if value is None:
        raise InvalidInput(f"{name} is required.")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInput(f"{name} must be a number, got {type(value).__name__}.")
    number = float(value)
    if math.isnan(number) or not bounds[0] <= number <= bounds[1]:
        raise InvalidInput(f"{name} {value} is outside [{bounds[0]:g}, {bounds[1]:g}].")
    return number


def validate_coordinate(latitude: Any, longitude: Any) -> Coordinate:
    """Return a ``Coordinate`` or raise ``InvalidInput`` for absent or out-of-range axes."""
    return Coordinate(
        latitude=_check_axis("latitude", latitude, LATITUDE_RANGE),
        longitude=_check_axis("longitude", longitude, LONGITUDE_RANGE),
    )
