"""Last-resort placeholder places and low-confidence details."""

from __future__ import annotations

import random

from ...models.domain import Coordinate, OpeningHours, PlaceCandidate, PlaceDetails, PlaceTier
from ..geospatial import jitter
from .osm_tags import DEFAULT_RATING, FALLBACK_ADDRESS


def synthetic_places(coordinate: Coordinate, rng: random.Random | None = None) -> list[PlaceCandidate]:
    return [
        PlaceCandidate(
            place_id="synthetic_historic_center",
            name="Local historic center",
            address="Central area of the city",
            rating=4.2,
            types=["attraction", "historic"],
            coordinate=jitter(coordinate, rng=rng),
            opening_hours=OpeningHours(open_now=True, weekday_text=["Open to the public"]),
            tier=PlaceTier.SYNTHETIC,
        ),
        PlaceCandidate(
            place_id="synthetic_main_park",
            name="Main park",
            address="Central square",
            rating=4.0,
            types=["park", "attraction"],
            coordinate=jitter(coordinate, rng=rng),
            opening_hours=OpeningHours(open_now=True, weekday_text=["Open 24 hours"]),
            tier=PlaceTier.SYNTHETIC,
        ),
    ]


def synthetic_details(candidate: PlaceCandidate) -> PlaceDetails:
    """Details used when the lookup fails or the place itself is a placeholder."""
    return PlaceDetails(
        name=candidate.name,
        address=candidate.address or FALLBACK_ADDRESS,
        rating=DEFAULT_RATING,
        opening_hours=OpeningHours(open_now=True, weekday_text=["Hours not specified"]),
        ratings_total=0,
        is_synthetic=True,
    )
