"""Curated places for a few well-known city areas."""

from __future__ import annotations

from dataclasses import dataclass

from ...models.domain import Coordinate, OpeningHours, PlaceCandidate, PlaceDetails, PlaceTier
from ..geospatial import BoundingBox


@dataclass(frozen=True, slots=True)
class CatalogArea:
    name: str
    bounds: BoundingBox
    places: tuple[PlaceCandidate, ...]


def _place(
    place_id: str,
    name: str,
    address: str,
    rating: float,
    types: list[str],
    lat: float,
    lon: float,
    hours: str,
) -> PlaceCandidate:
    return PlaceCandidate(
        place_id=place_id,
        name=name,
        address=address,
        rating=rating,
        types=types,
        coordinate=Coordinate(latitude=lat, longitude=lon),
        opening_hours=OpeningHours(open_now=True, weekday_text=[hours]),
        tier=PlaceTier.CATALOG,
    )


CATALOG: tuple[CatalogArea, ...] = (
    CatalogArea(
        name="Bogotá",
        bounds=BoundingBox(min_lat=4.59, max_lat=4.62, min_lon=-74.08, max_lon=-74.07),
        places=(
            _place(
                "catalog_museo_oro", "Museo del Oro", "Carrera 6 #15-88, Bogotá", 4.7,
                ["museum", "attraction"], 4.601955, -74.071766, "Tuesday to Sunday: 9:00-17:00",
            ),
            _place(
                "catalog_plaza_bolivar", "Plaza de Bolívar", "Carrera 7 #11-10, Bogotá", 4.5,
                ["attraction", "historic"], 4.595630, -74.075404, "Open 24 hours",
            ),
            _place(
                "catalog_jardin_botanico", "Jardín Botánico de Bogotá", "Av. Esperanza #34-56, Bogotá", 4.4,
                ["park", "garden"], 4.710989, -74.072092, "Monday to Sunday: 9:00-17:00",
            ),
        ),
    ),
    CatalogArea(
        name="Medellín",
        bounds=BoundingBox(min_lat=6.24, max_lat=6.26, min_lon=-75.58, max_lon=-75.56),
        places=(
            _place(
                "catalog_parque_explora", "Parque Explora", "Carrera 52 #73-75, Medellín", 4.6,
                ["museum", "attraction"], 6.27053, -75.57236, "Wednesday to Monday: 9:00-17:30",
            ),
        ),
    ),
)


def catalog_places(coordinate: Coordinate, catalog: tuple[CatalogArea, ...] = CATALOG) -> list[PlaceCandidate]:
    """Curated places for the first area containing ``coordinate``, else an empty list."""
    for area in catalog:
        if area.bounds.contains(coordinate):
            return list(area.places)
    return []


def catalog_details(candidate: PlaceCandidate) -> PlaceDetails:
    return PlaceDetails(
        name=candidate.name,
        address=candidate.address,
        rating=candidate.rating,
        opening_hours=candidate.opening_hours,
        is_synthetic=False,
    )
