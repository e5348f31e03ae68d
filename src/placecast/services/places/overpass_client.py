"""HTTP client for the Overpass API (OpenStreetMap geo-index)."""

from __future__ import annotations

import logging

from ...errors import UpstreamDegraded
from ...models.domain import Coordinate, PlaceCandidate, PlaceDetails, PlaceTier
from ..http_client import JsonHttpClient
from . import osm_tags

logger = logging.getLogger(__name__)

OSM_ID_PREFIX = "osm_"
OSM_ELEMENT_TYPES = ("node", "way", "relation")


def build_nearby_query(coordinate: Coordinate, radius_m: int, timeout_s: int) -> str:
    around = f"around:{radius_m},{coordinate.latitude},{coordinate.longitude}"
    selectors = [
        f'nwr["tourism"]({around});',
        f'nw["historic"]({around});',
        f'nw["amenity"~"^(museum|theatre|cinema)$"]({around});',
    ]
    return f"[out:json][timeout:{timeout_s}];({''.join(selectors)});out center tags;"


def make_place_id(element_type: str, element_id: int | str) -> str:
    return f"{OSM_ID_PREFIX}{element_type}_{element_id}"


def parse_place_id(place_id: str) -> tuple[str, str]:
    if not place_id.startswith(OSM_ID_PREFIX):
        raise ValueError(f"'{place_id}' is not an OpenStreetMap place id.")
    parts = place_id.split("_")
    if len(parts) != 3 or parts[1] not in OSM_ELEMENT_TYPES or not parts[2].isdigit():
        raise ValueError(f"Invalid OpenStreetMap place id '{place_id}'.")
    return parts[1], parts[2]


class OverpassClient(JsonHttpClient):
    service_name = "overpass"

    def nearby(self, coordinate: Coordinate) -> list[PlaceCandidate]:
        """Named tourism/historic/cultural places around ``coordinate``; may be empty."""
        query = build_nearby_query(
            coordinate,
            self.settings.search_radius_m,
            timeout_s=max(1, int(self.settings.http_timeout_seconds)),
        )
        data = self._request_json("POST", self.settings.overpass_url, data={"data": query})
        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            raise UpstreamDegraded(self.service_name, "response has no elements list")

        candidates: list[PlaceCandidate] = []
        seen: set[str] = set()
        for element in elements:
            tags = element.get("tags") or {}
            if not osm_tags.is_point_of_interest(tags):
                continue
            place_id = make_place_id(element.get("type", "node"), element.get("id", ""))
            if place_id in seen:
                continue
            seen.add(place_id)
            candidates.append(
                PlaceCandidate(
                    place_id=place_id,
                    name=str(tags["name"]),
                    address=osm_tags.address_from_tags(tags),
                    rating=osm_tags.rating_from_tags(tags),
                    types=osm_tags.types_from_tags(tags),
                    coordinate=osm_tags.element_coordinate(element),
                    opening_hours=osm_tags.opening_hours_from_tags(tags),
                    tier=PlaceTier.LIVE,
                )
            )
            if len(candidates) >= self.settings.max_live_candidates:
                break
        logger.info(f"Overpass returned {len(elements)} elements, {len(candidates)} usable places")
        return candidates

    def details(self, place_id: str) -> PlaceDetails:
        try:
            element_type, element_id = parse_place_id(place_id)
        except ValueError as exc:
            raise UpstreamDegraded(self.service_name, str(exc)) from exc

        query = f"[out:json];{element_type}({element_id});out tags;"
        data = self._request_json("POST", self.settings.overpass_url, data={"data": query})
        elements = data.get("elements") if isinstance(data, dict) else None
        if not elements:
            raise UpstreamDegraded(self.service_name, f"place {place_id} not found")

        tags = elements[0].get("tags") or {}
        review_count = tags.get("review:count")
        return PlaceDetails(
            name=str(tags.get("name") or "Tourist place"),
            address=osm_tags.address_from_tags(tags),
            rating=osm_tags.rating_from_tags(tags),
            opening_hours=osm_tags.opening_hours_from_tags(tags),
            website=tags.get("website") or tags.get("url"),
            phone=tags.get("phone") or tags.get("contact:phone"),
            ratings_total=int(review_count) if str(review_count or "").isdigit() else 0,
            is_synthetic=False,
        )
