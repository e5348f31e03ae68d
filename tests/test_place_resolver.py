import random

import httpx
import pytest

from src.placecast.errors import UpstreamDegraded
from src.placecast.models.domain import Coordinate, OpeningHours, PlaceCandidate, PlaceDetails, PlaceTier
from src.placecast.services.geospatial import distance_m
from src.placecast.services.places.overpass_client import OverpassClient, build_nearby_query, parse_place_id
from src.placecast.services.places.resolver import PlaceResolver
from src.placecast.services.routing.travel import TravelTimeCalculator
from tests.factories import BOGOTA, CENTRO


def _live(place_id: str, name: str, rating: float, lat: float, lon: float) -> PlaceCandidate:
    return PlaceCandidate(
        place_id=place_id,
        name=name,
        address="Calle 10",
        rating=rating,
        types=["museum"],
        coordinate=Coordinate(latitude=lat, longitude=lon),
        opening_hours=OpeningHours(open_now=True, weekday_text=["Every day: 8:00 - 18:00"]),
        tier=PlaceTier.LIVE,
    )


class FakeOverpass:
    def __init__(self, candidates=None, error=None, details_error=None):
        self.candidates = candidates or []
        self.error = error
        self.details_error = details_error
        self.details_calls = []

    def nearby(self, coordinate):
        if self.error:
            raise self.error
        return list(self.candidates)

    def details(self, place_id):
        self.details_calls.append(place_id)
        if self.details_error:
            raise self.details_error
        return PlaceDetails(
            name="Live details",
            address="Carrera 7",
            rating=4.9,
            opening_hours=OpeningHours(open_now=True, weekday_text=["Mo-Su 09:00-17:00"]),
            website="https://example.org",
        )


class StraightLineOSRM:
    """Routes at walking pace along the straight line."""

    def __init__(self, failing=()):
        self.failing = set(failing)

    def route(self, origin, destination):
        if destination in self.failing:
            raise UpstreamDegraded("osrm", "no route")
        meters = distance_m(origin, destination)
        return meters, meters / 1.4


class DownOSRM:
    def route(self, origin, destination):
        raise UpstreamDegraded("osrm", "HTTP 503")


def _resolver(settings, overpass, osrm=None) -> PlaceResolver:
    rng = random.Random(3)
    travel = TravelTimeCalculator(settings, client=osrm or StraightLineOSRM(), rng=rng)
    return PlaceResolver(settings, overpass=overpass, travel=travel, rng=rng)


def test_live_tier_picks_shortest_routed_distance(settings) -> None:
    near = _live("osm_node_1", "Near museum", 4.0, 4.6005, -74.0752)
    far = _live("osm_node_2", "Far museum", 4.9, 4.6300, -74.0900)
    overpass = FakeOverpass(candidates=[far, near])

    recommendation = _resolver(settings, overpass).resolve(CENTRO)

    assert recommendation.place.name == "Near museum"
    assert recommendation.place.source_tier is PlaceTier.LIVE
    assert recommendation.travel.is_measured is True
    assert recommendation.details.name == "Live details"
    assert overpass.details_calls == ["osm_node_1"]


def test_live_result_outranks_catalog_inside_known_box(settings) -> None:
    overpass = FakeOverpass(candidates=[_live("osm_way_9", "Iglesia", 4.1, 4.5990, -74.0740)])

    recommendation = _resolver(settings, overpass).resolve(CENTRO)

    assert recommendation.place.source_tier is PlaceTier.LIVE
    assert recommendation.place.name == "Iglesia"


def test_unroutable_candidate_is_excluded_from_comparison(settings) -> None:
    near = _live("osm_node_1", "Near museum", 4.0, 4.6005, -74.0752)
    far = _live("osm_node_2", "Far museum", 4.9, 4.6300, -74.0900)
    osrm = StraightLineOSRM(failing=[near.coordinate])

    recommendation = _resolver(settings, FakeOverpass(candidates=[near, far]), osrm).resolve(CENTRO)

    assert recommendation.place.name == "Far museum"
    assert recommendation.travel.is_measured is True


def test_live_tier_without_routing_returns_best_rated_unmeasured(settings) -> None:
    low = _live("osm_node_1", "Low rated", 3.9, 4.6005, -74.0752)
    high = _live("osm_node_2", "High rated", 4.8, 4.6300, -74.0900)

    recommendation = _resolver(settings, FakeOverpass(candidates=[low, high]), DownOSRM()).resolve(CENTRO)

    assert recommendation.place.name == "High rated"
    assert recommendation.place.source_tier is PlaceTier.LIVE
    assert recommendation.travel.is_measured is False
    minutes = int(recommendation.travel.duration_label.split()[0])
    assert 5 <= minutes <= 25


def test_catalog_used_when_live_tier_is_down(settings) -> None:
    overpass = FakeOverpass(error=UpstreamDegraded("overpass", "HTTP 504"))

    recommendation = _resolver(settings, overpass).resolve(CENTRO)

    assert recommendation.place.source_tier is PlaceTier.CATALOG
    assert recommendation.place.place_id.startswith("catalog_")
    assert recommendation.details.is_synthetic is False
    assert overpass.details_calls == []


def test_candidates_without_geometry_fall_through(settings) -> None:
    shapeless = _live("osm_node_1", "Nowhere", 4.9, 0, 0)
    shapeless.coordinate = None

    recommendation = _resolver(settings, FakeOverpass(candidates=[shapeless])).resolve(CENTRO)

    assert recommendation.place.source_tier is PlaceTier.CATALOG


def test_synthetic_fallback_is_marked_as_estimated(settings) -> None:
    overpass = FakeOverpass(candidates=[])

    recommendation = _resolver(settings, overpass).resolve(BOGOTA)

    assert recommendation.place.source_tier is PlaceTier.SYNTHETIC
    assert recommendation.travel.is_measured is False
    assert recommendation.details.is_synthetic is True
    assert recommendation.place.name == "Local historic center"
    assert abs(recommendation.place.coordinate.latitude - BOGOTA.latitude) <= 0.005


def test_details_failure_substitutes_synthetic_details(settings) -> None:
    overpass = FakeOverpass(
        candidates=[_live("osm_node_1", "Museo", 4.5, 4.6005, -74.0752)],
        details_error=UpstreamDegraded("overpass", "timeout"),
    )

    recommendation = _resolver(settings, overpass).resolve(CENTRO)

    assert recommendation.place.name == "Museo"
    assert recommendation.details.is_synthetic is True
    assert recommendation.details.rating == 4.0


@pytest.mark.parametrize(
    "coordinate",
    [Coordinate(90, 180), Coordinate(-90, -180), Coordinate(0, 0), BOGOTA, CENTRO],
)
def test_resolve_is_total_when_every_upstream_fails(settings, coordinate) -> None:
    overpass = FakeOverpass(error=RuntimeError("boom"), details_error=RuntimeError("boom"))

    recommendation = _resolver(settings, overpass, DownOSRM()).resolve(coordinate)

    assert recommendation.place is not None
    assert recommendation.travel is not None
    assert recommendation.travel.is_measured is False


def test_overpass_client_parses_nodes_and_ways(settings) -> None:
    payload = {
        "elements": [
            {
                "type": "node",
                "id": 11,
                "lat": 4.6011,
                "lon": -74.0721,
                "tags": {"name": "Museo Botero", "tourism": "museum", "addr:street": "Calle 11", "addr:housenumber": "4-41"},
            },
            {
                "type": "way",
                "id": 22,
                "center": {"lat": 4.5981, "lon": -74.0760},
                "tags": {"name": "Capitolio", "historic": "building", "review:score": "4.6"},
            },
            {"type": "node", "id": 33, "lat": 4.6, "lon": -74.07, "tags": {"amenity": "bench"}},
            {"type": "node", "id": 11, "lat": 4.6011, "lon": -74.0721, "tags": {"name": "Museo Botero", "tourism": "museum"}},
        ]
    }
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=payload)

    client = OverpassClient(settings, client=httpx.Client(transport=httpx.MockTransport(handler)))
    candidates = client.nearby(CENTRO)

    assert [candidate.place_id for candidate in candidates] == ["osm_node_11", "osm_way_22"]
    assert candidates[0].address == "4-41, Calle 11"
    assert candidates[0].rating == 4.3
    assert candidates[1].rating == 4.6
    assert candidates[1].coordinate == Coordinate(latitude=4.5981, longitude=-74.0760)
    assert all(candidate.tier is PlaceTier.LIVE for candidate in candidates)
    assert requests[0].method == "POST"


def test_overpass_client_raises_degraded_on_server_error(settings) -> None:
    client = OverpassClient(
        settings,
        client=httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(504))),
    )

    with pytest.raises(UpstreamDegraded):
        client.nearby(CENTRO)


def test_nearby_query_and_place_ids() -> None:
    query = build_nearby_query(CENTRO, 5000, 10)

    assert query.startswith("[out:json][timeout:10];")
    assert "around:5000,4.6,-74.075" in query
    assert parse_place_id("osm_relation_42") == ("relation", "42")
    with pytest.raises(ValueError):
        parse_place_id("catalog_museo_oro")
