import random
from datetime import datetime

import httpx
import pytest

from src.placecast.config import Settings
from src.placecast.errors import UpstreamDegraded
from src.placecast.models.domain import Coordinate
from src.placecast.services.geospatial import BoundingBox, format_distance, format_duration, haversine_km, jitter
from src.placecast.services.places import osm_tags
from src.placecast.services.routing.osrm_client import OSRMClient
from src.placecast.services.routing.travel import TravelTimeCalculator
from tests.factories import CENTRO


def test_haversine_known_distance() -> None:
    # Bogotá to Medellín is roughly 240 km in a straight line.
    assert 230 < haversine_km(4.711, -74.0721, 6.2442, -75.5812) < 250


@pytest.mark.parametrize(
    "seconds, expected",
    [(30, "0 min"), (720, "12 min"), (3600, "1h"), (5400, "1h 30min")],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


@pytest.mark.parametrize("meters, expected", [(650.4, "650 m"), (1000, "1.0 km"), (12345, "12.3 km")])
def test_format_distance(meters, expected) -> None:
    assert format_distance(meters) == expected


def test_bounding_box_interior_is_open() -> None:
    bounds = BoundingBox(min_lat=4.59, max_lat=4.62, min_lon=-74.08, max_lon=-74.07)

    assert bounds.contains(CENTRO)
    assert not bounds.contains(Coordinate(latitude=4.59, longitude=-74.075))
    assert not bounds.contains(Coordinate(latitude=4.6097, longitude=-74.0817))


def test_jitter_stays_near_and_valid() -> None:
    rng = random.Random(1)
    moved = jitter(CENTRO, rng=rng)
    clamped = jitter(Coordinate(latitude=90, longitude=180), rng=rng)

    assert abs(moved.latitude - CENTRO.latitude) <= 0.005
    assert abs(moved.longitude - CENTRO.longitude) <= 0.005
    assert clamped.latitude <= 90 and clamped.longitude <= 180


def test_osm_address_rating_and_types() -> None:
    tags = {"name": "Teatro Colón", "amenity": "theatre", "addr:street": "Calle 10", "addr:city": "Bogotá"}

    assert osm_tags.is_point_of_interest(tags)
    assert osm_tags.address_from_tags(tags) == "Calle 10, Bogotá"
    assert osm_tags.rating_from_tags(tags) == 4.1
    assert osm_tags.types_from_tags(tags) == ["theatre"]
    assert osm_tags.address_from_tags({}) == osm_tags.FALLBACK_ADDRESS
    assert osm_tags.rating_from_tags({"review:score": "n/a"}) == osm_tags.DEFAULT_RATING
    assert not osm_tags.is_point_of_interest({"name": "Bench", "amenity": "bench"})


def test_osm_opening_hours() -> None:
    tuesday_noon = datetime(2024, 5, 7, 12, 0)
    saturday_noon = datetime(2024, 5, 11, 12, 0)

    tagged = osm_tags.opening_hours_from_tags({"opening_hours": "Tu-Su 09:00-17:00; Mo off"}, now=tuesday_noon)
    museum = osm_tags.opening_hours_from_tags({"tourism": "museum"}, now=saturday_noon)

    assert tagged.weekday_text == ["Tu-Su 09:00-17:00", "Mo off"]
    assert tagged.open_now is True
    assert museum.open_now is False
    assert museum.weekday_text[0].startswith("Monday to Friday")


def test_element_coordinate_sources() -> None:
    assert osm_tags.element_coordinate({"lat": 1, "lon": 2}) == Coordinate(1.0, 2.0)
    assert osm_tags.element_coordinate({"center": {"lat": 3, "lon": 4}}) == Coordinate(3.0, 4.0)
    assert osm_tags.element_coordinate({"geometry": [{"lat": 5, "lon": 6}]}) == Coordinate(5.0, 6.0)
    assert osm_tags.element_coordinate({"type": "relation"}) is None


def _osrm(settings, handler) -> OSRMClient:
    return OSRMClient(settings, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_osrm_route_uses_lon_lat_order(settings) -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 1234.0, "duration": 900.0}]})

    meters, seconds = _osrm(settings, handler).route(CENTRO, Coordinate(4.601955, -74.071766))

    assert (meters, seconds) == (1234.0, 900.0)
    assert seen[0].url.path == "/route/v1/foot/-74.075,4.6;-74.071766,4.601955"


def test_osrm_no_route_is_degraded(settings) -> None:
    client = _osrm(settings, lambda request: httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route"}))

    with pytest.raises(UpstreamDegraded):
        client.route(CENTRO, CENTRO)


def test_http_client_retries_server_errors(settings) -> None:
    retrying = settings.model_copy(update={"http_max_retries": 2})
    responses = [httpx.Response(502), httpx.Response(503), httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 1.0, "duration": 2.0}]})]

    client = _osrm(retrying, lambda request: responses.pop(0))

    assert client.route(CENTRO, CENTRO) == (1.0, 2.0)
    assert responses == []


def test_http_client_does_not_retry_client_errors(settings) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(400)

    client = _osrm(settings.model_copy(update={"http_max_retries": 3}), handler)

    with pytest.raises(UpstreamDegraded):
        client.route(CENTRO, CENTRO)
    assert len(calls) == 1


def test_travel_estimate_is_bounded_and_unmeasured(settings) -> None:
    calculator = TravelTimeCalculator(settings, client=None, rng=random.Random(5))

    for _ in range(20):
        estimate = calculator.estimate(CENTRO, Coordinate(4.61, -74.08))
        minutes = int(estimate.duration_label.split()[0])
        assert 5 <= minutes <= 25
        assert estimate.is_measured is False


def test_travel_without_osrm_cannot_measure() -> None:
    calculator = TravelTimeCalculator(Settings(_env_file=None, osrm_base_url=None))

    with pytest.raises(UpstreamDegraded):
        calculator.measure(CENTRO, CENTRO)


def test_settings_parse_origins_and_check_estimate_range() -> None:
    settings = Settings(_env_file=None, frontend_allowed_origins="https://a.example, https://b.example")

    assert settings.frontend_allowed_origins == ("https://a.example", "https://b.example")
    assert settings.delivery_max_retries == 2
    with pytest.raises(ValueError):
        Settings(_env_file=None, estimate_min_minutes=30, estimate_max_minutes=10)
