"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging

import httpx

from ...config import Settings
from ...errors import UpstreamDegraded
from ...models.domain import Coordinate
from ..http_client import JsonHttpClient

logger = logging.getLogger(__name__)


class OSRMClient(JsonHttpClient):
    service_name = "osrm"

    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        if not settings.osrm_base_url:
            raise ValueError("OSRM base URL is not configured.")
        super().__init__(settings, client)
        self.base_url = settings.osrm_base_url.rstrip("/")
        self.profile = settings.osrm_profile

    def route(self, origin: Coordinate, destination: Coordinate) -> tuple[float, float]:
        """Return ``(distance_m, duration_s)`` of the best route between two points."""
        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat"
        coordinate_str = f"{origin.longitude},{origin.latitude};{destination.longitude},{destination.latitude}"
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        data = self._request_json("GET", url, params={"overview": "false", "steps": "false"})

        if not isinstance(data, dict) or data.get("code") != "Ok":
            message = data.get("message", "Unknown OSRM route error") if isinstance(data, dict) else "bad payload"
            raise UpstreamDegraded(self.service_name, f"route request failed: {message}")
        routes = data.get("routes") or []
        if not routes:
            raise UpstreamDegraded(self.service_name, "no route found")
        best = routes[0]
        distance = best.get("distance")
        duration = best.get("duration")
        if distance is None or duration is None:
            raise UpstreamDegraded(self.service_name, "route is missing distance/duration")
        return float(distance), float(duration)


def check_health(settings: Settings) -> bool:
    """Check OSRM service health with a minimal two-point route request."""
    if not settings.osrm_base_url:
        return False
    try:
        # Two points in central Bogotá work with public and self-hosted instances.
        test_coords = "-74.071766,4.601955;-74.075404,4.595630"
        url = f"{settings.osrm_base_url.rstrip('/')}/route/v1/{settings.osrm_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
