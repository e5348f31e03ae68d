"""HTTP client for the Nominatim reverse-geocoding endpoint."""

from __future__ import annotations

from ...errors import UpstreamDegraded
from ...models.domain import Coordinate
from ..http_client import JsonHttpClient


class NominatimClient(JsonHttpClient):
    service_name = "nominatim"

    def reverse(self, coordinate: Coordinate) -> dict:
        params = {
            "format": "json",
            "lat": str(coordinate.latitude),
            "lon": str(coordinate.longitude),
            "addressdetails": "1",
            "zoom": "10",
            "accept-language": self.settings.geocoding_language,
        }
        data = self._request_json("GET", self.settings.nominatim_url, params=params)
        if not isinstance(data, dict):
            raise UpstreamDegraded(self.service_name, "unexpected response shape")
        return data
