"""Best-effort city labelling for a reported position."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ...config import Settings
from ...errors import UpstreamDegraded
from ...models.domain import Coordinate
from .nominatim_client import NominatimClient

logger = logging.getLogger(__name__)

LOCALITY_KEYS = ("city", "town", "village", "municipality", "county")


@dataclass(slots=True)
class CityDetection:
    city: str
    country: Optional[str]
    full_address: str
    success: bool


class CityResolver:
    """Returns a city label and never raises.

    A caller-supplied name is authoritative and used verbatim. Otherwise one
    reverse-geocoding lookup is made; any failure yields the placeholder label.
    """

    def __init__(self, settings: Settings, client: NominatimClient | None = None) -> None:
        self.placeholder = settings.city_placeholder
        self._client = client or NominatimClient(settings)

    def resolve(self, coordinate: Coordinate, supplied_name: Optional[str] = None) -> str:
        if supplied_name and supplied_name.strip():
            return supplied_name
        return self.detect(coordinate).city

    def detect(self, coordinate: Coordinate) -> CityDetection:
        try:
            data = self._client.reverse(coordinate)
            address = data.get("address")
            if not isinstance(address, dict):
                raise UpstreamDegraded("nominatim", "response has no address")
            city = next((address[key] for key in LOCALITY_KEYS if address.get(key)), None)
            if not city:
                raise UpstreamDegraded("nominatim", "address has no locality")
        except UpstreamDegraded as exc:
            logger.warning(f"City detection failed for {coordinate.latitude}, {coordinate.longitude}: {exc}")
            return self._placeholder_detection(coordinate)
        except Exception as exc:
            logger.error(f"Unexpected error during city detection: {exc}. Using placeholder.")
            return self._placeholder_detection(coordinate)

        logger.info(f"Detected city {city} for {coordinate.latitude}, {coordinate.longitude}")
        return CityDetection(
            city=str(city),
            country=address.get("country"),
            full_address=str(data.get("display_name") or city),
            success=True,
        )

    def _placeholder_detection(self, coordinate: Coordinate) -> CityDetection:
        return CityDetection(
            city=self.placeholder,
            country=None,
            full_address=f"Coordinates: {coordinate.latitude}, {coordinate.longitude}",
            success=False,
        )
