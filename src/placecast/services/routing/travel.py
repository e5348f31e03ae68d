"""Travel-time estimation between the user and a candidate place."""

from __future__ import annotations

import logging
import random

from ...config import Settings
from ...errors import UpstreamDegraded
from ...models.domain import Coordinate, TravelEstimate
from ..geospatial import distance_m, format_distance, format_duration
from .osrm_client import OSRMClient

logger = logging.getLogger(__name__)


class TravelTimeCalculator:
    """Measures routes through OSRM and produces honest estimates when it cannot."""

    def __init__(
        self,
        settings: Settings,
        client: OSRMClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.min_minutes = settings.estimate_min_minutes
        self.max_minutes = settings.estimate_max_minutes
        self._client = client
        if self._client is None and settings.osrm_base_url:
            self._client = OSRMClient(settings)
        self._rng = rng or random.Random()

    def measure(self, origin: Coordinate, destination: Coordinate) -> TravelEstimate:
        """Routed estimate; raises ``UpstreamDegraded`` when no route can be computed."""
        if self._client is None:
            raise UpstreamDegraded("osrm", "routing is not configured")
        meters, seconds = self._client.route(origin, destination)
        return TravelEstimate(
            duration_label=format_duration(seconds),
            distance_label=format_distance(meters),
            is_measured=True,
            distance_m=meters,
            duration_s=seconds,
        )

    def estimate(self, origin: Coordinate, destination: Coordinate) -> TravelEstimate:
        """Unmeasured estimate: random plausible duration, straight-line distance."""
        minutes = self._rng.randint(self.min_minutes, self.max_minutes)
        meters = distance_m(origin, destination)
        return TravelEstimate(
            duration_label=f"{minutes} min",
            distance_label=format_distance(meters),
            is_measured=False,
            distance_m=meters,
            duration_s=minutes * 60.0,
        )
