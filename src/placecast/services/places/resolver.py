"""Recommended-place resolution through a tiered fallback chain.

Tiers are tried in order (live Overpass query, curated catalog, synthetic
placeholders) and the first tier yielding a candidate with geometry wins.
Within the winning tier the candidate with the shortest routed distance is
chosen; candidates whose routing fails are left out of that comparison. When
nothing in the tier could be routed, the best-rated candidate is returned with
an unmeasured estimate rather than falling through, so a live result always
outranks catalog or synthetic data.

``resolve`` is total: every external failure is absorbed and reported through
``ResolvedPlace.source_tier``, ``TravelEstimate.is_measured`` and
``PlaceDetails.is_synthetic``.
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from ...config import Settings
from ...errors import UpstreamDegraded
from ...models.domain import (
    Coordinate,
    PlaceCandidate,
    PlaceDetails,
    PlaceTier,
    Recommendation,
    ResolvedPlace,
    TravelEstimate,
)
from ..routing.travel import TravelTimeCalculator
from .catalog import CATALOG, CatalogArea, catalog_details, catalog_places
from .overpass_client import OverpassClient
from .synthetic import synthetic_details, synthetic_places

logger = logging.getLogger(__name__)

# Upper bound on concurrent routing calls per request.
MAX_ROUTING_WORKERS = 8

TierSource = Callable[[Coordinate], Sequence[PlaceCandidate]]


class PlaceResolver:
    def __init__(
        self,
        settings: Settings,
        overpass: OverpassClient | None = None,
        travel: TravelTimeCalculator | None = None,
        catalog: tuple[CatalogArea, ...] = CATALOG,
        rng: random.Random | None = None,
    ) -> None:
        self._overpass = overpass or OverpassClient(settings)
        self._travel = travel or TravelTimeCalculator(settings)
        self._catalog = catalog
        self._rng = rng

    def _tiers(self) -> list[tuple[PlaceTier, TierSource]]:
        return [
            (PlaceTier.LIVE, self._overpass.nearby),
            (PlaceTier.CATALOG, lambda coordinate: catalog_places(coordinate, self._catalog)),
            (PlaceTier.SYNTHETIC, lambda coordinate: synthetic_places(coordinate, rng=self._rng)),
        ]

    def resolve(self, coordinate: Coordinate) -> Recommendation:
        for tier, source in self._tiers():
            candidates = self._fetch(tier, source, coordinate)
            usable = [candidate for candidate in candidates if candidate.coordinate is not None]
            if not usable:
                if candidates:
                    logger.warning(f"{tier.value} tier returned {len(candidates)} places without geometry")
                continue
            try:
                return self._select(tier, usable, coordinate)
            except Exception as exc:
                logger.error(f"Unexpected error selecting from {tier.value} tier: {exc}. Trying next tier.")
        return self._last_resort(coordinate)

    def _fetch(self, tier: PlaceTier, source: TierSource, coordinate: Coordinate) -> list[PlaceCandidate]:
        try:
            candidates = list(source(coordinate))
        except UpstreamDegraded as exc:
            logger.warning(f"{tier.value} tier unavailable: {exc}")
            return []
        except Exception as exc:
            logger.error(f"Unexpected error in {tier.value} tier: {exc}")
            return []
        logger.info(f"{tier.value} tier produced {len(candidates)} candidates")
        return candidates

    def _select(self, tier: PlaceTier, candidates: list[PlaceCandidate], origin: Coordinate) -> Recommendation:
        chosen: PlaceCandidate
        travel: TravelEstimate
        if tier is PlaceTier.SYNTHETIC:
            chosen = _best_rated(candidates)
            travel = self._travel.estimate(origin, chosen.coordinate)
        else:
            measured = self._measure_all(origin, candidates)
            if measured:
                # min() keeps the earliest candidate on equal distances.
                chosen, travel = min(measured, key=lambda pair: pair[1].distance_m)
            else:
                logger.warning(f"No {tier.value} candidate could be routed; using best-rated with an estimate")
                chosen = _best_rated(candidates)
                travel = self._travel.estimate(origin, chosen.coordinate)

        details = self._details_for(chosen)
        place = ResolvedPlace.from_candidate(chosen)
        logger.info(
            f"Recommended {place.name} from {tier.value} tier "
            f"({travel.distance_label}, {travel.duration_label}, measured={travel.is_measured})"
        )
        return Recommendation(place=place, details=details, travel=travel)

    def _measure_all(
        self, origin: Coordinate, candidates: list[PlaceCandidate]
    ) -> list[tuple[PlaceCandidate, TravelEstimate]]:
        def measure(candidate: PlaceCandidate) -> Optional[TravelEstimate]:
            try:
                return self._travel.measure(origin, candidate.coordinate)
            except UpstreamDegraded as exc:
                logger.warning(f"Error computing route to {candidate.name}: {exc}")
            except Exception as exc:
                logger.error(f"Unexpected routing error for {candidate.name}: {exc}")
            return None

        workers = max(1, min(MAX_ROUTING_WORKERS, len(candidates)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            estimates = list(executor.map(measure, candidates))
        return [
            (candidate, estimate)
            for candidate, estimate in zip(candidates, estimates)
            if estimate is not None and estimate.distance_m is not None
        ]

    def _details_for(self, candidate: PlaceCandidate) -> PlaceDetails:
        if candidate.tier is PlaceTier.CATALOG:
            return catalog_details(candidate)
        if candidate.tier is PlaceTier.SYNTHETIC:
            return synthetic_details(candidate)
        try:
            return self._overpass.details(candidate.place_id)
        except UpstreamDegraded as exc:
            logger.warning(f"Details lookup failed for {candidate.place_id}: {exc}")
        except Exception as exc:
            logger.error(f"Unexpected error fetching details for {candidate.place_id}: {exc}")
        return synthetic_details(candidate)

    def _last_resort(self, origin: Coordinate) -> Recommendation:
        candidate = synthetic_places(origin, rng=self._rng)[0]
        return Recommendation(
            place=ResolvedPlace.from_candidate(candidate),
            details=synthetic_details(candidate),
            travel=self._travel.estimate(origin, candidate.coordinate),
        )


def _best_rated(candidates: list[PlaceCandidate]) -> PlaceCandidate:
    return max(candidates, key=lambda candidate: candidate.rating)
