"""Synchronous request path: coordinates in, queued notification out."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional

from ...errors import UpstreamUnavailable
from ...models.domain import Channel, Coordinate, ResolvedPlace, TravelEstimate, User
from ...persistence.location_history import LocationHistorySink
from ...persistence.notifications import NotificationRepository
from ..delivery.dispatcher import DeliveryDispatcher
from ..location.city_resolver import CityResolver
from ..places.resolver import PlaceResolver
from ..validation import validate_coordinate
from .builder import NotificationRecordBuilder
from .status import StatusTracker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LocationOutcome:
    city: str
    city_detected: bool
    coordinate: Coordinate
    recommended_place: ResolvedPlace
    travel_estimate: TravelEstimate
    notification_id: str
    queued_channel: Channel
    job_id: str


class LocationNotificationPipeline:
    """validate -> (city || place) -> build -> store -> enqueue.

    Only ``InvalidInput`` is raised for request data. Resolution failures are
    absorbed by the resolvers; a storage or broker outage propagates because
    the caller is promised an enqueued notification. A record the broker
    refuses is marked failed before the outage is re-raised.
    """

    def __init__(
        self,
        city_resolver: CityResolver,
        place_resolver: PlaceResolver,
        repository: NotificationRepository,
        dispatcher: DeliveryDispatcher,
        builder: NotificationRecordBuilder | None = None,
        location_history: LocationHistorySink | None = None,
        status_tracker: StatusTracker | None = None,
    ) -> None:
        self._city_resolver = city_resolver
        self._place_resolver = place_resolver
        self._repository = repository
        self._dispatcher = dispatcher
        self._builder = builder or NotificationRecordBuilder()
        self._location_history = location_history
        self._status_tracker = status_tracker or StatusTracker(repository)

    def process_location(
        self,
        latitude: Any,
        longitude: Any,
        city_name: Optional[str],
        user: User,
    ) -> LocationOutcome:
        coordinate = validate_coordinate(latitude, longitude)
        city_was_supplied = bool(city_name and city_name.strip())
        logger.info(
            f"Processing location {coordinate.latitude}, {coordinate.longitude} for user {user.id} "
            f"(city supplied: {city_was_supplied})"
        )

        with ThreadPoolExecutor(max_workers=2) as executor:
            city_future = executor.submit(self._city_resolver.resolve, coordinate, city_name)
            place_future = executor.submit(self._place_resolver.resolve, coordinate)
            city = city_future.result()
            recommendation = place_future.result()

        record = self._builder.build(user, city, coordinate, recommendation, city_was_supplied)
        record = self._repository.create(record)
        try:
            handle = self._dispatcher.enqueue(record)
        except UpstreamUnavailable as exc:
            self._status_tracker.mark_failed(record.id, str(exc), 0)
            raise

        self._record_history(city, coordinate, user)
        logger.info(f"Notification {record.id} queued on {handle.queue} (job {handle.job_id})")

        return LocationOutcome(
            city=city,
            city_detected=not city_was_supplied,
            coordinate=coordinate,
            recommended_place=recommendation.place,
            travel_estimate=recommendation.travel,
            notification_id=record.id,
            queued_channel=record.channel,
            job_id=handle.job_id,
        )

    def _record_history(self, city: str, coordinate: Coordinate, user: User) -> None:
        if self._location_history is None:
            return
        try:
            self._location_history.record(city, coordinate, user)
        except Exception as exc:
            logger.warning(f"Could not save location history for user {user.id}: {exc}")
