import pytest

from src.placecast.errors import InvalidInput, UpstreamUnavailable
from src.placecast.models.domain import Channel, NotificationStatus
from src.placecast.services.notifications.pipeline import LocationNotificationPipeline
from tests.factories import (
    BOGOTA,
    FakeCityResolver,
    FakeDispatcher,
    FakeHistory,
    FakePlaceResolver,
    make_user,
)


def _pipeline(repository, dispatcher=None, history=None, city_resolver=None, place_resolver=None):
    return LocationNotificationPipeline(
        city_resolver=city_resolver or FakeCityResolver(),
        place_resolver=place_resolver or FakePlaceResolver(),
        repository=repository,
        dispatcher=dispatcher or FakeDispatcher(),
        location_history=history,
    )


def test_process_location_stores_and_enqueues_pending_record(repository) -> None:
    dispatcher = FakeDispatcher()
    history = FakeHistory()
    user = make_user(channel=Channel.SMS)

    outcome = _pipeline(repository, dispatcher, history).process_location(4.6097, -74.0817, "Bogotá", user)

    assert outcome.city == "Bogotá"
    assert outcome.city_detected is False
    assert outcome.queued_channel is Channel.SMS
    assert outcome.job_id == "job-1"
    assert outcome.recommended_place.name == "Museo del Oro"
    assert outcome.travel_estimate.is_measured is False
    stored = repository.get(outcome.notification_id)
    assert stored.status is NotificationStatus.PENDING
    assert stored.channel is Channel.SMS
    assert stored.metadata["location"]["city"] == "Bogotá"
    assert dispatcher.enqueued == [stored]
    assert history.recorded == [("Bogotá", BOGOTA, "user-1")]


def test_detected_city_is_flagged(repository) -> None:
    outcome = _pipeline(repository, city_resolver=FakeCityResolver("Medellín")).process_location(
        6.25, -75.57, None, make_user()
    )

    assert outcome.city == "Medellín"
    assert outcome.city_detected is True
    assert repository.get(outcome.notification_id).metadata["location"]["detected"] is True


def test_invalid_coordinates_are_rejected_before_any_lookup(repository) -> None:
    city_resolver, place_resolver = FakeCityResolver(), FakePlaceResolver()
    pipeline = _pipeline(repository, city_resolver=city_resolver, place_resolver=place_resolver)

    with pytest.raises(InvalidInput):
        pipeline.process_location(91, 0, None, make_user())

    assert city_resolver.calls == []
    assert place_resolver.calls == []
    assert repository.rows == {}


def test_location_history_failure_does_not_abort(repository) -> None:
    history = FakeHistory(error=RuntimeError("insert failed"))

    outcome = _pipeline(repository, history=history).process_location(4.6097, -74.0817, "Bogotá", make_user())

    assert outcome.notification_id in repository.rows


def test_broker_outage_propagates(repository) -> None:
    dispatcher = FakeDispatcher(error=UpstreamUnavailable("queue down"))

    with pytest.raises(UpstreamUnavailable):
        _pipeline(repository, dispatcher).process_location(4.6097, -74.0817, "Bogotá", make_user())

    (stored,) = repository.rows.values()
    assert stored.status is NotificationStatus.FAILED
    assert stored.metadata["error_message"] == "queue down"
    assert stored.metadata["retry_count"] == 0
