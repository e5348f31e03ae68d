from __future__ import annotations

import random

import pytest

from src.placecast.config import Settings
from tests.factories import InMemoryNotificationRepository


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        osrm_base_url="http://osrm.test",
        nominatim_url="http://nominatim.test/reverse",
        overpass_url="http://overpass.test/api/interpreter",
        http_max_retries=0,
        http_backoff_seconds=0.0,
        resend_api_key="re_test",
        twilio_account_sid="AC_test",
        twilio_auth_token="token",
        twilio_from_number="+15005550006",
    )


@pytest.fixture
def repository() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)
