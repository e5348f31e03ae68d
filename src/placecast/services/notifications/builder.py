"""Assembly of pending notification records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable

from ...models.domain import Coordinate, NotificationRecord, NotificationStatus, Recommendation, User
from ...models.metadata import rich_metadata_for


class NotificationRecordBuilder:
    """Builds a ``pending`` record from resolved data. No external calls."""

    def __init__(
        self,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._id_factory = id_factory
        self._clock = clock

    def build(
        self,
        user: User,
        city: str,
        coordinate: Coordinate,
        recommendation: Recommendation,
        city_was_supplied: bool,
    ) -> NotificationRecord:
        metadata = rich_metadata_for(recommendation, city, coordinate, detected=not city_was_supplied)
        return NotificationRecord(
            id=self._id_factory(),
            recipient_ref=user.id,
            channel=user.preferred_channel,
            message=f"Tourist recommendation for {city}",
            recommended_place_name=recommendation.place.name,
            status=NotificationStatus.PENDING,
            created_at=self._clock(),
            metadata=metadata.model_dump(mode="json", exclude_none=True),
        )
