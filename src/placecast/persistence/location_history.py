"""Location history sink."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from ..models.domain import Coordinate, User

LOCATION_HISTORY_TABLE = "location_history"


class LocationHistorySink(Protocol):
    def record(self, city: str, coordinate: Coordinate, user: User) -> None: ...


class SupabaseLocationHistory:
    def __init__(self, client) -> None:
        self._client = client

    def record(self, city: str, coordinate: Coordinate, user: User) -> None:
        self._client.table(LOCATION_HISTORY_TABLE).insert(
            {
                "user_id": user.id,
                "city": city,
                "latitude": coordinate.latitude,
                "longitude": coordinate.longitude,
                "arrival_date": datetime.now(timezone.utc).isoformat(),
            }
        ).execute()
