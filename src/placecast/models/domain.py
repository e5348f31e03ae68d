"""Domain models for coordinates, places, users and notification records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Channel(str, Enum):
    EMAIL = "email"
    SMS = "sms"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class PlaceTier(str, Enum):
    """Fallback tier that produced a place, best first."""

    LIVE = "live"
    CATALOG = "catalog"
    SYNTHETIC = "synthetic"


@dataclass(frozen=True, slots=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(slots=True)
class OpeningHours:
    open_now: bool
    weekday_text: list[str] = field(default_factory=list)

    def summary(self) -> str:
        return "; ".join(self.weekday_text) if self.weekday_text else "Hours not specified"


@dataclass(slots=True)
class PlaceCandidate:
    """A point of interest returned by one tier, before selection."""

    place_id: str
    name: str
    address: str
    rating: float
    types: list[str]
    coordinate: Optional[Coordinate]
    opening_hours: OpeningHours
    tier: PlaceTier


@dataclass(slots=True)
class PlaceDetails:
    name: str
    address: str
    rating: float
    opening_hours: OpeningHours
    website: Optional[str] = None
    phone: Optional[str] = None
    ratings_total: int = 0
    is_synthetic: bool = False


@dataclass(slots=True)
class ResolvedPlace:
    place_id: str
    name: str
    address: str
    rating: float
    coordinate: Coordinate
    opening_hours_summary: str
    types: list[str]
    source_tier: PlaceTier

    @classmethod
    def from_candidate(cls, candidate: PlaceCandidate) -> "ResolvedPlace":
        if candidate.coordinate is None:
            raise ValueError(f"Candidate '{candidate.name}' has no geometry.")
        return cls(
            place_id=candidate.place_id,
            name=candidate.name,
            address=candidate.address,
            rating=candidate.rating,
            coordinate=candidate.coordinate,
            opening_hours_summary=candidate.opening_hours.summary(),
            types=list(candidate.types),
            source_tier=candidate.tier,
        )


@dataclass(frozen=True, slots=True)
class TravelEstimate:
    duration_label: str
    distance_label: str
    is_measured: bool
    distance_m: Optional[float] = None
    duration_s: Optional[float] = None


@dataclass(slots=True)
class Recommendation:
    """Outcome of place resolution: the chosen place, its details and travel time."""

    place: ResolvedPlace
    details: PlaceDetails
    travel: TravelEstimate


@dataclass(slots=True)
class User:
    id: str
    name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    preferred_channel: Channel = Channel.EMAIL


@dataclass(slots=True)
class NotificationRecord:
    id: str
    recipient_ref: str
    channel: Channel
    message: str
    recommended_place_name: str
    status: NotificationStatus
    created_at: datetime
    metadata: dict
    sent_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class DeliveryJob:
    notification_id: str
    channel: Channel

    def as_payload(self) -> dict:
        return {"notification_id": self.notification_id, "channel": self.channel.value}


@dataclass(frozen=True, slots=True)
class JobHandle:
    job_id: str
    queue: str
    notification_id: str
    channel: Channel


@dataclass(frozen=True, slots=True)
class SendResult:
    success: bool
    provider_message_id: Optional[str] = None
    error: Optional[str] = None
