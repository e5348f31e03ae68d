"""Notification request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.domain import NotificationRecord
from ..services.notifications.pipeline import LocationOutcome


class LocationRequest(BaseModel):
    user_id: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    city: Optional[str] = Field(
        default=None,
        description="City reported by the client. When given it is used as-is and not reverse geocoded.",
    )


class RecommendedPlaceModel(BaseModel):
    place_id: str
    name: str
    address: str
    rating: float
    latitude: float
    longitude: float
    opening_hours: str
    types: List[str]
    source_tier: str


class TravelEstimateModel(BaseModel):
    duration: str
    distance: str
    is_measured: bool


class LocationResponse(BaseModel):
    success: bool = True
    city: str
    city_detected: bool
    recommended_place: RecommendedPlaceModel
    travel_estimate: TravelEstimateModel
    notification_id: str
    channel: str
    job_id: str
    message: str

    @classmethod
    def from_outcome(cls, outcome: LocationOutcome) -> "LocationResponse":
        place = outcome.recommended_place
        travel = outcome.travel_estimate
        return cls(
            city=outcome.city,
            city_detected=outcome.city_detected,
            recommended_place=RecommendedPlaceModel(
                place_id=place.place_id,
                name=place.name,
                address=place.address,
                rating=place.rating,
                latitude=place.coordinate.latitude,
                longitude=place.coordinate.longitude,
                opening_hours=place.opening_hours_summary,
                types=place.types,
                source_tier=place.source_tier.value,
            ),
            travel_estimate=TravelEstimateModel(
                duration=travel.duration_label,
                distance=travel.distance_label,
                is_measured=travel.is_measured,
            ),
            notification_id=outcome.notification_id,
            channel=outcome.queued_channel.value,
            job_id=outcome.job_id,
            message=f"Notification queued for {outcome.queued_channel.value} delivery",
        )


class NotificationModel(BaseModel):
    id: str
    user_id: str
    channel: str
    message: str
    recommended_place: str
    status: str
    created_at: datetime
    sent_at: Optional[datetime] = None
    metadata: Dict[str, Any]

    @classmethod
    def from_record(cls, record: NotificationRecord) -> "NotificationModel":
        return cls(
            id=record.id,
            user_id=record.recipient_ref,
            channel=record.channel.value,
            message=record.message,
            recommended_place=record.recommended_place_name,
            status=record.status.value,
            created_at=record.created_at,
            sent_at=record.sent_at,
            metadata=record.metadata,
        )


class NotificationStatsModel(BaseModel):
    total: int
    sent: int
    failed: int
    pending: int
    by_channel: Dict[str, int]
    success_rate: str
