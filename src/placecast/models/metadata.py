"""Notification metadata payloads.

Metadata is stored as JSON on the notification row. In memory it is one of two
variants: ``RichMetadata`` carries the full place card (details, travel
estimate and location) and ``BasicMetadata`` is anything less complete. The
``kind`` field discriminates the two; rows written without it are classified by
completeness so renderer selection stays a type match.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .domain import Coordinate, PlaceDetails, Recommendation, TravelEstimate


class CoordinatesModel(BaseModel):
    latitude: float
    longitude: float


class LocationModel(BaseModel):
    city: str
    coordinates: CoordinatesModel
    detected: bool = False


class OpeningHoursModel(BaseModel):
    open_now: bool = False
    weekday_text: list[str] = Field(default_factory=list)


class PlaceDetailsModel(BaseModel):
    name: str
    address: str
    rating: float
    opening_hours: OpeningHoursModel
    website: Optional[str] = None
    phone: Optional[str] = None
    ratings_total: int = 0
    is_synthetic: bool = False


class TravelEstimateModel(BaseModel):
    duration_label: str
    distance_label: str
    is_measured: bool


class PlaceSummaryModel(BaseModel):
    place_id: str
    source_tier: str
    coordinates: CoordinatesModel
    types: list[str] = Field(default_factory=list)


class _MetadataBase(BaseModel):
    model_config = ConfigDict(extra="allow")

    place: Optional[PlaceSummaryModel] = None
    error_message: Optional[str] = None
    retry_count: Optional[int] = None
    delivered_at: Optional[str] = None
    provider_message_id: Optional[str] = None


class RichMetadata(_MetadataBase):
    kind: Literal["rich"] = "rich"
    place_details: PlaceDetailsModel
    travel_estimate: TravelEstimateModel
    location: LocationModel


class BasicMetadata(_MetadataBase):
    kind: Literal["basic"] = "basic"
    place_details: Optional[PlaceDetailsModel] = None
    travel_estimate: Optional[TravelEstimateModel] = None
    location: Optional[LocationModel] = None


NotificationMetadata = Annotated[Union[RichMetadata, BasicMetadata], Field(discriminator="kind")]

_metadata_adapter: TypeAdapter = TypeAdapter(NotificationMetadata)

_RICH_KEYS = ("place_details", "travel_estimate", "location")


def parse_metadata(raw: dict | None) -> RichMetadata | BasicMetadata:
    """Turn a stored metadata dict into its typed variant."""
    data = dict(raw or {})
    if data.get("kind") not in ("rich", "basic"):
        data["kind"] = "rich" if all(data.get(key) for key in _RICH_KEYS) else "basic"
    try:
        return _metadata_adapter.validate_python(data)
    except ValidationError:
        if data["kind"] == "rich":
            # Claimed rich but incomplete or malformed: degrade to basic.
            data["kind"] = "basic"
            for key in _RICH_KEYS:
                data.pop(key, None)
            return BasicMetadata.model_validate(data)
        raise


def merge_metadata(existing: dict | None, patch: dict[str, Any]) -> dict:
    """Shallow merge: keys in ``patch`` win, everything else is kept."""
    merged = dict(existing or {})
    merged.update(patch)
    return merged


def coordinates_model(coordinate: Coordinate) -> CoordinatesModel:
    return CoordinatesModel(latitude=coordinate.latitude, longitude=coordinate.longitude)


def details_model(details: PlaceDetails) -> PlaceDetailsModel:
    return PlaceDetailsModel(
        name=details.name,
        address=details.address,
        rating=details.rating,
        opening_hours=OpeningHoursModel(
            open_now=details.opening_hours.open_now,
            weekday_text=list(details.opening_hours.weekday_text),
        ),
        website=details.website,
        phone=details.phone,
        ratings_total=details.ratings_total,
        is_synthetic=details.is_synthetic,
    )


def travel_model(travel: TravelEstimate) -> TravelEstimateModel:
    return TravelEstimateModel(
        duration_label=travel.duration_label,
        distance_label=travel.distance_label,
        is_measured=travel.is_measured,
    )


def rich_metadata_for(
    recommendation: Recommendation, city: str, coordinate: Coordinate, *, detected: bool
) -> RichMetadata:
    place = recommendation.place
    return RichMetadata(
        place=PlaceSummaryModel(
            place_id=place.place_id,
            source_tier=place.source_tier.value,
            coordinates=coordinates_model(place.coordinate),
            types=list(place.types),
        ),
        place_details=details_model(recommendation.details),
        travel_estimate=travel_model(recommendation.travel),
        location=LocationModel(city=city, coordinates=coordinates_model(coordinate), detected=detected),
    )
