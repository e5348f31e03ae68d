"""Notification endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...container import get_notification_repository, get_pipeline, get_user_directory
from ...errors import InvalidInput, NotificationNotFound, UpstreamUnavailable, UserNotFound
from ...persistence.notifications import NotificationRepository
from ...persistence.users import UserDirectory
from ...schemas.notifications import (
    LocationRequest,
    LocationResponse,
    NotificationModel,
    NotificationStatsModel,
)
from ...services.notifications.pipeline import LocationNotificationPipeline
from ...services.notifications.stats import notification_stats
from ...services.validation import validate_coordinate

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/location", response_model=LocationResponse, status_code=status.HTTP_200_OK)
def process_location(
    payload: LocationRequest,
    pipeline: LocationNotificationPipeline = Depends(get_pipeline),
    users: UserDirectory = Depends(get_user_directory),
) -> LocationResponse:
    """Recommend a nearby place and queue a notification on the user's preferred channel."""
    try:
        # Bad coordinates are rejected before the directory is consulted.
        validate_coordinate(payload.latitude, payload.longitude)
        user = users.find_by_id(payload.user_id)
        outcome = pipeline.process_location(payload.latitude, payload.longitude, payload.city, user)
        return LocationResponse.from_outcome(outcome)
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamUnavailable as exc:
        logging.error(f"Location processing unavailable: {exc}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error processing location for user {payload.user_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process location: {str(exc)}",
        ) from exc


@router.get("/user/{user_id}", response_model=List[NotificationModel], status_code=status.HTTP_200_OK)
def list_user_notifications(
    user_id: str,
    repository: NotificationRepository = Depends(get_notification_repository),
) -> List[NotificationModel]:
    try:
        records = repository.list_for_user(user_id)
    except UpstreamUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return [NotificationModel.from_record(record) for record in records]


@router.get("/user/{user_id}/stats", response_model=NotificationStatsModel, status_code=status.HTTP_200_OK)
def user_notification_stats(
    user_id: str,
    repository: NotificationRepository = Depends(get_notification_repository),
) -> NotificationStatsModel:
    try:
        records = repository.list_for_user(user_id)
    except UpstreamUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return NotificationStatsModel(**notification_stats(records))


@router.get("/{notification_id}", response_model=NotificationModel, status_code=status.HTTP_200_OK)
def get_notification(
    notification_id: str,
    repository: NotificationRepository = Depends(get_notification_repository),
) -> NotificationModel:
    try:
        return NotificationModel.from_record(repository.get(notification_id))
    except NotificationNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
