"""Delivery status transitions for notification records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ...models.domain import NotificationRecord, NotificationStatus
from ...persistence.notifications import NotificationRepository

logger = logging.getLogger(__name__)


class StatusTracker:
    """The only writer of a record after creation.

    Both transitions merge into the stored metadata; keys they do not touch
    (place details, location, travel estimate) survive every retry.
    """

    def __init__(
        self,
        repository: NotificationRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._repository = repository
        self._clock = clock

    def mark_sent(self, notification_id: str, provider_message_id: Optional[str] = None) -> NotificationRecord:
        now = self._clock()
        patch = {"delivered_at": now.isoformat()}
        if provider_message_id:
            patch["provider_message_id"] = provider_message_id
        record = self._repository.update(
            notification_id,
            fields={"status": NotificationStatus.SENT, "sent_at": now},
            metadata_patch=patch,
        )
        logger.info(f"Notification {notification_id} marked sent")
        return record

    def mark_failed(self, notification_id: str, error_message: str, retry_count: int = 1) -> NotificationRecord:
        record = self._repository.update(
            notification_id,
            fields={"status": NotificationStatus.FAILED},
            metadata_patch={"error_message": error_message, "retry_count": retry_count},
        )
        logger.warning(f"Notification {notification_id} marked failed (attempt {retry_count}): {error_message}")
        return record
