"""Notification record persistence backed by Supabase."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from ..errors import NotificationNotFound, UpstreamUnavailable
from ..models.domain import Channel, NotificationRecord, NotificationStatus
from ..models.metadata import merge_metadata

logger = logging.getLogger(__name__)

NOTIFICATIONS_TABLE = "notifications"


class NotificationRepository(Protocol):
    def create(self, record: NotificationRecord) -> NotificationRecord: ...

    def get(self, notification_id: str) -> NotificationRecord: ...

    def update(
        self,
        notification_id: str,
        *,
        fields: dict[str, Any],
        metadata_patch: Optional[dict[str, Any]] = None,
    ) -> NotificationRecord: ...

    def list_for_user(self, user_id: str) -> list[NotificationRecord]: ...


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    # Postgres returns ISO 8601, sometimes with a trailing Z.
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def record_to_row(record: NotificationRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.recipient_ref,
        "channel": record.channel.value,
        "message": record.message,
        "recommended_place": record.recommended_place_name,
        "status": record.status.value,
        "created_at": record.created_at.isoformat(),
        "sent_at": record.sent_at.isoformat() if record.sent_at else None,
        "metadata": record.metadata,
    }


def row_to_record(row: dict[str, Any]) -> NotificationRecord:
    return NotificationRecord(
        id=str(row["id"]),
        recipient_ref=str(row["user_id"]),
        channel=Channel(row["channel"]),
        message=row.get("message") or "",
        recommended_place_name=row.get("recommended_place") or "",
        status=NotificationStatus(row.get("status") or NotificationStatus.PENDING.value),
        created_at=_parse_timestamp(row.get("created_at")) or datetime.min,
        sent_at=_parse_timestamp(row.get("sent_at")),
        metadata=dict(row.get("metadata") or {}),
    )


def _serialize_fields(fields: dict[str, Any]) -> dict[str, Any]:
    serialized: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, (NotificationStatus, Channel)):
            value = value.value
        serialized[key] = value
    return serialized


class SupabaseNotificationRepository:
    """Stores records in the ``notifications`` table.

    ``update`` reads the current metadata and writes the merged result. Retries
    of one job never overlap, so read-merge-write cannot lose a concurrent patch
    for the same row.
    """

    def __init__(self, client) -> None:
        self._client = client

    def _table(self):
        return self._client.table(NOTIFICATIONS_TABLE)

    def create(self, record: NotificationRecord) -> NotificationRecord:
        try:
            response = self._table().insert(record_to_row(record)).execute()
        except Exception as exc:
            raise UpstreamUnavailable(f"Failed to store notification {record.id}: {exc}") from exc
        rows = response.data or []
        return row_to_record(rows[0]) if rows else record

    def get(self, notification_id: str) -> NotificationRecord:
        try:
            response = self._table().select("*").eq("id", notification_id).limit(1).execute()
        except Exception as exc:
            raise UpstreamUnavailable(f"Failed to load notification {notification_id}: {exc}") from exc
        rows = response.data or []
        if not rows:
            raise NotificationNotFound(notification_id)
        return row_to_record(rows[0])

    def update(
        self,
        notification_id: str,
        *,
        fields: dict[str, Any],
        metadata_patch: Optional[dict[str, Any]] = None,
    ) -> NotificationRecord:
        payload = _serialize_fields(fields)
        if metadata_patch:
            current = self.get(notification_id)
            payload["metadata"] = merge_metadata(current.metadata, metadata_patch)
        try:
            response = self._table().update(payload).eq("id", notification_id).execute()
        except Exception as exc:
            raise UpstreamUnavailable(f"Failed to update notification {notification_id}: {exc}") from exc
        rows = response.data or []
        if not rows:
            raise NotificationNotFound(notification_id)
        return row_to_record(rows[0])

    def list_for_user(self, user_id: str) -> list[NotificationRecord]:
        try:
            response = (
                self._table()
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            raise UpstreamUnavailable(f"Failed to list notifications for {user_id}: {exc}") from exc
        return [row_to_record(row) for row in response.data or []]
