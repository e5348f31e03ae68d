"""Per-user notification statistics."""

from __future__ import annotations

from typing import Iterable

from ...models.domain import Channel, NotificationRecord, NotificationStatus


def notification_stats(records: Iterable[NotificationRecord]) -> dict:
    records = list(records)
    total = len(records)
    by_status = {status: 0 for status in NotificationStatus}
    by_channel = {channel: 0 for channel in Channel}
    for record in records:
        by_status[record.status] += 1
        by_channel[record.channel] += 1

    sent = by_status[NotificationStatus.SENT]
    return {
        "total": total,
        "sent": sent,
        "failed": by_status[NotificationStatus.FAILED],
        "pending": by_status[NotificationStatus.PENDING],
        "by_channel": {channel.value: count for channel, count in by_channel.items()},
        "success_rate": f"{sent / total * 100:.1f}%" if total else "0%",
    }
