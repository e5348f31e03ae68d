"""Hands notification records to the channel queues."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ...config import Settings
from ...errors import UpstreamUnavailable
from ...models.domain import Channel, DeliveryJob, JobHandle, NotificationRecord
from .history import JobHistory

logger = logging.getLogger(__name__)


def queue_for(channel: Channel, settings: Settings) -> str:
    match channel:
        case Channel.EMAIL:
            return settings.email_queue
        case Channel.SMS:
            return settings.sms_queue
    raise ValueError(f"Unsupported channel: {channel}")


class DeliveryDispatcher:
    """Enqueues one ``DeliveryJob`` per record on its channel's queue.

    ``tasks`` maps each channel to the Celery task consuming that queue. The
    retry policy lives on the task, so enqueue returns as soon as the broker
    accepts the message.
    """

    def __init__(
        self,
        settings: Settings,
        tasks: Mapping[Channel, Any],
        history: Optional[JobHistory] = None,
    ) -> None:
        self.settings = settings
        self._tasks = dict(tasks)
        self._history = history

    def enqueue(self, record: NotificationRecord) -> JobHandle:
        job = DeliveryJob(notification_id=record.id, channel=record.channel)
        queue = queue_for(job.channel, self.settings)
        task = self._tasks.get(job.channel)
        if task is None:
            raise ValueError(f"No delivery task registered for channel '{job.channel.value}'")

        try:
            result = task.apply_async(kwargs=job.as_payload(), queue=queue)
        except Exception as exc:
            logger.exception(f"Failed to enqueue notification {record.id} on {queue}")
            raise UpstreamUnavailable(f"Delivery queue '{queue}' unavailable: {exc}") from exc

        logger.info(f"Enqueued notification {record.id} on {queue} as job {result.id}")
        return JobHandle(job_id=result.id, queue=queue, notification_id=record.id, channel=job.channel)

    def queue_stats(self) -> dict[str, dict[str, Any]]:
        stats: dict[str, dict[str, Any]] = {}
        for channel in Channel:
            queue = queue_for(channel, self.settings)
            entry: dict[str, Any] = {"queue": queue, "waiting": self._waiting(channel, queue)}
            if self._history is not None:
                entry.update(self._history.counts(queue))
            stats[channel.value] = entry
        return stats

    def _waiting(self, channel: Channel, queue: str) -> Optional[int]:
        task = self._tasks.get(channel)
        if task is None:
            return None
        try:
            with task.app.connection_for_read() as connection:
                connection.ensure_connection(max_retries=1)
                declared = connection.default_channel.queue_declare(queue=queue, passive=True)
        except Exception as exc:
            logger.warning(f"Could not inspect queue {queue}: {exc}")
            return None
        return declared.message_count
