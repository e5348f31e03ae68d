"""Celery delivery tasks, one per channel queue.

A job makes at most ``delivery_max_attempts`` attempts. Only
``DeliveryFailure`` is retried, with exponential backoff starting at
``delivery_backoff_seconds``; a missing recipient, phone or record fails the
job on the spot.
"""

from __future__ import annotations

import logging

from celery import Task

from .. import container
from ..config import settings
from ..errors import DeliveryFailure
from ..models.domain import Channel
from ..services.delivery.dispatcher import queue_for
from .celery_app import app

logger = logging.getLogger(__name__)

RETRY_OPTIONS = {
    "autoretry_for": (DeliveryFailure,),
    "max_retries": settings.delivery_max_retries,
    "retry_backoff": settings.delivery_backoff_seconds,
    "retry_backoff_max": settings.delivery_backoff_max_seconds,
    "retry_jitter": False,
}


class DeliveryTask(Task):
    """Logs every outcome and keeps the bounded per-queue history."""

    def _context(self, kwargs: dict) -> tuple[str, str, int]:
        channel = Channel(kwargs.get("channel", Channel.EMAIL.value))
        return queue_for(channel, settings), kwargs.get("notification_id", ""), self.request.retries + 1

    def on_success(self, retval, task_id, args, kwargs) -> None:
        queue, notification_id, attempts = self._context(kwargs)
        logger.info(f"Job {task_id} on {queue} completed for notification {notification_id}")
        container.get_job_history().record_completed(queue, task_id, notification_id, attempts)

    def on_retry(self, exc, task_id, args, kwargs, einfo) -> None:
        queue, notification_id, attempts = self._context(kwargs)
        logger.warning(
            f"Job {task_id} on {queue} attempt {attempts}/{self.max_retries + 1} failed, retrying: {exc}"
        )

    def on_failure(self, exc, task_id, args, kwargs, einfo) -> None:
        queue, notification_id, attempts = self._context(kwargs)
        logger.error(f"Job {task_id} on {queue} failed after {attempts} attempt(s): {exc}")
        container.get_job_history().record_failed(queue, task_id, notification_id, attempts, str(exc))


def _deliver(task: Task, channel: Channel, notification_id: str) -> dict:
    attempt = task.request.retries + 1
    worker = container.get_channel_worker(channel)
    result = worker.process(notification_id, attempt=attempt)
    return {
        "notification_id": notification_id,
        "channel": channel.value,
        "attempts": attempt,
        "provider_message_id": result.provider_message_id,
    }


@app.task(bind=True, base=DeliveryTask, name="placecast.deliver_email", **RETRY_OPTIONS)
def deliver_email(self, notification_id: str, channel: str = Channel.EMAIL.value) -> dict:
    return _deliver(self, Channel.EMAIL, notification_id)


@app.task(bind=True, base=DeliveryTask, name="placecast.deliver_sms", **RETRY_OPTIONS)
def deliver_sms(self, notification_id: str, channel: str = Channel.SMS.value) -> dict:
    return _deliver(self, Channel.SMS, notification_id)


DELIVERY_TASKS = {
    Channel.EMAIL: deliver_email,
    Channel.SMS: deliver_sms,
}
