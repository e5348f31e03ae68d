"""Bounded per-queue job history kept in Redis lists."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import redis

from ...config import Settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "placecast:jobs"
COMPLETED = "completed"
FAILED = "failed"


def history_key(queue: str, outcome: str) -> str:
    return f"{KEY_PREFIX}:{queue}:{outcome}"


class JobHistory:
    """Newest-first record of finished jobs, trimmed on every push.

    Observability only: a Redis error is logged and never fails the job.
    """

    def __init__(self, client: redis.Redis, completed_limit: int = 20, failed_limit: int = 50) -> None:
        self._client = client
        self._limits = {COMPLETED: completed_limit, FAILED: failed_limit}

    @classmethod
    def from_settings(cls, settings: Settings) -> "JobHistory":
        client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        return cls(client, settings.history_completed_limit, settings.history_failed_limit)

    def record_completed(self, queue: str, job_id: str, notification_id: str, attempts: int) -> bool:
        return self._push(queue, COMPLETED, {
            "job_id": job_id,
            "notification_id": notification_id,
            "attempts": attempts,
        })

    def record_failed(
        self,
        queue: str,
        job_id: str,
        notification_id: str,
        attempts: int,
        error: Optional[str],
    ) -> bool:
        return self._push(queue, FAILED, {
            "job_id": job_id,
            "notification_id": notification_id,
            "attempts": attempts,
            "error": error,
        })

    def recent(self, queue: str, outcome: str, limit: Optional[int] = None) -> list[dict[str, Any]]:
        end = -1 if limit is None else limit - 1
        try:
            raw = self._client.lrange(history_key(queue, outcome), 0, end)
        except redis.RedisError as exc:
            logger.warning(f"Could not read {outcome} history for {queue}: {exc}")
            return []
        return [json.loads(item) for item in raw]

    def counts(self, queue: str) -> dict[str, int]:
        try:
            return {
                COMPLETED: int(self._client.llen(history_key(queue, COMPLETED))),
                FAILED: int(self._client.llen(history_key(queue, FAILED))),
            }
        except redis.RedisError as exc:
            logger.warning(f"Could not read history counts for {queue}: {exc}")
            return {COMPLETED: 0, FAILED: 0}

    def _push(self, queue: str, outcome: str, entry: dict[str, Any]) -> bool:
        limit = self._limits[outcome]
        if limit <= 0:
            return False
        entry["finished_at"] = datetime.now(timezone.utc).isoformat()
        key = history_key(queue, outcome)
        try:
            pipe = self._client.pipeline()
            pipe.lpush(key, json.dumps(entry))
            pipe.ltrim(key, 0, limit - 1)
            pipe.execute()
        except redis.RedisError as exc:
            logger.warning(f"Could not record {outcome} job {entry['job_id']} for {queue}: {exc}")
            return False
        return True
