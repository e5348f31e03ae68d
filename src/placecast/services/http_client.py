"""Shared httpx plumbing for the external JSON lookups."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..config import Settings
from ..errors import UpstreamDegraded

logger = logging.getLogger(__name__)


class JsonHttpClient:
    """Issues JSON requests with a timeout and a short retry budget.

    Every failure mode (transport error, timeout, bad status, undecodable body)
    surfaces as ``UpstreamDegraded`` so resolvers have a single thing to catch.
    """

    service_name = "http"

    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self.settings = settings
        self.max_retries = settings.http_max_retries
        self.backoff_seconds = settings.http_backoff_seconds
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(settings.http_timeout_seconds, connect=min(5.0, settings.http_timeout_seconds)),
            headers={"User-Agent": settings.http_user_agent, "Accept": "application/json"},
        )

    def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        attempt = 0
        while True:
            try:
                response = self._client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                # Client errors will not improve on retry, except rate limiting.
                if 400 <= status_code < 500 and status_code != 429:
                    raise UpstreamDegraded(self.service_name, f"HTTP {status_code}") from exc
                reason = f"HTTP {status_code}"
                error: Exception = exc
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                reason = f"{type(exc).__name__}: {exc}"
                error = exc
            except (httpx.HTTPError, ValueError) as exc:
                # ValueError covers undecodable JSON bodies.
                raise UpstreamDegraded(self.service_name, str(exc) or type(exc).__name__) from exc

            attempt += 1
            if attempt > self.max_retries:
                raise UpstreamDegraded(self.service_name, reason) from error
            wait_time = self.backoff_seconds * (2 ** (attempt - 1))
            logger.debug(
                f"{self.service_name} request failed ({reason}), retrying in {wait_time:.1f}s "
                f"(attempt {attempt}/{self.max_retries})"
            )
            time.sleep(wait_time)
