"""
Readlater Backend — Analytics Event Client
============================================

What:  Fire-and-forget product analytics (Segment-compatible /v1/track).
How:   track() schedules an asyncio task that POSTs the event with httpx.
       Transient failures (transport errors, 5xx) are retried by tenacity
       with exponential backoff + jitter; anything else is logged and dropped.
Who:   Device token service and the link resolver.
When:  Inline with the request; the caller never awaits delivery.

Delivery guarantees:
    None. An event can be lost if the process dies before the task finishes.
    aclose() (called from the app lifespan) drains in-flight sends.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)

RETRY_MAX_ATTEMPTS = 3


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class AnalyticsClient:
    """
    Sends track events for one deployment.

    With an empty write key (local/dev) events are logged at DEBUG and dropped.
    """

    def __init__(
        self,
        write_key: str,
        endpoint: str = "https://api.segment.io/v1/track",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.write_key = write_key
        self.endpoint = endpoint
        self._client: Optional[httpx.AsyncClient] = None
        if write_key:
            self._client = httpx.AsyncClient(
                timeout=timeout,
                auth=(write_key, ""),
                transport=transport,
            )
        self._pending: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def track(
        self,
        user_id: uuid.UUID,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Schedule one event. Never raises, never blocks."""
        if self._client is None:
            logger.debug("Analytics disabled; dropping event %s for %s", event, user_id)
            return

        payload = {
            "userId": str(user_id),
            "event": event,
            "properties": properties or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        task = asyncio.get_running_loop().create_task(self._deliver(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, payload: Dict[str, Any]) -> None:
        try:
            await self._send(payload)
        except Exception as e:
            logger.warning(
                "Analytics event %s dropped: %s",
                payload["event"],
                str(e),
            )

    @retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(RETRY_MAX_ATTEMPTS),
        wait=wait_exponential_jitter(multiplier=0.5, max=4, jitter=0.5),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _send(self, payload: Dict[str, Any]) -> None:
        response = await self._client.post(self.endpoint, json=payload)
        response.raise_for_status()

    async def aclose(self) -> None:
        """Wait for in-flight events, then close the HTTP client."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        if self._client is not None:
            await self._client.aclose()
