"""Notification webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Dict, Any
from agrigrow_lending.config import settings
from agrigrow_lending.domain.exceptions import NotificationDeliveryError
from agrigrow_lending.infrastructure.observability.metrics import notification_latency_histogram, notification_failure_counter

logger = logging.getLogger(__name__)


class NotificationClient:
    """Client for sending plain-data events to the SMS/email notification service"""

    def __init__(self, webhook_url: str | None = None, timeout: float | None = None):
        self.webhook_url = webhook_url or settings.notification_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_event(self, payload: Dict[str, Any]) -> None:
        """
        Deliver one event to the notification webhook.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^attempt)
        - Retries on HTTP errors and network failures
        - Tracks latency histogram and failure counter

        Raises:
            NotificationDeliveryError: All attempts failed
        """
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with notification_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                        return

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    notification_failure_counter.inc()

                    if attempt >= self.max_retries:
                        raise NotificationDeliveryError(
                            f"{payload.get('event')} delivery failed after {attempt} attempts: {e}"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)

    async def dispatch(self, payload: Dict[str, Any]) -> None:
        """Background-task entry point: deliver and log, never raise"""
        try:
            await self.send_event(payload)
        except NotificationDeliveryError as e:
            logger.error(str(e), extra={"event": payload.get("event"), "loan_id": payload.get("loan_id")})
