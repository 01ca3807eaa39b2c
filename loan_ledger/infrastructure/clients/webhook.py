"""Change-event webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Dict, Any
from loan_ledger.config import settings
from loan_ledger.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter

logger = logging.getLogger(__name__)


def change_event(event: str, table: str, user_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
    """Build an insert/update/delete notification carrying the full changed row"""
    return {"event": event, "table": table, "user_id": user_id, "record": record}


class ChangeWebhookClient:
    """Fans out loan and alert row changes to a subscriber URL"""

    def __init__(self, webhook_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.webhook_url = webhook_url or settings.change_webhook_url
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    async def send_change_event(self, payload: Dict[str, Any]) -> bool:
        """
        Deliver a change event with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^(attempt-1))
        - Retries on non-2xx responses and network failures
        - Gives up after max_retries and logs; never raises, the change is
          already committed

        Returns:
            True when delivered, False when skipped or abandoned
        """
        if not self.enabled:
            return False

        attempt = 0
        async with httpx.AsyncClient(transport=self.transport) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(
                            self.webhook_url,
                            json=payload,
                            timeout=10.0,
                        )
                        response.raise_for_status()
                        return True

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    if attempt >= self.max_retries:
                        logger.error(
                            f"Change event delivery abandoned after {attempt} attempts: {e}",
                            extra={"event": payload.get("event"), "table": payload.get("table")},
                        )
                        return False

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)

        return False
