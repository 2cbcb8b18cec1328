"""Ledger webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Dict, Any
from pos_gateway.config import settings
from pos_gateway.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter


class LedgerClient:
    """Client for sending sale events to the ledger / cash-register service"""

    def __init__(self, webhook_url: str | None = None):
        self.webhook_url = webhook_url or settings.ledger_webhook_url
        self.timeout = settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_sale_event(self, payload: Dict[str, Any]) -> None:
        """
        Send SALE_COMPLETED event to the ledger with retry logic.

        Retry strategy:
        - Exponential backoff: base × 2^(attempt-1)
        - Retries on 5xx errors and network failures
        - 4xx responses are not retried

        The sale is already committed when this runs, so a final failure
        is logged and counted instead of raised.

        Args:
            payload: Event data to send to ledger
        """
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                        return

                except httpx.HTTPStatusError as e:
                    attempt += 1
                    webhook_failure_counter.inc()
                    if e.response.status_code < 500 or attempt >= self.max_retries:
                        logging.error(
                            f"Ledger webhook rejected: {e.response.status_code}",
                            extra={"sale_id": payload.get("sale_id"), "attempts": attempt},
                        )
                        return

                except httpx.RequestError as e:
                    attempt += 1
                    webhook_failure_counter.inc()
                    if attempt >= self.max_retries:
                        logging.error(
                            f"Ledger webhook unreachable: {e}",
                            extra={"sale_id": payload.get("sale_id"), "attempts": attempt},
                        )
                        return

                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)
