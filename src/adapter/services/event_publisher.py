"""Ledger Event Publisher Implementations

Provides concrete implementations for announcing committed ledger mutations.
"""

import logging
from typing import Optional
import httpx
from src.app.services.event_publisher import LedgerEventPublisher, LedgerMutationEvent

logger = logging.getLogger(__name__)


class LoggingLedgerEventPublisher(LedgerEventPublisher):
    """
    Publisher that logs mutations

    Useful for development and testing, or as a fallback.
    """

    async def publish_mutation(self, event: LedgerMutationEvent) -> bool:
        logger.info(
            f"[LEDGER MUTATION] Minorista: {event.minorista_id}, "
            f"Type: {event.transaction_type}, "
            f"Entries: {event.transaction_ids}, "
            f"Available: {event.available_credit}, "
            f"InFavor: {event.balance_in_favor}"
        )
        return True


class WebhookLedgerEventPublisher(LedgerEventPublisher):
    """
    Publisher that POSTs mutations to a webhook

    The receiving side (e.g. the real-time notification layer) fans the event
    out to subscribers.
    """

    def __init__(self, webhook_url: str, timeout: float = 5.0):
        """
        Initialize webhook publisher

        Args:
            webhook_url: URL to POST events to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def publish_mutation(self, event: LedgerMutationEvent) -> bool:
        """
        Send mutation event via webhook

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {
            "type": "ledger_mutation",
            **event.model_dump(mode="json"),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.debug(
                    f"Mutation event for minorista {event.minorista_id} sent to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to publish mutation event for minorista {event.minorista_id}: {e}"
            )
            return False


class CompositeLedgerEventPublisher(LedgerEventPublisher):
    """
    Publisher that delegates to multiple publishers

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, publishers: list[LedgerEventPublisher]):
        self.publishers = publishers

    async def publish_mutation(self, event: LedgerMutationEvent) -> bool:
        """
        Publish to all configured publishers

        Returns:
            True if at least one publisher succeeded, False otherwise
        """
        success = False
        for publisher in self.publishers:
            try:
                if await publisher.publish_mutation(event):
                    success = True
            except Exception as e:
                logger.error(f"Event publisher {type(publisher).__name__} failed: {e}")
        return success


def create_event_publisher(webhook_url: Optional[str] = None) -> LedgerEventPublisher:
    """
    Factory function to create the appropriate publisher

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     publisher with logging + webhook. Otherwise, just logging.

    Returns:
        Configured LedgerEventPublisher
    """
    publishers: list[LedgerEventPublisher] = [LoggingLedgerEventPublisher()]

    if webhook_url:
        publishers.append(WebhookLedgerEventPublisher(webhook_url))

    if len(publishers) == 1:
        return publishers[0]

    return CompositeLedgerEventPublisher(publishers)
