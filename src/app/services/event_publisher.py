"""Ledger Event Publisher Interface

Defines the contract for announcing committed ledger mutations so real-time
subscribers can invalidate cached balance views.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class LedgerMutationEvent(BaseModel):
    """Published once per committed ledger command"""

    minorista_id: str = Field(..., description="Minorista whose ledger changed")
    transaction_type: str = Field(..., description="Type of the primary entry")
    transaction_ids: list[int] = Field(..., description="Entries appended by the command")
    available_credit: Decimal = Field(..., description="Available credit after commit")
    balance_in_favor: Decimal = Field(..., description="Balance in favor after commit")
    occurred_at: datetime = Field(default_factory=datetime.utcnow)


class LedgerEventPublisher(ABC):
    """
    Abstract publisher for committed ledger mutations

    Implementations can fan out via:
    - Logging
    - Webhook (HTTP POST)
    - A WebSocket/pub-sub bridge owned by another service
    """

    @abstractmethod
    async def publish_mutation(self, event: LedgerMutationEvent) -> bool:
        """
        Announce a committed mutation

        Args:
            event: LedgerMutationEvent describing the commit

        Returns:
            True if the event was delivered, False otherwise
        """
        pass
