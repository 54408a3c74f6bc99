"""Minorista Transaction Repository Interface

Defines the contract for transaction log persistence. The log is append-only:
the interface deliberately has no update or delete operation.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from src.domain.minorista_transaction import MinoristaTransaction


class MinoristaTransactionRepository(ABC):
    """
    Repository interface for MinoristaTransaction persistence

    Entries are immutable. Idempotency is enforced via unique idempotency_key.
    """

    @abstractmethod
    async def create(self, transaction: MinoristaTransaction) -> MinoristaTransaction:
        """
        Append a new entry to the log

        Args:
            transaction: MinoristaTransaction entity to persist

        Returns:
            Created MinoristaTransaction with generated ID

        Raises:
            IntegrityError: If idempotency_key already exists
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> list[MinoristaTransaction]:
        """
        Retrieve every entry recorded under an idempotency key

        A discharge may record a DISCOUNT and a PROFIT entry under the same
        command; the PROFIT entry carries the key with a ":profit" suffix.

        Returns:
            Entries in log order, empty list if the key is unknown
        """
        pass

    @abstractmethod
    async def list_by_account(
        self,
        account_id: int,
        limit: int = 20,
        offset: int = 0,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> tuple[list[MinoristaTransaction], int]:
        """
        Retrieve entries for display, newest first, with pagination

        Returns:
            Tuple of (list of MinoristaTransaction, total count)
        """
        pass

    @abstractmethod
    async def get_history(
        self,
        account_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[MinoristaTransaction]:
        """
        Retrieve the full ordered log for replay

        Ordered by created_at, ties broken by id (log position).
        """
        pass

    @abstractmethod
    async def count_after(self, account_id: int, moment: datetime) -> int:
        """Number of entries recorded strictly after ``moment``"""
        pass
