"""Minorista Account Repository Interface

Defines the contract for minorista account persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.minorista_account import MinoristaAccount


class MinoristaAccountRepository(ABC):
    """
    Repository interface for MinoristaAccount persistence

    Mutating commands load the account with for_update=True so the row stays
    locked (SELECT FOR UPDATE) until the unit of work commits or rolls back.
    """

    @abstractmethod
    async def get_by_minorista_id(self, minorista_id: str, for_update: bool = False) -> Optional[MinoristaAccount]:
        """
        Retrieve account by minorista ID

        Args:
            minorista_id: Minorista identifier
            for_update: If True, lock the row with SELECT FOR UPDATE (pessimistic lock)

        Returns:
            MinoristaAccount if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, account: MinoristaAccount) -> MinoristaAccount:
        """
        Create a new account

        Args:
            account: MinoristaAccount entity to persist

        Returns:
            Created MinoristaAccount with generated ID
        """
        pass

    @abstractmethod
    async def save(self, account: MinoristaAccount) -> MinoristaAccount:
        """
        Persist the updated balances of an account

        Note:
            Must be called inside the unit of work that locked the account
        """
        pass

    @abstractmethod
    async def get_all(self) -> list[MinoristaAccount]:
        """Retrieve every account, ordered by id"""
        pass
