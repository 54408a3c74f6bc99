"""Account Lock Interface

Serializes mutating commands per minorista account. Different accounts never
contend with each other.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager


class AccountLockManager(ABC):
    @abstractmethod
    def hold(self, minorista_id: str) -> AsyncContextManager[None]:
        """
        Hold the exclusive lock of one account for the body of an ``async with``

        Raises:
            ConcurrencyConflict: If the lock could not be acquired in time
        """
        pass
