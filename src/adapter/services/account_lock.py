"""In-process per-account locks

Complements the row lock taken by SELECT FOR UPDATE: databases without row
locking (SQLite) still get one writer per account inside a process.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator
from src.app.services.account_lock import AccountLockManager
from src.domain.exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)


class InProcessAccountLockManager(AccountLockManager):
    """
    One asyncio.Lock per minorista, created on demand

    Locks are held in a WeakValueDictionary, so an account's lock disappears
    once no command is holding or waiting on it.
    """

    def __init__(self, timeout_seconds: float = 5.0):
        self.timeout_seconds = timeout_seconds
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, minorista_id: str) -> asyncio.Lock:
        lock = self._locks.get(minorista_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[minorista_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, minorista_id: str) -> AsyncIterator[None]:
        lock = self._lock_for(minorista_id)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"Lock wait for minorista {minorista_id} exceeded {self.timeout_seconds}s"
            )
            raise ConcurrencyConflict(
                f"Another ledger operation for minorista {minorista_id} is in progress"
            )

        try:
            yield
        finally:
            lock.release()
