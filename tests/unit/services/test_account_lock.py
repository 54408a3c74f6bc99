"""Unit tests for InProcessAccountLockManager"""

import asyncio
import pytest

from src.adapter.services.account_lock import InProcessAccountLockManager
from src.domain.exceptions import ConcurrencyConflict


@pytest.mark.asyncio
class TestInProcessAccountLockManager:
    async def test_same_account_is_serialized(self):
        """
        Given: Two commands on the same minorista
        When: Both run concurrently
        Then: The second only starts after the first released the lock
        """
        # Arrange
        manager = InProcessAccountLockManager(timeout_seconds=1.0)
        events = []

        async def command(name):
            async with manager.hold("minorista_123"):
                events.append(f"{name}:start")
                await asyncio.sleep(0.01)
                events.append(f"{name}:end")

        # Act
        await asyncio.gather(command("a"), command("b"))

        # Assert
        assert events == ["a:start", "a:end", "b:start", "b:end"]

    async def test_timeout_raises_concurrency_conflict(self):
        manager = InProcessAccountLockManager(timeout_seconds=0.05)

        async with manager.hold("minorista_123"):
            with pytest.raises(ConcurrencyConflict):
                async with manager.hold("minorista_123"):
                    pass

    async def test_different_accounts_do_not_block(self):
        manager = InProcessAccountLockManager(timeout_seconds=0.05)

        async with manager.hold("minorista_a"):
            async with manager.hold("minorista_b"):
                pass

    async def test_lock_released_after_error(self):
        manager = InProcessAccountLockManager(timeout_seconds=0.05)

        with pytest.raises(ValueError):
            async with manager.hold("minorista_123"):
                raise ValueError("boom")

        async with manager.hold("minorista_123"):
            pass
