import itertools
import pytest
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.adapter.services.account_lock import InProcessAccountLockManager
from src.domain.minorista_account import MinoristaAccount


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def mock_account_repo():
    """Mock minorista account repository; save echoes the account back"""
    repo = MagicMock()
    repo.get_by_minorista_id = AsyncMock(return_value=None)
    repo.save = AsyncMock(side_effect=lambda account: account)
    return repo


@pytest.fixture
def mock_transaction_repo():
    """Mock minorista transaction repository; create assigns log positions"""
    repo = MagicMock()
    ids = itertools.count(1)

    async def create(entry):
        entry.id = next(ids)
        return entry

    repo.create = AsyncMock(side_effect=create)
    repo.get_by_idempotency_key = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def lock_manager():
    return InProcessAccountLockManager(timeout_seconds=0.5)


@pytest.fixture
def mock_publisher():
    publisher = MagicMock()
    publisher.publish_mutation = AsyncMock(return_value=True)
    return publisher


@pytest.fixture
def busy_lock_manager():
    """Lock manager whose every acquisition times out"""
    from src.domain.exceptions import ConcurrencyConflict

    manager = MagicMock()

    @asynccontextmanager
    async def hold(minorista_id):
        raise ConcurrencyConflict(f"Another ledger operation for minorista {minorista_id} is in progress")
        yield

    manager.hold = hold
    return manager


@pytest.fixture
def make_account():
    """Factory for MinoristaAccount rows with the given balances"""

    def _make(
        credit_limit="1000.00",
        available_credit="1000.00",
        balance_in_favor="0.00",
        accumulated_profit="0.00",
        minorista_id="minorista_123",
    ):
        return MinoristaAccount(
            id=1,
            minorista_id=minorista_id,
            credit_limit=Decimal(credit_limit),
            available_credit=Decimal(available_credit),
            balance_in_favor=Decimal(balance_in_favor),
            accumulated_profit=Decimal(accumulated_profit),
            created_at=datetime.utcnow(),
            updated_at=datetime.utcnow(),
        )

    return _make
