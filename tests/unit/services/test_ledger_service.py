"""Unit tests for LedgerService"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock

from src.app.services.ledger_service import LedgerService


@pytest.fixture
def service(mock_uow, mock_account_repo, mock_transaction_repo, lock_manager, mock_publisher):
    return LedgerService(
        uow=mock_uow,
        account_repo=mock_account_repo,
        transaction_repo=mock_transaction_repo,
        lock_manager=lock_manager,
        event_publisher=mock_publisher,
    )


@pytest.mark.asyncio
class TestLedgerService:
    async def test_malformed_amount_is_invalid_amount(self, service, mock_account_repo):
        """
        Given: An amount that is not a number at all
        When: A discharge is requested through the service
        Then: INVALID_AMOUNT is returned before any use case runs
        """
        # Act
        result = await service.apply_discharge("minorista_123", "twelve", "0.05")

        # Assert
        assert result.is_err()
        assert result.error.code == "INVALID_AMOUNT"
        mock_account_repo.get_by_minorista_id.assert_not_called()

    async def test_string_amounts_reach_the_ledger(self, service, mock_account_repo, make_account):
        account = make_account()
        mock_account_repo.get_by_minorista_id = AsyncMock(return_value=account)

        result = await service.apply_discharge("minorista_123", "600.00", "0.05", idempotency_key="giro_1")

        assert result.is_ok()
        assert account.available_credit == Decimal("430.00")

    async def test_commands_share_the_ledger(self, service, mock_account_repo, make_account):
        """A discharge followed by a debt payment sees the updated projection"""
        # Arrange
        account = make_account()
        mock_account_repo.get_by_minorista_id = AsyncMock(return_value=account)

        # Act
        await service.apply_discharge("minorista_123", Decimal("600.00"), Decimal("0.05"))
        payment = await service.pay_debt("minorista_123", Decimal("570.00"))
        snapshot = await service.get_account("minorista_123")

        # Assert
        assert payment.is_ok()
        assert snapshot.value.available_credit == Decimal("1000.00")
        assert snapshot.value.debt == Decimal("0")

    async def test_preview_does_not_mutate(self, service, mock_account_repo, mock_uow, make_account):
        account = make_account()
        mock_account_repo.get_by_minorista_id = AsyncMock(return_value=account)

        result = await service.evaluate_sufficiency("minorista_123", "600.00", "0.05")

        assert result.value.accepted is True
        assert account.available_credit == Decimal("1000.00")
        mock_uow.commit.assert_not_called()
