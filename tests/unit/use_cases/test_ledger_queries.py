"""Unit tests for read-only ledger queries

Tests cover:
- EvaluateSufficiency previews without side effects
- GetAccount derived debt and liquidity
- ListTransactions pagination and tagged entries
"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

from src.app.use_cases.ledger import EvaluateSufficiency, GetAccount, ListTransactions
from src.app.use_cases.ledger.dtos import SufficiencyQueryDTO
from src.domain.minorista_transaction import (
    AdjustmentTarget,
    MinoristaTransaction,
    TransactionType,
)


def _query(amount, profit_rate="0.05"):
    return SufficiencyQueryDTO(
        minorista_id="minorista_123", amount=Decimal(amount), profit_rate=Decimal(profit_rate)
    )


@pytest.mark.asyncio
class TestEvaluateSufficiency:
    async def test_accepted_preview(self, mock_account_repo, make_account):
        """
        Given: Surplus 0, available credit 1000
        When: A 600 giro at 5% is previewed
        Then: It is accepted with 430 available afterwards
        """
        # Arrange
        account = make_account()
        mock_account_repo.get_by_minorista_id = AsyncMock(return_value=account)
        use_case = EvaluateSufficiency(account_repo=mock_account_repo)

        # Act
        result = await use_case.execute(_query("600.00"))

        # Assert
        assert result.is_ok()
        preview = result.value
        assert preview.accepted is True
        assert preview.profit == Decimal("30.00")
        assert preview.from_credit == Decimal("600.00")
        assert preview.credit_restored == Decimal("30.00")
        assert preview.available_credit_after == Decimal("430.00")
        assert preview.balance_in_favor_after == Decimal("0.00")

        # Nothing mutated
        assert account.available_credit == Decimal("1000.00")
        mock_account_repo.get_by_minorista_id.assert_called_once_with("minorista_123")
        mock_account_repo.save.assert_not_called()

    async def test_rejected_preview(self, mock_account_repo, make_account):
        mock_account_repo.get_by_minorista_id = AsyncMock(
            return_value=make_account(available_credit="100.00", balance_in_favor="200.00")
        )
        use_case = EvaluateSufficiency(account_repo=mock_account_repo)

        result = await use_case.execute(_query("500.00"))

        assert result.is_ok()
        assert result.value.accepted is False
        assert result.value.external_debt == Decimal("200.00")
        assert result.value.debt_paid == Decimal("25.00")
        assert result.value.unpaid_debt == Decimal("175.00")

    async def test_invalid_amount(self, mock_account_repo):
        use_case = EvaluateSufficiency(account_repo=mock_account_repo)

        result = await use_case.execute(_query("-5.00"))

        assert result.is_err()
        assert result.error.code == "INVALID_AMOUNT"
        mock_account_repo.get_by_minorista_id.assert_not_called()

    async def test_account_not_found(self, mock_account_repo):
        use_case = EvaluateSufficiency(account_repo=mock_account_repo)

        result = await use_case.execute(_query("5.00"))

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"


@pytest.mark.asyncio
class TestGetAccount:
    async def test_snapshot_with_derived_values(self, mock_account_repo, make_account):
        # Arrange
        mock_account_repo.get_by_minorista_id = AsyncMock(
            return_value=make_account(available_credit="530.00", balance_in_favor="50.00")
        )

        # Act
        result = await GetAccount(account_repo=mock_account_repo).execute("minorista_123")

        # Assert
        assert result.is_ok()
        assert result.value.debt == Decimal("420.00")
        assert result.value.total_liquidity == Decimal("580.00")

    async def test_not_found(self, mock_account_repo):
        result = await GetAccount(account_repo=mock_account_repo).execute("minorista_404")

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"


@pytest.mark.asyncio
class TestListTransactions:
    async def test_entries_are_tagged_by_type(self, mock_account_repo, mock_transaction_repo, make_account):
        """
        Given: A recharge and a credit limit adjustment in the log
        When: The log is listed
        Then: Each entry carries only the fields of its type
        """
        # Arrange
        now = datetime.utcnow()
        common = dict(
            account_id=1,
            minorista_id="minorista_123",
            credit_limit=Decimal("1000.00"),
            previous_balance_in_favor=Decimal("0.00"),
            balance_in_favor=Decimal("0.00"),
            accumulated_profit=Decimal("0.00"),
            created_at=now,
        )
        recharge = MinoristaTransaction(
            id=2,
            transaction_type=TransactionType.RECHARGE,
            amount=Decimal("100.00"),
            previous_available_credit=Decimal("900.00"),
            available_credit=Decimal("1000.00"),
            accumulated_debt=Decimal("0.00"),
            debt_paid=Decimal("100.00"),
            surplus_added=Decimal("0.00"),
            **common,
        )
        grant = MinoristaTransaction(
            id=1,
            transaction_type=TransactionType.ADJUSTMENT,
            amount=Decimal("1000.00"),
            previous_available_credit=Decimal("0.00"),
            available_credit=Decimal("1000.00"),
            accumulated_debt=Decimal("0.00"),
            adjustment_target=AdjustmentTarget.CREDIT_LIMIT,
            **common,
        )
        mock_account_repo.get_by_minorista_id = AsyncMock(return_value=make_account())
        mock_transaction_repo.list_by_account = AsyncMock(return_value=([recharge, grant], 2))
        use_case = ListTransactions(account_repo=mock_account_repo, transaction_repo=mock_transaction_repo)

        # Act
        result = await use_case.execute("minorista_123", limit=10, offset=0)

        # Assert
        assert result.is_ok()
        assert result.value.total == 2
        assert result.value.limit == 10
        first, second = result.value.transactions
        assert first.transaction_type == "RECHARGE"
        assert first.debt_paid == Decimal("100.00")
        assert second.transaction_type == "ADJUSTMENT"
        assert second.adjustment_target == "CREDIT_LIMIT"
        assert not hasattr(second, "debt_paid")
        mock_transaction_repo.list_by_account.assert_called_once_with(
            account_id=1, limit=10, offset=0, start=None, end=None
        )

    async def test_not_found(self, mock_account_repo, mock_transaction_repo):
        use_case = ListTransactions(account_repo=mock_account_repo, transaction_repo=mock_transaction_repo)

        result = await use_case.execute("minorista_404")

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"
