"""Integration tests for the ledger commands

Tests cover:
- A full lifecycle against a real database: open, charge, pay, re-limit, adjust
- Idempotent discharges stored once
- Rejected commands leave no trace in the log
"""

import pytest
from decimal import Decimal
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.use_cases.ledger.dtos import AuditStatus
from src.domain.minorista_account import MinoristaAccount
from src.domain.minorista_transaction import MinoristaTransaction, TransactionType


async def _entries(session: AsyncSession, minorista_id: str) -> list[MinoristaTransaction]:
    result = await session.execute(
        select(MinoristaTransaction)
        .where(MinoristaTransaction.minorista_id == minorista_id)
        .order_by(MinoristaTransaction.id)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
class TestLedgerLifecycle:
    async def test_full_lifecycle_replays_clean(self, ledger_service, db_session: AsyncSession):
        """
        Open with 1000, charge 600 at 5%, pay 200, charge 100 at 0%, add 50:
        the account ends at 530 available, 50 in favor, 420 debt, and the
        audit replays it without differences
        """
        minorista_id = "minorista_flow_1"

        # Act
        opened = await ledger_service.open_account(minorista_id, Decimal("1000.00"))
        discharge = await ledger_service.apply_discharge(minorista_id, Decimal("600.00"), Decimal("0.05"))
        payment = await ledger_service.pay_debt(minorista_id, Decimal("200.00"))
        second = await ledger_service.apply_discharge(minorista_id, Decimal("100.00"), Decimal("0"))
        bonus = await ledger_service.record_adjustment(minorista_id, Decimal("50.00"), "Volume bonus")

        # Assert
        for result in (opened, discharge, payment, second, bonus):
            assert result.is_ok(), result

        snapshot = (await ledger_service.get_account(minorista_id)).value
        assert snapshot.available_credit == Decimal("530.00")
        assert snapshot.balance_in_favor == Decimal("50.00")
        assert snapshot.accumulated_profit == Decimal("30.00")
        assert snapshot.debt == Decimal("420.00")

        entries = await _entries(db_session, minorista_id)
        assert [TransactionType(e.transaction_type) for e in entries] == [
            TransactionType.ADJUSTMENT,
            TransactionType.DISCOUNT,
            TransactionType.RECHARGE,
            TransactionType.DISCOUNT,
            TransactionType.ADJUSTMENT,
        ]
        # Snapshots chain from one entry to the next
        for previous, current in zip(entries, entries[1:]):
            assert current.previous_available_credit == previous.available_credit
            assert current.previous_balance_in_favor == previous.balance_in_favor

        audit = (await ledger_service.audit_account(minorista_id)).value
        assert audit.status == AuditStatus.OK
        assert audit.details.difference == Decimal("0")

    async def test_credit_limit_change_preserves_debt(self, ledger_service):
        minorista_id = "minorista_flow_2"
        await ledger_service.open_account(minorista_id, Decimal("1000.00"))
        await ledger_service.apply_discharge(minorista_id, Decimal("600.00"), Decimal("0.05"))

        raised = await ledger_service.assign_credit_limit(minorista_id, Decimal("1500.00"))
        too_low = await ledger_service.assign_credit_limit(minorista_id, Decimal("100.00"))

        assert raised.is_ok()
        assert raised.value.account.available_credit == Decimal("930.00")
        assert raised.value.account.debt == Decimal("570.00")
        assert too_low.is_err()
        assert too_low.error.code == "INVALID_AMOUNT"

        audit = (await ledger_service.audit_account(minorista_id)).value
        assert audit.status == AuditStatus.OK

    async def test_split_profit_entries_are_stored(self, ledger_service, db_session: AsyncSession):
        """A surplus-only charge stores a DISCOUNT and a PROFIT entry under one command"""
        minorista_id = "minorista_flow_3"
        await ledger_service.open_account(minorista_id, Decimal("1000.00"))
        await ledger_service.pay_debt(minorista_id, Decimal("500.00"))

        result = await ledger_service.apply_discharge(
            minorista_id, Decimal("300.00"), Decimal("0.05"), idempotency_key="giro_split"
        )

        assert result.is_ok()
        assert result.value.balance_in_favor == Decimal("215.00")
        entries = await _entries(db_session, minorista_id)
        assert [e.idempotency_key for e in entries[-2:]] == ["giro_split", "giro_split:profit"]
        assert (await ledger_service.audit_account(minorista_id)).value.status == AuditStatus.OK


@pytest.mark.asyncio
class TestLedgerIdempotency:
    async def test_repeated_discharge_is_stored_once(self, ledger_service, db_session: AsyncSession):
        """
        Given: A discharge recorded under giro_1
        When: The same discharge is submitted again
        Then: The recorded result is returned and balances move once
        """
        # Arrange
        minorista_id = "minorista_idem_1"
        await ledger_service.open_account(minorista_id, Decimal("1000.00"))

        # Act
        first = await ledger_service.apply_discharge(
            minorista_id, Decimal("600.00"), Decimal("0.05"), idempotency_key="giro_1"
        )
        second = await ledger_service.apply_discharge(
            minorista_id, Decimal("600.00"), Decimal("0.05"), idempotency_key="giro_1"
        )

        # Assert
        assert first.is_ok() and second.is_ok()
        assert second.value.idempotent_replay is True
        assert second.value.entries[0].id == first.value.entries[0].id
        assert second.value.available_credit == first.value.available_credit

        account = (await ledger_service.get_account(minorista_id)).value
        assert account.available_credit == Decimal("430.00")
        assert len(await _entries(db_session, minorista_id)) == 2

    async def test_repeated_payment_is_stored_once(self, ledger_service):
        minorista_id = "minorista_idem_2"
        await ledger_service.open_account(minorista_id, Decimal("1000.00"))
        await ledger_service.apply_discharge(minorista_id, Decimal("600.00"), Decimal("0"))

        await ledger_service.pay_debt(minorista_id, Decimal("100.00"), idempotency_key="pay_1")
        replay = await ledger_service.pay_debt(minorista_id, Decimal("100.00"), idempotency_key="pay_1")

        assert replay.is_ok()
        assert replay.value.account.available_credit == Decimal("500.00")

    async def test_reused_key_with_different_amount_is_rejected(self, ledger_service, db_session: AsyncSession):
        """
        Given: giro_2 was charged for 100 and pay_2 paid 50
        When: The keys are reused with other amounts
        Then: Both commands are rejected and the balances move once
        """
        # Arrange
        minorista_id = "minorista_idem_3"
        await ledger_service.open_account(minorista_id, Decimal("1000.00"))
        await ledger_service.apply_discharge(
            minorista_id, Decimal("100.00"), Decimal("0"), idempotency_key="giro_2"
        )
        await ledger_service.pay_debt(minorista_id, Decimal("50.00"), idempotency_key="pay_2")

        # Act
        discharge = await ledger_service.apply_discharge(
            minorista_id, Decimal("900.00"), Decimal("0"), idempotency_key="giro_2"
        )
        payment = await ledger_service.pay_debt(minorista_id, Decimal("75.00"), idempotency_key="pay_2")

        # Assert
        assert discharge.is_err() and discharge.error.code == "INVALID_AMOUNT"
        assert payment.is_err() and payment.error.code == "INVALID_AMOUNT"
        account = (await ledger_service.get_account(minorista_id)).value
        assert account.available_credit == Decimal("950.00")
        assert len(await _entries(db_session, minorista_id)) == 3


@pytest.mark.asyncio
class TestRejectedCommands:
    async def test_rejected_discharge_writes_nothing(self, ledger_service, db_session: AsyncSession):
        # Arrange
        minorista_id = "minorista_reject_1"
        await ledger_service.open_account(minorista_id, Decimal("100.00"))

        # Act
        result = await ledger_service.apply_discharge(minorista_id, Decimal("500.00"), Decimal("0.05"))

        # Assert
        assert result.is_err()
        assert result.error.code == "INSUFFICIENT_BALANCE"
        account = await db_session.scalar(
            select(MinoristaAccount).where(MinoristaAccount.minorista_id == minorista_id)
        )
        assert account.available_credit == Decimal("100.00")
        assert len(await _entries(db_session, minorista_id)) == 1

    async def test_duplicate_account(self, ledger_service):
        await ledger_service.open_account("minorista_dup", Decimal("10.00"))

        result = await ledger_service.open_account("minorista_dup", Decimal("10.00"))

        assert result.is_err()
        assert result.error.code == "ACCOUNT_ALREADY_EXISTS"
