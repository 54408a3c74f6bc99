"""AuditAccount Use Case

Replays a minorista's transaction log through the same state transitions the
live commands use and compares the result with the stored balances.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.repositories.minorista_account_repository import MinoristaAccountRepository
from src.app.repositories.minorista_transaction_repository import MinoristaTransactionRepository
from src.domain.exceptions import LedgerError, LedgerErrorCode
from src.domain.ledger_state import (
    LedgerState,
    apply_balance_adjustment,
    apply_credit_limit,
    apply_debt_payment,
    apply_discount,
    apply_profit,
)
from src.domain.minorista_transaction import AdjustmentTarget, MinoristaTransaction, TransactionType
from src.domain.money import ZERO
from .dtos import (
    AuditDetailsDTO,
    AuditResultDTO,
    AuditStatus,
    FirstTransactionDTO,
    LastTransactionDTO,
)

logger = logging.getLogger(__name__)


def replay_entry(state: LedgerState, entry: MinoristaTransaction) -> tuple[LedgerState, Decimal]:
    """
    Re-apply one entry's type and amount to a state

    Returns:
        Tuple of (state after the entry, external debt the entry left unpaid)
    """
    transaction_type = TransactionType(entry.transaction_type)

    if transaction_type == TransactionType.DISCOUNT:
        outcome = apply_discount(state, entry.amount, entry.profit_earned or ZERO)
        return outcome.state, outcome.unpaid_debt

    if transaction_type == TransactionType.PROFIT:
        return apply_profit(state, entry.amount), ZERO

    if transaction_type == TransactionType.RECHARGE:
        return apply_debt_payment(state, entry.amount).state, ZERO

    if entry.adjustment_target == AdjustmentTarget.CREDIT_LIMIT:
        return apply_credit_limit(state, state.credit_limit + entry.amount), ZERO

    return apply_balance_adjustment(state, entry.amount).state, ZERO


def _snapshot_differences(calculated: LedgerState, recorded: LedgerState) -> list[str]:
    differences = []
    for field in ("credit_limit", "available_credit", "balance_in_favor", "accumulated_profit"):
        calculated_value = getattr(calculated, field)
        recorded_value = getattr(recorded, field)
        if calculated_value != recorded_value:
            differences.append(f"{field} recorded={recorded_value} calculated={calculated_value}")
    return differences


def _describe(state: LedgerState) -> str:
    return (
        f"available={state.available_credit} surplus={state.balance_in_favor} "
        f"limit={state.credit_limit} debt={state.debt}"
    )


class AuditAccount:
    """
    Use Case: Replay audit of one minorista account

    Business Rules:
    1. A full audit replays from the zero state; an audit bounded by
       ``start`` seeds from the first replayed entry's opening snapshot
    2. Every entry is re-applied from its type and amount; its recorded
       post-snapshot is checked along the way
    3. The final calculated state is compared with the stored account, or
       with the last replayed entry when ``end`` excludes later entries
    4. Read-only: divergence is reported, never corrected

    Flow:
    1. Load account and ordered entries
    2. Seed the starting state
    3. Replay each entry, building the trace
    4. Compare with the stored balances
    5. Return the audit report
    """

    def __init__(
        self,
        account_repo: MinoristaAccountRepository,
        transaction_repo: MinoristaTransactionRepository,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(
        self,
        minorista_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Result[AuditResultDTO]:
        """
        Execute the replay audit

        Args:
            minorista_id: Minorista to audit
            start: Only replay entries created at or after this moment
            end: Only replay entries created at or before this moment

        Returns:
            Result[AuditResultDTO]: OK or INCONSISTENT report with its trace
        """
        try:
            # Step 1: Load account and ordered entries
            account = await self.account_repo.get_by_minorista_id(minorista_id)
            if not account:
                return Return.err(
                    Error(
                        code=LedgerErrorCode.ACCOUNT_NOT_FOUND.value,
                        message=f"Ledger account not found for minorista {minorista_id}",
                    )
                )

            entries = await self.transaction_repo.get_history(account.id, start=start, end=end)
            later_entries = 0
            if end is not None:
                later_entries = await self.transaction_repo.count_after(account.id, end)

        except SQLAlchemyError as e:
            logger.error(f"Audit of minorista {minorista_id} failed: {e}")
            return Return.err(
                Error(
                    code=LedgerErrorCode.PERSISTENCE_FAILURE.value,
                    message="Failed to load ledger history",
                    reason=str(e),
                )
            )

        trace: list[str] = []
        consistent = True

        # Step 2: Seed the starting state
        state = LedgerState()
        seeded = False
        if entries:
            opening = entries[0].previous_state()
            if opening != state and start is not None:
                state = opening
                seeded = True
                trace.append(f"Seeded from opening snapshot of entry #{entries[0].id}: {_describe(state)}")
            elif opening != state:
                # A full log must open from the zero state
                consistent = False
                trace.append(
                    f"WARNING: log opens at entry #{entries[0].id} with {_describe(opening)} "
                    f"instead of the zero state"
                )
        trace.append(f"Start: {_describe(state)}")

        # Step 3: Replay
        mismatches = 0
        uncovered_debt = ZERO
        for position, entry in enumerate(entries, start=1):
            transaction_type = TransactionType(entry.transaction_type).value
            try:
                state, unpaid = replay_entry(state, entry)
            except LedgerError as e:
                consistent = False
                trace.append(
                    f"#{position} {entry.created_at.isoformat()} {transaction_type} "
                    f"amount={entry.amount} ERROR: {e.message}"
                )
                continue

            trace.append(
                f"#{position} {entry.created_at.isoformat()} {transaction_type} "
                f"amount={entry.amount} -> {_describe(state)}"
            )

            if unpaid > 0:
                consistent = False
                uncovered_debt += unpaid
                trace.append(f"  WARNING: charge left {unpaid} of external debt unpaid")

            differences = _snapshot_differences(state, entry.recorded_state())
            if differences:
                consistent = False
                mismatches += 1
                trace.append(f"  WARNING: snapshot mismatch on entry {entry.id}: {'; '.join(differences)}")

        # Step 4: Compare with the stored balances
        if later_entries and entries:
            stored = entries[-1].recorded_state()
            trace.append(
                f"Compared with entry #{len(entries)} snapshot ({later_entries} later entries excluded)"
            )
        else:
            stored = account.to_state()

        difference = stored.total_liquidity - state.total_liquidity
        if (
            difference != 0
            or stored.available_credit != state.available_credit
            or stored.balance_in_favor != state.balance_in_favor
            or stored.credit_limit != state.credit_limit
        ):
            consistent = False
            trace.append(
                f"Stored {_describe(stored)} differs from calculated {_describe(state)} "
                f"(difference={difference})"
            )

        trace.append(f"End: {_describe(state)}")

        status = AuditStatus.OK if consistent else AuditStatus.INCONSISTENT
        if status == AuditStatus.INCONSISTENT:
            logger.warning(
                f"Ledger of minorista {minorista_id} is inconsistent: "
                f"difference={difference}, snapshot_mismatches={mismatches}, "
                f"uncovered_debt={uncovered_debt}"
            )

        # Step 5: Build report
        first_transaction = None
        last_transaction = None
        if entries:
            first, last = entries[0], entries[-1]
            first_transaction = FirstTransactionDTO(
                transaction_type=TransactionType(first.transaction_type).value,
                amount=first.amount,
                date=first.created_at,
            )
            last_transaction = LastTransactionDTO(
                transaction_type=TransactionType(last.transaction_type).value,
                stored_available=last.available_credit,
                stored_surplus=last.balance_in_favor,
                date=last.created_at,
            )

        return Return.ok(
            AuditResultDTO(
                minorista_id=minorista_id,
                status=status,
                details=AuditDetailsDTO(
                    stored_available=stored.available_credit,
                    stored_surplus=stored.balance_in_favor,
                    stored_credit_limit=stored.credit_limit,
                    calculated_available=state.available_credit,
                    calculated_surplus=state.balance_in_favor,
                    calculated_credit_limit=state.credit_limit,
                    difference=difference,
                    accumulated_debt=state.debt,
                    accumulated_profit=state.accumulated_profit,
                    uncovered_debt=uncovered_debt,
                    entries_replayed=len(entries),
                    snapshot_mismatches=mismatches,
                    seeded_from_snapshot=seeded,
                    first_transaction=first_transaction,
                    last_transaction=last_transaction,
                ),
                trace=trace,
                audited_at=datetime.utcnow(),
            )
        )
