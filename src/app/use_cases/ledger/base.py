"""Shared plumbing for mutating ledger commands

Every command follows the same transaction boundary:

1. Hold the per-account lock
2. Load the account with SELECT FOR UPDATE
3. Compute the new state with the domain transitions
4. Append the entries and save the projection
5. Commit, then publish the mutation event

Errors raised anywhere in that path are converted into typed Results here,
so no command reports an untyped failure.
"""

import logging
from typing import Optional
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from libs.result import Error
from src.app.repositories.minorista_account_repository import MinoristaAccountRepository
from src.app.repositories.minorista_transaction_repository import MinoristaTransactionRepository
from src.app.services.account_lock import AccountLockManager
from src.app.services.event_publisher import LedgerEventPublisher, LedgerMutationEvent
from src.app.services.unit_of_work import UnitOfWork
from src.domain.exceptions import AccountNotFound, LedgerError, LedgerErrorCode
from src.domain.ledger_state import LedgerState
from src.domain.minorista_account import MinoristaAccount
from src.domain.minorista_transaction import MinoristaTransaction, TransactionType

logger = logging.getLogger(__name__)

# Failures converted into Results; anything else is rolled back and re-raised
HANDLED_ERRORS = (LedgerError, SQLAlchemyError)


def error_from_exception(exc: Exception, message: str) -> Error:
    """
    Translate a domain or persistence exception into a typed Error

    Args:
        exc: Exception raised while executing a command
        message: Summary used for persistence failures

    Returns:
        Error carrying a LedgerErrorCode value
    """
    if isinstance(exc, LedgerError):
        return Error(code=exc.code.value, message=exc.message, details=exc.details)

    if isinstance(exc, StaleDataError):
        return Error(
            code=LedgerErrorCode.CONCURRENCY_CONFLICT.value,
            message="Account was modified concurrently; retry with a fresh snapshot",
            reason=str(exc),
        )

    if isinstance(exc, OperationalError) and "lock" in str(exc).lower():
        return Error(
            code=LedgerErrorCode.CONCURRENCY_CONFLICT.value,
            message="Account is locked by another operation; retry with a fresh snapshot",
            reason=str(exc),
        )

    return Error(
        code=LedgerErrorCode.PERSISTENCE_FAILURE.value,
        message=message,
        reason=str(exc),
    )


def build_entry(
    account: MinoristaAccount,
    transaction_type: TransactionType,
    amount,
    before: LedgerState,
    after: LedgerState,
    **fields,
) -> MinoristaTransaction:
    """Create a log entry with the before/after snapshot of one transition"""
    return MinoristaTransaction(
        account_id=account.id,
        minorista_id=account.minorista_id,
        transaction_type=transaction_type,
        amount=amount,
        credit_limit=after.credit_limit,
        previous_available_credit=before.available_credit,
        available_credit=after.available_credit,
        previous_balance_in_favor=before.balance_in_favor,
        balance_in_favor=after.balance_in_favor,
        accumulated_debt=after.debt,
        accumulated_profit=after.accumulated_profit,
        **fields,
    )


class LedgerCommand:
    """Base class for use cases that mutate a minorista account"""

    failure_message = "Ledger operation failed"

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: MinoristaAccountRepository,
        transaction_repo: MinoristaTransactionRepository,
        lock_manager: AccountLockManager,
        event_publisher: Optional[LedgerEventPublisher] = None,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.lock_manager = lock_manager
        self.event_publisher = event_publisher

    async def _load_for_update(self, minorista_id: str) -> MinoristaAccount:
        account = await self.account_repo.get_by_minorista_id(minorista_id, for_update=True)
        if not account:
            raise AccountNotFound(f"Ledger account not found for minorista {minorista_id}")
        return account

    async def _commit(self, account: MinoristaAccount, state: LedgerState) -> None:
        account.apply_state(state)
        await self.account_repo.save(account)
        await self.uow.commit()

    async def _fail(self, exc: Exception) -> Error:
        await self.uow.rollback()
        error = error_from_exception(exc, self.failure_message)
        if error.code == LedgerErrorCode.PERSISTENCE_FAILURE.value:
            logger.error(f"{self.failure_message}: {exc}")
        else:
            logger.info(f"{type(self).__name__} rejected: {error.code} {error.message}")
        return error

    async def _publish(self, account: MinoristaAccount, entries: list[MinoristaTransaction]) -> None:
        """Announce a committed mutation; delivery problems never undo the commit"""
        if self.event_publisher is None or not entries:
            return

        event = LedgerMutationEvent(
            minorista_id=account.minorista_id,
            transaction_type=TransactionType(entries[0].transaction_type).value,
            transaction_ids=[entry.id for entry in entries],
            available_credit=account.available_credit,
            balance_in_favor=account.balance_in_favor,
        )
        try:
            delivered = await self.event_publisher.publish_mutation(event)
        except Exception as e:
            logger.error(f"Mutation event for minorista {account.minorista_id} failed: {e}")
            return

        if not delivered:
            logger.warning(f"Mutation event for minorista {account.minorista_id} was not delivered")
