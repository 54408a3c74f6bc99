"""Ledger Service

Single entry point for everything that reads or moves a minorista's balances.
Callers never reimplement the waterfall: they issue a command here and
render the Result.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union
from pydantic import ValidationError
from libs.result import Error, Result, Return
from src.app.repositories.minorista_account_repository import MinoristaAccountRepository
from src.app.repositories.minorista_transaction_repository import MinoristaTransactionRepository
from src.app.services.account_lock import AccountLockManager
from src.app.services.event_publisher import LedgerEventPublisher
from src.app.services.unit_of_work import UnitOfWork
from src.domain.exceptions import LedgerErrorCode
from src.app.use_cases.ledger import (
    AccountResponseDTO,
    AdjustmentCommandDTO,
    ApplyDischarge,
    AssignCreditLimit,
    AuditAccount,
    AuditResultDTO,
    CreditLimitCommandDTO,
    DebtPaymentCommandDTO,
    DischargeCommandDTO,
    DischargeResponseDTO,
    EvaluateSufficiency,
    GetAccount,
    LedgerCommandResponseDTO,
    ListTransactions,
    ListTransactionsResponseDTO,
    OpenAccount,
    OpenAccountCommandDTO,
    PayDebt,
    ReconcileLedgers,
    ReconciliationResultDTO,
    RecordAdjustment,
    SufficiencyQueryDTO,
    SufficiencyResponseDTO,
)

Amount = Union[Decimal, int, str]


class LedgerService:
    """
    Facade over the ledger use cases sharing one unit of work

    Mutating commands are serialized per account by ``lock_manager`` and
    by the row lock taken inside the unit of work.
    """

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

    async def _run(self, use_case, dto_class, **fields) -> Result:
        """Build the command DTO and execute it; malformed input is an INVALID_AMOUNT error"""
        try:
            command = dto_class(**fields)
        except ValidationError as e:
            return Return.err(
                Error(
                    code=LedgerErrorCode.INVALID_AMOUNT.value,
                    message="Invalid ledger command",
                    reason=str(e),
                )
            )
        return await use_case.execute(command)

    def _command_args(self) -> tuple:
        return (
            self.uow,
            self.account_repo,
            self.transaction_repo,
            self.lock_manager,
            self.event_publisher,
        )

    async def open_account(self, minorista_id: str, credit_limit: Amount = Decimal("0")) -> Result[AccountResponseDTO]:
        return await self._run(
            OpenAccount(*self._command_args()),
            OpenAccountCommandDTO,
            minorista_id=minorista_id,
            credit_limit=credit_limit,
        )

    async def apply_discharge(
        self,
        minorista_id: str,
        amount: Amount,
        profit_rate: Amount,
        idempotency_key: Optional[str] = None,
        exchange_rate: Optional[Amount] = None,
        description: Optional[str] = None,
    ) -> Result[DischargeResponseDTO]:
        return await self._run(
            ApplyDischarge(*self._command_args()),
            DischargeCommandDTO,
            minorista_id=minorista_id,
            amount=amount,
            profit_rate=profit_rate,
            idempotency_key=idempotency_key,
            exchange_rate=exchange_rate,
            description=description,
        )

    async def evaluate_sufficiency(
        self, minorista_id: str, amount: Amount, profit_rate: Amount
    ) -> Result[SufficiencyResponseDTO]:
        return await self._run(
            EvaluateSufficiency(self.account_repo),
            SufficiencyQueryDTO,
            minorista_id=minorista_id,
            amount=amount,
            profit_rate=profit_rate,
        )

    async def pay_debt(
        self,
        minorista_id: str,
        amount: Amount,
        idempotency_key: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Result[LedgerCommandResponseDTO]:
        return await self._run(
            PayDebt(*self._command_args()),
            DebtPaymentCommandDTO,
            minorista_id=minorista_id,
            amount=amount,
            idempotency_key=idempotency_key,
            description=description,
        )

    async def assign_credit_limit(self, minorista_id: str, credit_limit: Amount) -> Result[LedgerCommandResponseDTO]:
        return await self._run(
            AssignCreditLimit(*self._command_args()),
            CreditLimitCommandDTO,
            minorista_id=minorista_id,
            credit_limit=credit_limit,
        )

    async def record_adjustment(self, minorista_id: str, amount: Amount, reason: str) -> Result[LedgerCommandResponseDTO]:
        return await self._run(
            RecordAdjustment(*self._command_args()),
            AdjustmentCommandDTO,
            minorista_id=minorista_id,
            amount=amount,
            reason=reason,
        )

    async def get_account(self, minorista_id: str) -> Result[AccountResponseDTO]:
        return await GetAccount(self.account_repo).execute(minorista_id)

    async def list_transactions(
        self,
        minorista_id: str,
        limit: int = 20,
        offset: int = 0,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Result[ListTransactionsResponseDTO]:
        return await ListTransactions(self.account_repo, self.transaction_repo).execute(
            minorista_id, limit=limit, offset=offset, start=start, end=end
        )

    async def audit_account(
        self,
        minorista_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Result[AuditResultDTO]:
        return await AuditAccount(self.account_repo, self.transaction_repo).execute(
            minorista_id, start=start, end=end
        )

    async def reconcile(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Result[ReconciliationResultDTO]:
        return await ReconcileLedgers(self.account_repo, self.transaction_repo).execute(start=start, end=end)
