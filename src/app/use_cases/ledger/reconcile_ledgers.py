"""ReconcileLedgers Use Case

Runs the replay audit over every minorista account and collects the
inconsistent ones.
"""

import logging
import time
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.repositories.minorista_account_repository import MinoristaAccountRepository
from src.app.repositories.minorista_transaction_repository import MinoristaTransactionRepository
from src.domain.exceptions import LedgerErrorCode
from .audit_account import AuditAccount
from .dtos import AuditResultDTO, AuditStatus, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedgers:
    """
    Use Case: Reconcile every minorista ledger against its log

    Business Rules:
    1. Audits every account with the same replay as AuditAccount
    2. A failure to load any account aborts the run with that error
    3. Does NOT modify any data
    """

    def __init__(
        self,
        account_repo: MinoristaAccountRepository,
        transaction_repo: MinoristaTransactionRepository,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.audit = AuditAccount(account_repo, transaction_repo)

    async def execute(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting minorista ledger reconciliation")

            # Step 1: Get all accounts
            accounts = await self.account_repo.get_all()
            total_accounts = len(accounts)

            logger.info(f"Found {total_accounts} ledger accounts to audit")

            # Step 2: Audit each account
            inconsistent: list[AuditResultDTO] = []
            for account in accounts:
                result = await self.audit.execute(account.minorista_id, start=start, end=end)
                if result.is_err():
                    return Return.err(result.error)

                if result.value.status == AuditStatus.INCONSISTENT:
                    inconsistent.append(result.value)

        except SQLAlchemyError as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code=LedgerErrorCode.PERSISTENCE_FAILURE.value,
                    message="Failed to reconcile minorista ledgers",
                    reason=str(e),
                )
            )

        # Step 3: Build response
        execution_time_ms = int((time.time() - start_time) * 1000)

        if inconsistent:
            logger.warning(
                f"Reconciliation complete. Found {len(inconsistent)} inconsistent ledgers "
                f"out of {total_accounts} in {execution_time_ms}ms"
            )
        else:
            logger.info(
                f"Reconciliation complete. All {total_accounts} ledgers consistent "
                f"in {execution_time_ms}ms"
            )

        return Return.ok(
            ReconciliationResultDTO(
                total_accounts_checked=total_accounts,
                inconsistencies_found=len(inconsistent),
                inconsistent=inconsistent,
                reconciliation_time=reconciliation_time,
                execution_time_ms=execution_time_ms,
            )
        )
