"""
List Transactions Use Case

Retrieves a minorista's transaction log with pagination.
"""
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.minorista_account_repository import MinoristaAccountRepository
from src.app.repositories.minorista_transaction_repository import MinoristaTransactionRepository
from src.domain.exceptions import LedgerErrorCode
from .dtos import ListTransactionsResponseDTO
from .mappers import entry_to_dto


class ListTransactions:
    """
    Use case: View a minorista's transaction log

    Entries are ordered newest first and returned as a tagged union keyed by
    transaction_type.
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
        limit: int = 20,
        offset: int = 0,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Result[ListTransactionsResponseDTO]:
        """
        List entries for a minorista with pagination.

        Args:
            minorista_id: Minorista identifier
            limit: Maximum number of entries to return (default 20)
            offset: Number of entries to skip (default 0)
            start: Only entries created at or after this moment
            end: Only entries created at or before this moment

        Returns:
            Result[ListTransactionsResponseDTO]: Paginated transaction list
        """
        account = await self.account_repo.get_by_minorista_id(minorista_id)
        if not account:
            return Return.err(
                Error(
                    code=LedgerErrorCode.ACCOUNT_NOT_FOUND.value,
                    message=f"Ledger account not found for minorista {minorista_id}",
                )
            )

        transactions, total = await self.transaction_repo.list_by_account(
            account_id=account.id,
            limit=limit,
            offset=offset,
            start=start,
            end=end,
        )

        return Return.ok(
            ListTransactionsResponseDTO(
                transactions=[entry_to_dto(txn) for txn in transactions],
                total=total,
                limit=limit,
                offset=offset,
            )
        )
