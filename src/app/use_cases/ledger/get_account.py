"""Get Account Use Case

Retrieves a minorista's current ledger snapshot.
"""

from libs.result import Result, Return, Error
from src.app.repositories.minorista_account_repository import MinoristaAccountRepository
from src.domain.exceptions import LedgerErrorCode
from .dtos import AccountResponseDTO
from .mappers import account_to_dto


class GetAccount:
    """
    Get Account Use Case

    Read-only operation; debt and total liquidity are derived from the
    stored balances, never stored themselves.
    """

    def __init__(self, account_repo: MinoristaAccountRepository):
        self.account_repo = account_repo

    async def execute(self, minorista_id: str) -> Result[AccountResponseDTO]:
        """
        Args:
            minorista_id: The minorista identifier

        Returns:
            Result[AccountResponseDTO]: Success with the snapshot or error

        Errors:
            ACCOUNT_NOT_FOUND: Minorista has no ledger account
        """
        account = await self.account_repo.get_by_minorista_id(minorista_id)

        if not account:
            return Return.err(
                Error(
                    code=LedgerErrorCode.ACCOUNT_NOT_FOUND.value,
                    message=f"Ledger account not found for minorista {minorista_id}",
                )
            )

        return Return.ok(account_to_dto(account))
