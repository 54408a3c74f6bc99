"""SQLAlchemy implementation of MinoristaAccountRepository

Provides persistence for MinoristaAccount entities with pessimistic locking
support so concurrent commands against one reseller never interleave.
"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.minorista_account_repository import MinoristaAccountRepository
from src.domain.minorista_account import MinoristaAccount


class SqlAlchemyMinoristaAccountRepository(MinoristaAccountRepository):
    """
    SQLAlchemy implementation of MinoristaAccountRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Balance updates flushed inside the caller's unit of work
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_minorista_id(self, minorista_id: str, for_update: bool = False) -> Optional[MinoristaAccount]:
        """
        Retrieve account by minorista ID with optional row-level locking

        Args:
            minorista_id: Minorista identifier
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            MinoristaAccount if found, None otherwise
        """
        stmt = select(MinoristaAccount).where(MinoristaAccount.minorista_id == minorista_id)

        if for_update:
            # Reload the row so a long-lived session never acts on a stale snapshot
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, account: MinoristaAccount) -> MinoristaAccount:
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def save(self, account: MinoristaAccount) -> MinoristaAccount:
        """
        Flush the updated projection

        Note:
            Should be called within a transaction with the account already locked
        """
        self.session.add(account)
        await self.session.flush()
        return account

    async def get_all(self) -> list[MinoristaAccount]:
        stmt = select(MinoristaAccount).order_by(MinoristaAccount.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
