"""SQLAlchemy implementation of MinoristaTransactionRepository

Append-only persistence for the minorista transaction log.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.minorista_transaction_repository import MinoristaTransactionRepository
from src.domain.minorista_transaction import MinoristaTransaction


class SqlAlchemyMinoristaTransactionRepository(MinoristaTransactionRepository):
    """
    SQLAlchemy implementation of MinoristaTransactionRepository

    Features:
    - Idempotency enforcement via unique idempotency_key constraint
    - Deterministic replay order: created_at, then id
    - No update or delete path (mapper hooks reject ORM mutation)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: MinoristaTransaction) -> MinoristaTransaction:
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def get_by_idempotency_key(self, idempotency_key: str) -> list[MinoristaTransaction]:
        stmt = (
            select(MinoristaTransaction)
            .where(
                or_(
                    MinoristaTransaction.idempotency_key == idempotency_key,
                    MinoristaTransaction.idempotency_key == f"{idempotency_key}:profit",
                )
            )
            .order_by(MinoristaTransaction.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    def _date_filters(self, stmt, start: Optional[datetime], end: Optional[datetime]):
        if start is not None:
            stmt = stmt.where(MinoristaTransaction.created_at >= start)
        if end is not None:
            stmt = stmt.where(MinoristaTransaction.created_at <= end)
        return stmt

    async def list_by_account(
        self,
        account_id: int,
        limit: int = 20,
        offset: int = 0,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> tuple[list[MinoristaTransaction], int]:
        """
        Retrieve entries newest first with pagination

        Returns:
            Tuple of (list of MinoristaTransaction, total count)
        """
        count_stmt = select(func.count()).select_from(MinoristaTransaction).where(
            MinoristaTransaction.account_id == account_id
        )
        count_stmt = self._date_filters(count_stmt, start, end)
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar_one()

        stmt = select(MinoristaTransaction).where(MinoristaTransaction.account_id == account_id)
        stmt = self._date_filters(stmt, start, end)
        stmt = (
            stmt.order_by(MinoristaTransaction.created_at.desc(), MinoristaTransaction.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_history(
        self,
        account_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[MinoristaTransaction]:
        stmt = select(MinoristaTransaction).where(MinoristaTransaction.account_id == account_id)
        stmt = self._date_filters(stmt, start, end)
        stmt = stmt.order_by(MinoristaTransaction.created_at, MinoristaTransaction.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_after(self, account_id: int, moment: datetime) -> int:
        stmt = select(func.count()).select_from(MinoristaTransaction).where(
            MinoristaTransaction.account_id == account_id,
            MinoristaTransaction.created_at > moment,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
