from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.minorista_account_repository import SqlAlchemyMinoristaAccountRepository
from src.adapter.repositories.minorista_transaction_repository import SqlAlchemyMinoristaTransactionRepository
from src.adapter.services.account_lock import InProcessAccountLockManager
from src.adapter.services.event_publisher import create_event_publisher
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.ledger_service import LedgerService

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Shared by every request so commands against one account queue on one lock
lock_manager = InProcessAccountLockManager(
    timeout_seconds=ApplicationConfig.LEDGER_LOCK_TIMEOUT_SECONDS
)

event_publisher = create_event_publisher(ApplicationConfig.LEDGER_EVENTS_WEBHOOK)


async def init_models():
    """Create the ledger tables if they do not exist yet"""
    import src.domain  # noqa: F401  registers the table models

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def get_lock_manager() -> InProcessAccountLockManager:
    return lock_manager


def get_event_publisher():
    return event_publisher


async def get_ledger_service(
    session: AsyncSession = Depends(get_session),
    locks: InProcessAccountLockManager = Depends(get_lock_manager),
    publisher=Depends(get_event_publisher),
) -> LedgerService:
    return LedgerService(
        uow=SqlAlchemyUnitOfWork(session),
        account_repo=SqlAlchemyMinoristaAccountRepository(session),
        transaction_repo=SqlAlchemyMinoristaTransactionRepository(session),
        lock_manager=locks,
        event_publisher=publisher,
    )
