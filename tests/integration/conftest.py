import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers the table models
from src.adapter.repositories.minorista_account_repository import SqlAlchemyMinoristaAccountRepository
from src.adapter.repositories.minorista_transaction_repository import SqlAlchemyMinoristaTransactionRepository
from src.adapter.services.account_lock import InProcessAccountLockManager
from src.adapter.services.event_publisher import LoggingLedgerEventPublisher
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.ledger_service import LedgerService
from src.depends import get_lock_manager, get_session


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create a throwaway SQLite database file per test"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'ledger_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Factory for independent sessions, one per simulated request"""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def lock_manager():
    return InProcessAccountLockManager(timeout_seconds=5.0)


def _build_ledger_service(session: AsyncSession, lock_manager) -> LedgerService:
    return LedgerService(
        uow=SqlAlchemyUnitOfWork(session),
        account_repo=SqlAlchemyMinoristaAccountRepository(session),
        transaction_repo=SqlAlchemyMinoristaTransactionRepository(session),
        lock_manager=lock_manager,
        event_publisher=LoggingLedgerEventPublisher(),
    )


@pytest.fixture
def ledger_service(db_session, lock_manager):
    """LedgerService wired to the real repositories"""
    return _build_ledger_service(db_session, lock_manager)


@pytest.fixture
def make_ledger_service(lock_manager):
    """Build a service on another session sharing the same account locks"""

    def _make(session: AsyncSession) -> LedgerService:
        return _build_ledger_service(session, lock_manager)

    return _make


@pytest_asyncio.fixture
async def client(db_session, lock_manager):
    """Create test client with database session override"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_lock_manager] = lambda: lock_manager

    # ASGITransport skips the lifespan; tables come from the engine fixture
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
