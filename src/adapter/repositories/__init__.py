from .minorista_account_repository import SqlAlchemyMinoristaAccountRepository
from .minorista_transaction_repository import SqlAlchemyMinoristaTransactionRepository

__all__ = [
    "SqlAlchemyMinoristaAccountRepository",
    "SqlAlchemyMinoristaTransactionRepository",
]
