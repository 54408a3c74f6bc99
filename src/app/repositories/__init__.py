from .minorista_account_repository import MinoristaAccountRepository
from .minorista_transaction_repository import MinoristaTransactionRepository

__all__ = [
    "MinoristaAccountRepository",
    "MinoristaTransactionRepository",
]
