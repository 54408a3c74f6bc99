from .unit_of_work import UnitOfWork
from .event_publisher import LedgerEventPublisher, LedgerMutationEvent
from .account_lock import AccountLockManager

__all__ = [
    "UnitOfWork",
    "LedgerEventPublisher",
    "LedgerMutationEvent",
    "AccountLockManager",
]
