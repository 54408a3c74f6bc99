from .unit_of_work import SqlAlchemyUnitOfWork
from .event_publisher import (
    LoggingLedgerEventPublisher,
    WebhookLedgerEventPublisher,
    CompositeLedgerEventPublisher,
    create_event_publisher,
)
from .account_lock import InProcessAccountLockManager

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingLedgerEventPublisher",
    "WebhookLedgerEventPublisher",
    "CompositeLedgerEventPublisher",
    "create_event_publisher",
    "InProcessAccountLockManager",
]
