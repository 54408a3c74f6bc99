from .base import BaseModel
from .minorista_account import MinoristaAccount
from .minorista_transaction import MinoristaTransaction, TransactionType, AdjustmentTarget
from .ledger_state import LedgerState
from .exceptions import (
    LedgerErrorCode,
    LedgerError,
    InvalidAmount,
    AccountNotFound,
    AccountAlreadyExists,
    InsufficientBalance,
    ConcurrencyConflict,
    ImmutableEntryError,
)

__all__ = [
    "BaseModel",
    "MinoristaAccount",
    "MinoristaTransaction",
    "TransactionType",
    "AdjustmentTarget",
    "LedgerState",
    "LedgerErrorCode",
    "LedgerError",
    "InvalidAmount",
    "AccountNotFound",
    "AccountAlreadyExists",
    "InsufficientBalance",
    "ConcurrencyConflict",
    "ImmutableEntryError",
]
