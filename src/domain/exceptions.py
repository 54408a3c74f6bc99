"""Ledger domain exceptions

Raised by the pure domain layer (money parsing, allocation engine, state
transitions). Use cases translate them into typed ``libs.result.Error``
values at the service boundary.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class LedgerErrorCode(str, Enum):
    """Error codes surfaced to ledger callers"""
    INVALID_AMOUNT = "INVALID_AMOUNT"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    ACCOUNT_ALREADY_EXISTS = "ACCOUNT_ALREADY_EXISTS"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


class LedgerError(Exception):
    """Base exception for the ledger domain"""

    code: LedgerErrorCode = LedgerErrorCode.PERSISTENCE_FAILURE

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidAmount(LedgerError):
    """Amount is negative, non-finite, or finer than the minor unit"""

    code = LedgerErrorCode.INVALID_AMOUNT


class AccountNotFound(LedgerError):
    """No ledger account exists for the referenced minorista"""

    code = LedgerErrorCode.ACCOUNT_NOT_FOUND


class InsufficientBalance(LedgerError):
    """The charge would leave unpaid debt or negative liquidity"""

    code = LedgerErrorCode.INSUFFICIENT_BALANCE

    def __init__(self, message: str, unpaid_debt: Decimal, total_after: Decimal):
        super().__init__(
            message,
            details={"unpaid_debt": str(unpaid_debt), "total_after": str(total_after)},
        )
        self.unpaid_debt = unpaid_debt
        self.total_after = total_after


class ConcurrencyConflict(LedgerError):
    """Lost the per-account lock or row-version race"""

    code = LedgerErrorCode.CONCURRENCY_CONFLICT


class ImmutableEntryError(LedgerError):
    """Attempt to update or delete a stored transaction entry"""

    code = LedgerErrorCode.PERSISTENCE_FAILURE


class AccountAlreadyExists(LedgerError):
    """A ledger account is already open for the minorista"""

    code = LedgerErrorCode.ACCOUNT_ALREADY_EXISTS
