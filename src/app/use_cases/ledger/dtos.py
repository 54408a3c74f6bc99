"""Data Transfer Objects for Ledger Use Cases

Pydantic models for command inputs and response outputs.

Amounts on command DTOs are deliberately unconstrained: use cases validate
them and answer with a typed INVALID_AMOUNT error rather than a
ValidationError raised at construction time.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field


class OpenAccountCommandDTO(BaseModel):
    """Command DTO for opening a minorista ledger account"""

    minorista_id: str = Field(..., description="Minorista identifier")

    credit_limit: Decimal = Field(
        default=Decimal("0"),
        description="Initial credit limit (logged as the initial grant)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "minorista_id": "minorista_abc123",
                "credit_limit": "1000000.00"
            }
        }


class DischargeCommandDTO(BaseModel):
    """
    Command DTO for charging a giro against a minorista account

    profit_rate is always explicit; callers resolve it from configuration
    (e.g. 0.05 for transfers, 0 for recharges and mobile payments).
    """

    minorista_id: str = Field(..., description="Minorista identifier")

    amount: Decimal = Field(..., description="Amount to charge (must be >= 0)")

    profit_rate: Decimal = Field(..., description="Profit rate in [0, 1]")

    idempotency_key: Optional[str] = Field(
        default=None,
        description="Unique key for idempotent charges (e.g. giro id)"
    )

    exchange_rate: Optional[Decimal] = Field(
        default=None,
        description="Exchange rate quoted on the giro, recorded for reference"
    )

    description: Optional[str] = Field(default=None, description="Free text for the log")

    class Config:
        json_schema_extra = {
            "example": {
                "minorista_id": "minorista_abc123",
                "amount": "600.00",
                "profit_rate": "0.05",
                "idempotency_key": "giro_789",
                "exchange_rate": "38.50"
            }
        }


class SufficiencyQueryDTO(BaseModel):
    """Query DTO for previewing whether a minorista can afford a charge"""

    minorista_id: str = Field(..., description="Minorista identifier")
    amount: Decimal = Field(..., description="Amount to charge")
    profit_rate: Decimal = Field(..., description="Profit rate in [0, 1]")


class DebtPaymentCommandDTO(BaseModel):
    """Command DTO for a minorista paying down its debt"""

    minorista_id: str = Field(..., description="Minorista identifier")

    amount: Decimal = Field(..., description="Payment amount (must be > 0)")

    idempotency_key: Optional[str] = Field(default=None, description="Unique key for idempotent payments")

    description: Optional[str] = Field(default=None, description="Free text for the log")


class CreditLimitCommandDTO(BaseModel):
    """Command DTO for assigning a new credit limit"""

    minorista_id: str = Field(..., description="Minorista identifier")
    credit_limit: Decimal = Field(..., description="New credit limit (must be >= 0)")


class AdjustmentCommandDTO(BaseModel):
    """Command DTO for a manual balance correction"""

    minorista_id: str = Field(..., description="Minorista identifier")

    amount: Decimal = Field(
        ...,
        description="Signed amount: positive adds balance in favor, negative charges it"
    )

    reason: str = Field(..., min_length=1, description="Why the correction was made")


class AccountResponseDTO(BaseModel):
    """Read-only snapshot of a minorista account"""

    minorista_id: str
    credit_limit: Decimal
    available_credit: Decimal
    balance_in_favor: Decimal
    accumulated_profit: Decimal
    debt: Decimal
    total_liquidity: Decimal
    last_updated: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "minorista_id": "minorista_abc123",
                "credit_limit": "1000.00",
                "available_credit": "430.00",
                "balance_in_favor": "0.00",
                "accumulated_profit": "30.00",
                "debt": "570.00",
                "total_liquidity": "430.00",
                "last_updated": "2024-01-01T00:00:00Z"
            }
        }


class _EntryBaseDTO(BaseModel):
    id: int
    minorista_id: str
    amount: Decimal
    credit_limit: Decimal
    previous_available_credit: Decimal
    available_credit: Decimal
    previous_balance_in_favor: Decimal
    balance_in_favor: Decimal
    accumulated_debt: Decimal
    accumulated_profit: Decimal
    description: Optional[str] = None
    created_at: datetime


class DiscountEntryDTO(_EntryBaseDTO):
    transaction_type: Literal["DISCOUNT"] = "DISCOUNT"
    balance_in_favor_used: Decimal
    credit_used: Decimal
    external_debt: Decimal
    debt_paid: Decimal
    remaining_balance: Decimal
    profit_earned: Decimal
    profit_rate: Optional[Decimal] = None
    exchange_rate: Optional[Decimal] = None
    idempotency_key: Optional[str] = None


class ProfitEntryDTO(_EntryBaseDTO):
    transaction_type: Literal["PROFIT"] = "PROFIT"
    profit_earned: Decimal


class RechargeEntryDTO(_EntryBaseDTO):
    transaction_type: Literal["RECHARGE"] = "RECHARGE"
    debt_paid: Decimal
    surplus_added: Decimal
    idempotency_key: Optional[str] = None


class AdjustmentEntryDTO(_EntryBaseDTO):
    transaction_type: Literal["ADJUSTMENT"] = "ADJUSTMENT"
    adjustment_target: Literal["BALANCE", "CREDIT_LIMIT"]


TransactionEntryDTO = Annotated[
    Union[DiscountEntryDTO, ProfitEntryDTO, RechargeEntryDTO, AdjustmentEntryDTO],
    Field(discriminator="transaction_type"),
]


class DischargeResponseDTO(BaseModel):
    """
    Response DTO for an accepted discharge

    Carries the full waterfall so callers can display it without
    recomputing anything.
    """

    minorista_id: str
    amount: Decimal
    profit_rate: Decimal
    profit: Decimal
    from_surplus: Decimal
    from_credit: Decimal
    external_debt: Decimal
    debt_paid: Decimal
    credit_restored: Decimal
    surplus_added: Decimal
    previous_available_credit: Decimal
    available_credit: Decimal
    previous_balance_in_favor: Decimal
    balance_in_favor: Decimal
    entries: list[TransactionEntryDTO]
    idempotent_replay: bool = Field(
        default=False,
        description="True when the idempotency key matched an earlier discharge"
    )


class SufficiencyResponseDTO(BaseModel):
    """Response DTO for a sufficiency preview"""

    minorista_id: str
    accepted: bool
    amount: Decimal
    profit: Decimal
    unpaid_debt: Decimal
    total_after: Decimal
    from_surplus: Decimal
    from_credit: Decimal
    external_debt: Decimal
    debt_paid: Decimal
    credit_restored: Decimal
    surplus_added: Decimal
    available_credit_after: Decimal
    balance_in_favor_after: Decimal


class LedgerCommandResponseDTO(BaseModel):
    """Response DTO for pay-debt, credit-limit and adjustment commands"""

    entry: TransactionEntryDTO
    account: AccountResponseDTO


class ListTransactionsResponseDTO(BaseModel):
    """Paginated transaction log, newest first"""

    transactions: list[TransactionEntryDTO]
    total: int
    limit: int
    offset: int


class AuditStatus(str, Enum):
    OK = "OK"
    INCONSISTENT = "INCONSISTENT"


class FirstTransactionDTO(BaseModel):
    transaction_type: str
    amount: Decimal
    date: datetime


class LastTransactionDTO(BaseModel):
    transaction_type: str
    stored_available: Decimal
    stored_surplus: Decimal
    date: datetime


class AuditDetailsDTO(BaseModel):
    stored_available: Decimal
    stored_surplus: Decimal
    stored_credit_limit: Decimal
    calculated_available: Decimal
    calculated_surplus: Decimal
    calculated_credit_limit: Decimal
    difference: Decimal = Field(
        ...,
        description="(stored available + stored surplus) - (calculated available + calculated surplus)"
    )
    accumulated_debt: Decimal
    accumulated_profit: Decimal
    uncovered_debt: Decimal = Field(
        ...,
        description="External debt replayed charges could not cover (always 0 for a healthy log)"
    )
    entries_replayed: int
    snapshot_mismatches: int
    seeded_from_snapshot: bool
    first_transaction: Optional[FirstTransactionDTO] = None
    last_transaction: Optional[LastTransactionDTO] = None


class AuditResultDTO(BaseModel):
    """Replay audit of one account"""

    minorista_id: str
    status: AuditStatus
    details: AuditDetailsDTO
    trace: list[str]
    audited_at: datetime


class ReconciliationResultDTO(BaseModel):
    """Replay audit of every account"""

    total_accounts_checked: int
    inconsistencies_found: int
    inconsistent: list[AuditResultDTO]
    reconciliation_time: datetime
    execution_time_ms: int
