"""Minorista Transaction Domain Entity

Immutable append-only log of every ledger-affecting event for a reseller.
Each entry snapshots the balances before and after it was applied, so the
log can be replayed and checked against the account projection.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, ForeignKey, Integer, Numeric, String, event
from src.domain.base import BaseModel
from src.domain.exceptions import ImmutableEntryError
from src.domain.ledger_state import LedgerState
from src.domain.money import ZERO


class TransactionType(str, Enum):
    """Minorista transaction types"""
    DISCOUNT = "DISCOUNT"        # Charge of a giro against surplus/credit
    PROFIT = "PROFIT"            # Profit credited straight to surplus
    RECHARGE = "RECHARGE"        # Debt payment by the reseller
    ADJUSTMENT = "ADJUSTMENT"    # Admin credit-limit change or balance correction


class AdjustmentTarget(str, Enum):
    """What an ADJUSTMENT entry changes"""
    BALANCE = "BALANCE"
    CREDIT_LIMIT = "CREDIT_LIMIT"


def _money_column(nullable: bool = False) -> Column:
    return Column(Numeric(18, 2), nullable=nullable)


class MinoristaTransaction(BaseModel, table=True):
    """
    Minorista Transaction - Immutable ledger entry

    Domain Rules:
    - Entries are created once by a ledger command and never updated or deleted
    - id is the log position; replay order is (created_at, id)
    - idempotency_key, when given, is unique (prevents double charging a giro)
    - Snapshot fields chain: previous_* of an entry equals the post values
      of the entry before it

    Type-specific fields:
    - DISCOUNT: balance_in_favor_used, credit_used, external_debt, debt_paid,
      remaining_balance, profit_earned, profit_rate, exchange_rate
    - PROFIT: profit_earned
    - RECHARGE: debt_paid, surplus_added
    - ADJUSTMENT: adjustment_target (amount is signed)
    """

    __tablename__ = "minorista_transactions"
    __table_args__ = (
        Index("ix_minorista_transactions_account_order", "account_id", "created_at", "id"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            BigInteger().with_variant(Integer, "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        description="Unique transaction identifier (log position)"
    )

    account_id: int = Field(
        sa_column=Column(
            BigInteger().with_variant(Integer, "sqlite"),
            ForeignKey("minorista_accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        description="Foreign key to MinoristaAccount"
    )

    minorista_id: str = Field(
        index=True,
        description="Minorista ID for query optimization"
    )

    transaction_type: TransactionType = Field(
        description="Type of entry (DISCOUNT, PROFIT, RECHARGE, ADJUSTMENT)"
    )

    amount: Decimal = Field(
        sa_column=_money_column(),
        description="Entry amount (signed only for ADJUSTMENT)"
    )

    credit_limit: Decimal = Field(
        sa_column=_money_column(),
        description="Credit limit after the entry"
    )

    previous_available_credit: Decimal = Field(
        sa_column=_money_column(),
        description="Available credit before the entry"
    )

    available_credit: Decimal = Field(
        sa_column=_money_column(),
        description="Available credit after the entry"
    )

    previous_balance_in_favor: Decimal = Field(
        sa_column=_money_column(),
        description="Balance in favor before the entry"
    )

    balance_in_favor: Decimal = Field(
        sa_column=_money_column(),
        description="Balance in favor after the entry"
    )

    accumulated_debt: Decimal = Field(
        sa_column=_money_column(),
        description="Derived debt after the entry"
    )

    accumulated_profit: Decimal = Field(
        sa_column=_money_column(),
        description="Running profit total after the entry"
    )

    balance_in_favor_used: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))
    credit_used: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))
    external_debt: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))
    remaining_balance: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))
    profit_earned: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))
    debt_paid: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))
    surplus_added: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))

    profit_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(9, 6), nullable=True),
        description="Profit rate applied to a DISCOUNT"
    )

    exchange_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 6), nullable=True),
        description="Exchange rate quoted on the giro (informational)"
    )

    adjustment_target: Optional[AdjustmentTarget] = Field(
        default=None,
        description="What an ADJUSTMENT entry changed"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Free text (adjustment reason, giro reference)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True, unique=True, index=True),
        description="Unique key for idempotent commands (e.g. giro id)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Entry timestamp (immutable)"
    )

    def previous_state(self) -> LedgerState:
        """Balances recorded just before this entry was applied"""
        return LedgerState(
            credit_limit=self.previous_credit_limit,
            available_credit=self.previous_available_credit,
            balance_in_favor=self.previous_balance_in_favor,
            accumulated_profit=self.accumulated_profit - self.profit_delta,
        )

    def recorded_state(self) -> LedgerState:
        """Balances recorded just after this entry was applied"""
        return LedgerState(
            credit_limit=self.credit_limit,
            available_credit=self.available_credit,
            balance_in_favor=self.balance_in_favor,
            accumulated_profit=self.accumulated_profit,
        )

    @property
    def previous_credit_limit(self) -> Decimal:
        if (
            self.transaction_type == TransactionType.ADJUSTMENT
            and self.adjustment_target == AdjustmentTarget.CREDIT_LIMIT
        ):
            return self.credit_limit - self.amount
        return self.credit_limit

    @property
    def profit_delta(self) -> Decimal:
        if self.transaction_type in (TransactionType.DISCOUNT, TransactionType.PROFIT):
            return self.profit_earned or ZERO
        return ZERO

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "account_id": 1,
                "minorista_id": "minorista_abc123",
                "transaction_type": "DISCOUNT",
                "amount": "600.00",
                "credit_limit": "1000.00",
                "previous_available_credit": "1000.00",
                "available_credit": "430.00",
                "previous_balance_in_favor": "0.00",
                "balance_in_favor": "0.00",
                "balance_in_favor_used": "0.00",
                "credit_used": "600.00",
                "external_debt": "0.00",
                "remaining_balance": "0.00",
                "profit_earned": "30.00",
                "profit_rate": "0.050000",
                "accumulated_debt": "570.00",
                "accumulated_profit": "30.00",
                "idempotency_key": "giro_789",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }


@event.listens_for(MinoristaTransaction, "before_update")
def _reject_entry_update(mapper, connection, target):
    raise ImmutableEntryError(f"Transaction entry {target.id} is immutable")


@event.listens_for(MinoristaTransaction, "before_delete")
def _reject_entry_delete(mapper, connection, target):
    raise ImmutableEntryError(f"Transaction entry {target.id} cannot be deleted")
