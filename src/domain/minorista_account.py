"""Minorista Account Domain Entity

Materialized projection of a reseller's credit ledger. The transaction log is
the source of truth; this row caches its latest state for fast reads and for
the per-account row lock taken by every mutating command.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, CheckConstraint, Integer, Numeric
from src.domain.base import BaseModel
from src.domain.ledger_state import LedgerState
from src.domain.money import ZERO


class MinoristaAccount(BaseModel, table=True):
    """
    Minorista Account - Credit line and surplus of one reseller

    Domain Rules:
    - One account per minorista (minorista_id is unique)
    - credit_limit, available_credit and balance_in_favor are never negative
    - Balances change only through ledger commands, each of which appends
      MinoristaTransaction entries in the same unit of work
    - debt is derived: max(0, credit_limit - (available_credit + balance_in_favor))
    """

    __tablename__ = "minorista_accounts"
    __table_args__ = (
        CheckConstraint("credit_limit >= 0", name="credit_limit_non_negative"),
        CheckConstraint("available_credit >= 0", name="available_credit_non_negative"),
        CheckConstraint("balance_in_favor >= 0", name="balance_in_favor_non_negative"),
        CheckConstraint("accumulated_profit >= 0", name="accumulated_profit_non_negative"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            BigInteger().with_variant(Integer, "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        description="Unique account identifier (auto-increment)"
    )

    minorista_id: str = Field(
        index=True,
        unique=True,
        description="Minorista ID (unique - one account per reseller)"
    )

    credit_limit: Decimal = Field(
        default=ZERO,
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Credit ceiling assigned by an administrator"
    )

    available_credit: Decimal = Field(
        default=ZERO,
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Credit not currently consumed"
    )

    balance_in_favor: Decimal = Field(
        default=ZERO,
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Surplus owned by the reseller, consumed before credit"
    )

    accumulated_profit: Decimal = Field(
        default=ZERO,
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Running total of profit earned on discharges"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Account creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last balance update timestamp"
    )

    @property
    def total_liquidity(self) -> Decimal:
        return self.available_credit + self.balance_in_favor

    @property
    def debt(self) -> Decimal:
        return max(ZERO, self.credit_limit - self.total_liquidity)

    def to_state(self) -> LedgerState:
        return LedgerState(
            credit_limit=self.credit_limit,
            available_credit=self.available_credit,
            balance_in_favor=self.balance_in_favor,
            accumulated_profit=self.accumulated_profit,
        )

    def apply_state(self, state: LedgerState) -> None:
        """Copy a computed ledger state onto the projection"""
        self.credit_limit = state.credit_limit
        self.available_credit = state.available_credit
        self.balance_in_favor = state.balance_in_favor
        self.accumulated_profit = state.accumulated_profit
        self.updated_at = datetime.utcnow()

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "minorista_id": "minorista_abc123",
                "credit_limit": "1000000.00",
                "available_credit": "430000.00",
                "balance_in_favor": "0.00",
                "accumulated_profit": "30000.00",
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z"
            }
        }
