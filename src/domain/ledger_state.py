"""Ledger state transitions

Each transaction type moves an account's balances in exactly one way. The
live commands and the replay auditor both go through these functions, so a
replayed log is computed with the same arithmetic that produced it.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict
from src.domain.allocation import (
    ChargeAllocation,
    ProfitDistribution,
    allocate_charge,
    distribute_profit,
)
from src.domain.exceptions import InsufficientBalance, InvalidAmount
from src.domain.money import Money, ZERO


class LedgerState(BaseModel):
    """Balances of one account at a point in its history"""

    model_config = ConfigDict(frozen=True)

    credit_limit: Money = ZERO
    available_credit: Money = ZERO
    balance_in_favor: Money = ZERO
    accumulated_profit: Money = ZERO

    @property
    def total_liquidity(self) -> Money:
        return self.available_credit + self.balance_in_favor

    @property
    def debt(self) -> Money:
        return max(ZERO, self.credit_limit - self.total_liquidity)

    @property
    def credit_in_use(self) -> Money:
        return self.credit_limit - self.available_credit


class DiscountOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: LedgerState
    allocation: ChargeAllocation
    distribution: ProfitDistribution

    @property
    def unpaid_debt(self) -> Money:
        return self.allocation.external_debt - self.distribution.debt_paid


class DebtPaymentOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: LedgerState
    debt_paid: Money
    surplus_added: Money


class AdjustmentOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: LedgerState
    allocation: Optional[ChargeAllocation] = None


def apply_discount(state: LedgerState, amount: Money, profit: Money) -> DiscountOutcome:
    """Charge ``amount`` and distribute ``profit`` earned by that charge"""
    allocation = allocate_charge(state.balance_in_favor, state.available_credit, amount)
    distribution = distribute_profit(
        profit,
        allocation.external_debt,
        allocation.from_credit,
        state.balance_in_favor - allocation.from_surplus,
    )

    new_state = state.model_copy(
        update={
            "available_credit": state.available_credit
            - allocation.from_credit
            + distribution.credit_restored,
            "balance_in_favor": distribution.new_surplus,
            "accumulated_profit": state.accumulated_profit + profit,
        }
    )
    return DiscountOutcome(state=new_state, allocation=allocation, distribution=distribution)


def apply_profit(state: LedgerState, amount: Money) -> LedgerState:
    """Credit profit straight to surplus"""
    if amount < 0:
        raise InvalidAmount(f"profit must be >= 0, got {amount}")
    return state.model_copy(
        update={
            "balance_in_favor": state.balance_in_favor + amount,
            "accumulated_profit": state.accumulated_profit + amount,
        }
    )


def apply_debt_payment(state: LedgerState, amount: Money) -> DebtPaymentOutcome:
    """
    Pay down debt; any excess becomes balance in favor

    Debt never increases: the paid part restores available credit, which
    cannot exceed the credit limit because debt <= credit in use.
    """
    if amount < 0:
        raise InvalidAmount(f"payment must be >= 0, got {amount}")

    debt_paid = min(amount, state.debt)
    surplus_added = amount - debt_paid

    new_state = state.model_copy(
        update={
            "available_credit": state.available_credit + debt_paid,
            "balance_in_favor": state.balance_in_favor + surplus_added,
        }
    )
    return DebtPaymentOutcome(state=new_state, debt_paid=debt_paid, surplus_added=surplus_added)


def apply_credit_limit(state: LedgerState, new_limit: Money) -> LedgerState:
    """
    Move the credit ceiling without moving money

    Available credit shifts by the limit delta so credit in use, debt and
    surplus are unchanged.
    """
    if new_limit < 0:
        raise InvalidAmount(f"credit limit must be >= 0, got {new_limit}")

    new_available = state.available_credit + (new_limit - state.credit_limit)
    if new_available < 0:
        raise InvalidAmount(
            f"credit limit {new_limit} is below credit in use {state.credit_in_use}"
        )

    return state.model_copy(
        update={"credit_limit": new_limit, "available_credit": new_available}
    )


def apply_balance_adjustment(state: LedgerState, amount: Money) -> AdjustmentOutcome:
    """
    Manual correction: positive amounts add surplus, negative amounts are
    charged surplus-first against credit and may not create external debt
    """
    if amount == 0:
        raise InvalidAmount("adjustment amount must be non-zero")

    if amount > 0:
        return AdjustmentOutcome(
            state=state.model_copy(
                update={"balance_in_favor": state.balance_in_favor + amount}
            )
        )

    charge = -amount
    allocation = allocate_charge(state.balance_in_favor, state.available_credit, charge)
    if allocation.external_debt > 0:
        raise InsufficientBalance(
            f"Adjustment of {amount} exceeds liquidity {state.total_liquidity}",
            unpaid_debt=allocation.external_debt,
            total_after=state.total_liquidity - charge,
        )

    new_state = state.model_copy(
        update={
            "available_credit": state.available_credit - allocation.from_credit,
            "balance_in_favor": state.balance_in_favor - allocation.from_surplus,
        }
    )
    return AdjustmentOutcome(state=new_state, allocation=allocation)
