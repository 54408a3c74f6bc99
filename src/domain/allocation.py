"""Allocation Engine

Pure waterfall arithmetic shared by every balance-affecting path:

- a charge consumes balance in favor (surplus) first, then available credit;
  whatever is still unmet is external debt
- earned profit pays external debt first, then restores the credit used by
  the charge, and the remainder is added to surplus
- a charge is affordable only if profit covers all external debt and total
  liquidity stays non-negative

No I/O and no rounding: inputs are minor-unit Decimals and every split is
made with min/subtract, so the conservation identities hold exactly.
"""

from decimal import Decimal
from pydantic import BaseModel, ConfigDict
from src.domain.exceptions import InvalidAmount
from src.domain.money import Money, ZERO


class ChargeAllocation(BaseModel):
    """How a charge was split across surplus, credit and external debt"""

    model_config = ConfigDict(frozen=True)

    from_surplus: Money
    from_credit: Money
    external_debt: Money

    @property
    def total(self) -> Money:
        return self.from_surplus + self.from_credit + self.external_debt


class ProfitDistribution(BaseModel):
    """How earned profit was split across debt, credit and surplus"""

    model_config = ConfigDict(frozen=True)

    debt_paid: Money
    credit_restored: Money
    surplus_added: Money
    new_surplus: Money
    credit_used_remaining: Money

    @property
    def total(self) -> Money:
        return self.debt_paid + self.credit_restored + self.surplus_added


class SufficiencyEvaluation(BaseModel):
    """Dry-run outcome of a charge with its earned profit"""

    model_config = ConfigDict(frozen=True)

    accepted: bool
    unpaid_debt: Money
    total_after: Money
    profit: Money
    allocation: ChargeAllocation
    distribution: ProfitDistribution

    @property
    def available_credit_after(self) -> Money:
        return self.total_after - self.distribution.new_surplus


def _require_non_negative(**values: Decimal) -> None:
    for name, value in values.items():
        if value < 0:
            raise InvalidAmount(f"{name} must be >= 0, got {value}")


def allocate_charge(balance_in_favor: Money, available_credit: Money, amount: Money) -> ChargeAllocation:
    """
    Split a charge: surplus first, then credit, remainder is external debt

    Args:
        balance_in_favor: Surplus available before the charge
        available_credit: Credit available before the charge
        amount: Charge amount (>= 0)

    Returns:
        ChargeAllocation with from_surplus + from_credit + external_debt == amount
    """
    _require_non_negative(
        balance_in_favor=balance_in_favor,
        available_credit=available_credit,
        amount=amount,
    )

    from_surplus = min(amount, balance_in_favor)
    remaining = amount - from_surplus
    from_credit = min(remaining, available_credit)
    external_debt = remaining - from_credit

    return ChargeAllocation(
        from_surplus=from_surplus,
        from_credit=from_credit,
        external_debt=external_debt,
    )


def distribute_profit(
    profit: Money,
    external_debt: Money,
    credit_used: Money,
    current_surplus: Money,
) -> ProfitDistribution:
    """
    Distribute profit: pay external debt, restore used credit, then surplus

    Args:
        profit: Profit earned (>= 0)
        external_debt: Debt left unmet by the charge
        credit_used: Credit consumed by the charge
        current_surplus: Surplus left after the charge

    Returns:
        ProfitDistribution with debt_paid + credit_restored + surplus_added == profit
    """
    _require_non_negative(
        profit=profit,
        external_debt=external_debt,
        credit_used=credit_used,
        current_surplus=current_surplus,
    )

    debt_paid = min(profit, external_debt)
    remaining_profit = profit - debt_paid

    credit_restored = min(remaining_profit, credit_used)
    surplus_added = remaining_profit - credit_restored

    return ProfitDistribution(
        debt_paid=debt_paid,
        credit_restored=credit_restored,
        surplus_added=surplus_added,
        new_surplus=current_surplus + surplus_added,
        credit_used_remaining=credit_used - credit_restored,
    )


def evaluate_sufficiency(
    balance_in_favor: Money,
    available_credit: Money,
    amount: Money,
    profit: Money,
) -> SufficiencyEvaluation:
    """
    Decide whether an account can afford a charge once profit is applied

    The charge is rejected iff profit leaves external debt unpaid or total
    liquidity after the operation would be negative.
    """
    allocation = allocate_charge(balance_in_favor, available_credit, amount)
    distribution = distribute_profit(
        profit,
        allocation.external_debt,
        allocation.from_credit,
        balance_in_favor - allocation.from_surplus,
    )

    unpaid_debt = max(ZERO, allocation.external_debt - profit)
    total_after = distribution.new_surplus + (
        available_credit - allocation.from_credit + distribution.credit_restored
    )

    return SufficiencyEvaluation(
        accepted=not (unpaid_debt > 0 or total_after < 0),
        unpaid_debt=unpaid_debt,
        total_after=total_after,
        profit=profit,
        allocation=allocation,
        distribution=distribution,
    )
