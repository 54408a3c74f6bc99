"""Money helpers

All ledger amounts are ``Decimal`` values with two minor-unit places.
Binary floats are only accepted at the boundary, through ``to_money``.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union
from src.domain.exceptions import InvalidAmount

Money = Decimal

MONEY_PLACES = 2
MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Union[Decimal, int, str, float], field: str = "amount") -> Money:
    """
    Convert a boundary value into a ledger amount

    Args:
        value: Decimal, int, numeric string, or float (converted via repr)
        field: Name used in error messages

    Returns:
        Decimal quantized to the minor unit

    Raises:
        InvalidAmount: If the value is not a finite number or has more
            precision than the minor unit
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"{field} must be a number, got bool")

    try:
        if isinstance(value, float):
            decimal_value = Decimal(repr(value))
        else:
            decimal_value = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"{field} is not a valid number: {value!r}")

    if not decimal_value.is_finite():
        raise InvalidAmount(f"{field} must be finite, got {value!r}")

    quantized = decimal_value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    if quantized != decimal_value:
        raise InvalidAmount(
            f"{field} has more than {MONEY_PLACES} decimal places: {value!r}"
        )
    return quantized


def to_non_negative_money(value: Union[Decimal, int, str, float], field: str = "amount") -> Money:
    amount = to_money(value, field)
    if amount < 0:
        raise InvalidAmount(f"{field} must be >= 0, got {amount}")
    return amount


def to_rate(value: Union[Decimal, int, str, float], field: str = "profit_rate") -> Decimal:
    """Parse a profit rate; rates are fractions in [0, 1]"""
    try:
        rate = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"{field} is not a valid number: {value!r}")

    if not rate.is_finite() or rate < 0 or rate > 1:
        raise InvalidAmount(f"{field} must be between 0 and 1, got {value!r}")
    return rate


def compute_profit(amount: Money, profit_rate: Decimal) -> Money:
    """Profit earned on a discharge, rounded half-up to the minor unit"""
    return (amount * profit_rate).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def to_exchange_rate(value: Union[Decimal, int, str, float]) -> Decimal:
    """Exchange rates are informational: any finite positive number"""
    try:
        rate = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"exchange_rate is not a valid number: {value!r}")

    if not rate.is_finite() or rate <= 0:
        raise InvalidAmount(f"exchange_rate must be a positive number, got {value!r}")
    return rate
