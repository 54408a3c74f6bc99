"""Entity to DTO conversion for ledger read models"""

from src.domain.minorista_account import MinoristaAccount
from src.domain.minorista_transaction import MinoristaTransaction, TransactionType
from src.domain.money import ZERO
from .dtos import (
    AccountResponseDTO,
    AdjustmentEntryDTO,
    DiscountEntryDTO,
    ProfitEntryDTO,
    RechargeEntryDTO,
)


def account_to_dto(account: MinoristaAccount) -> AccountResponseDTO:
    return AccountResponseDTO(
        minorista_id=account.minorista_id,
        credit_limit=account.credit_limit,
        available_credit=account.available_credit,
        balance_in_favor=account.balance_in_favor,
        accumulated_profit=account.accumulated_profit,
        debt=account.debt,
        total_liquidity=account.total_liquidity,
        last_updated=account.updated_at,
    )


def entry_to_dto(txn: MinoristaTransaction):
    """
    Build the tagged-union variant matching the entry's type

    Each variant only carries the fields that type records.
    """
    common = dict(
        id=txn.id,
        minorista_id=txn.minorista_id,
        amount=txn.amount,
        credit_limit=txn.credit_limit,
        previous_available_credit=txn.previous_available_credit,
        available_credit=txn.available_credit,
        previous_balance_in_favor=txn.previous_balance_in_favor,
        balance_in_favor=txn.balance_in_favor,
        accumulated_debt=txn.accumulated_debt,
        accumulated_profit=txn.accumulated_profit,
        description=txn.description,
        created_at=txn.created_at,
    )
    transaction_type = TransactionType(txn.transaction_type)

    if transaction_type == TransactionType.DISCOUNT:
        return DiscountEntryDTO(
            **common,
            balance_in_favor_used=txn.balance_in_favor_used or ZERO,
            credit_used=txn.credit_used or ZERO,
            external_debt=txn.external_debt or ZERO,
            debt_paid=txn.debt_paid or ZERO,
            remaining_balance=txn.remaining_balance if txn.remaining_balance is not None else txn.balance_in_favor,
            profit_earned=txn.profit_earned or ZERO,
            profit_rate=txn.profit_rate,
            exchange_rate=txn.exchange_rate,
            idempotency_key=txn.idempotency_key,
        )

    if transaction_type == TransactionType.PROFIT:
        return ProfitEntryDTO(**common, profit_earned=txn.profit_earned or txn.amount)

    if transaction_type == TransactionType.RECHARGE:
        return RechargeEntryDTO(
            **common,
            debt_paid=txn.debt_paid or ZERO,
            surplus_added=txn.surplus_added or ZERO,
            idempotency_key=txn.idempotency_key,
        )

    target = txn.adjustment_target
    return AdjustmentEntryDTO(
        **common,
        adjustment_target=target.value if hasattr(target, "value") else (target or "BALANCE"),
    )
