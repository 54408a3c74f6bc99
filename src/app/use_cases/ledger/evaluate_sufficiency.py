"""EvaluateSufficiency Use Case

Read-only preview of a discharge: would the minorista be able to afford it,
and how would the waterfall split it?
"""

from libs.result import Result, Return, Error
from src.app.repositories.minorista_account_repository import MinoristaAccountRepository
from src.domain.allocation import evaluate_sufficiency
from src.domain.exceptions import InvalidAmount, LedgerErrorCode
from src.domain.money import compute_profit, to_non_negative_money, to_rate
from .dtos import SufficiencyQueryDTO, SufficiencyResponseDTO


class EvaluateSufficiency:
    """
    Use Case: Preview a discharge without mutating anything

    Uses the same engine as ApplyDischarge against the stored balances, so the
    preview and the real charge can only disagree if the account changes in
    between.
    """

    def __init__(self, account_repo: MinoristaAccountRepository):
        self.account_repo = account_repo

    async def execute(self, query: SufficiencyQueryDTO) -> Result[SufficiencyResponseDTO]:
        try:
            amount = to_non_negative_money(query.amount)
            profit_rate = to_rate(query.profit_rate)
        except InvalidAmount as e:
            return Return.err(Error(code=e.code.value, message=e.message))

        account = await self.account_repo.get_by_minorista_id(query.minorista_id)
        if not account:
            return Return.err(
                Error(
                    code=LedgerErrorCode.ACCOUNT_NOT_FOUND.value,
                    message=f"Ledger account not found for minorista {query.minorista_id}",
                )
            )

        profit = compute_profit(amount, profit_rate)
        evaluation = evaluate_sufficiency(
            account.balance_in_favor, account.available_credit, amount, profit
        )

        return Return.ok(
            SufficiencyResponseDTO(
                minorista_id=account.minorista_id,
                accepted=evaluation.accepted,
                amount=amount,
                profit=profit,
                unpaid_debt=evaluation.unpaid_debt,
                total_after=evaluation.total_after,
                from_surplus=evaluation.allocation.from_surplus,
                from_credit=evaluation.allocation.from_credit,
                external_debt=evaluation.allocation.external_debt,
                debt_paid=evaluation.distribution.debt_paid,
                credit_restored=evaluation.distribution.credit_restored,
                surplus_added=evaluation.distribution.surplus_added,
                available_credit_after=evaluation.available_credit_after,
                balance_in_favor_after=evaluation.distribution.new_surplus,
            )
        )
