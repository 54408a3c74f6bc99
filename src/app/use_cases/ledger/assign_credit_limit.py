"""AssignCreditLimit Use Case

Moves a minorista's credit ceiling. The change is logged as an ADJUSTMENT
entry (target CREDIT_LIMIT, amount = limit delta) so a replay reproduces the
available credit.
"""

import logging
from libs.result import Result, Return
from src.domain.ledger_state import apply_credit_limit
from src.domain.minorista_transaction import AdjustmentTarget, TransactionType
from src.domain.money import to_non_negative_money
from .base import HANDLED_ERRORS, LedgerCommand, build_entry
from .dtos import CreditLimitCommandDTO, LedgerCommandResponseDTO
from .mappers import account_to_dto, entry_to_dto

logger = logging.getLogger(__name__)


class AssignCreditLimit(LedgerCommand):
    """
    Use Case: Assign a new credit limit

    Business Rules:
    1. New limit must be >= 0
    2. Available credit shifts by the delta; debt and surplus are preserved
    3. A limit below the credit currently in use is rejected
    """

    failure_message = "Failed to assign credit limit"

    async def execute(self, command: CreditLimitCommandDTO) -> Result[LedgerCommandResponseDTO]:
        try:
            new_limit = to_non_negative_money(command.credit_limit, field="credit_limit")

            async with self.lock_manager.hold(command.minorista_id):
                account = await self._load_for_update(command.minorista_id)
                before = account.to_state()
                delta = new_limit - before.credit_limit

                after = apply_credit_limit(before, new_limit)
                entry = build_entry(
                    account,
                    TransactionType.ADJUSTMENT,
                    delta,
                    before,
                    after,
                    adjustment_target=AdjustmentTarget.CREDIT_LIMIT,
                    description=f"Credit limit {before.credit_limit} -> {new_limit}",
                )
                created = await self.transaction_repo.create(entry)
                await self._commit(account, after)

            logger.info(
                f"Credit limit for minorista {command.minorista_id} set to {new_limit} "
                f"(was {before.credit_limit})"
            )

            await self._publish(account, [created])

            return Return.ok(
                LedgerCommandResponseDTO(entry=entry_to_dto(created), account=account_to_dto(account))
            )

        except HANDLED_ERRORS as e:
            return Return.err(await self._fail(e))
        except Exception:
            await self.uow.rollback()
            raise
