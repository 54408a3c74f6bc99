"""RecordAdjustment Use Case

Manual correction of a minorista's balance by an administrator.
"""

import logging
from libs.result import Result, Return
from src.domain.ledger_state import apply_balance_adjustment
from src.domain.minorista_transaction import AdjustmentTarget, TransactionType
from src.domain.money import to_money
from .base import HANDLED_ERRORS, LedgerCommand, build_entry
from .dtos import AdjustmentCommandDTO, LedgerCommandResponseDTO
from .mappers import account_to_dto, entry_to_dto

logger = logging.getLogger(__name__)


class RecordAdjustment(LedgerCommand):
    """
    Use Case: Record a signed balance adjustment

    Business Rules:
    1. Amount is signed and non-zero
    2. Positive amounts are added to balance in favor
    3. Negative amounts are charged surplus first, then credit
    4. A negative adjustment may not create external debt
    """

    failure_message = "Failed to record adjustment"

    async def execute(self, command: AdjustmentCommandDTO) -> Result[LedgerCommandResponseDTO]:
        try:
            amount = to_money(command.amount)

            async with self.lock_manager.hold(command.minorista_id):
                account = await self._load_for_update(command.minorista_id)
                before = account.to_state()

                outcome = apply_balance_adjustment(before, amount)
                fields = {}
                if outcome.allocation is not None:
                    fields = dict(
                        balance_in_favor_used=outcome.allocation.from_surplus,
                        credit_used=outcome.allocation.from_credit,
                    )

                entry = build_entry(
                    account,
                    TransactionType.ADJUSTMENT,
                    amount,
                    before,
                    outcome.state,
                    adjustment_target=AdjustmentTarget.BALANCE,
                    description=command.reason,
                    **fields,
                )
                created = await self.transaction_repo.create(entry)
                await self._commit(account, outcome.state)

            logger.info(
                f"Adjustment of {amount} recorded for minorista {command.minorista_id}: {command.reason}"
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
