"""PayDebt Use Case

Records a payment made by a minorista. The payment restores available credit
up to the outstanding debt; any excess becomes balance in favor.
"""

import logging
from libs.result import Result, Return
from src.domain.exceptions import InvalidAmount
from src.domain.ledger_state import apply_debt_payment
from src.domain.minorista_transaction import TransactionType
from src.domain.money import to_money
from .base import HANDLED_ERRORS, LedgerCommand, build_entry
from .dtos import DebtPaymentCommandDTO, LedgerCommandResponseDTO
from .mappers import account_to_dto, entry_to_dto

logger = logging.getLogger(__name__)


class PayDebt(LedgerCommand):
    """
    Use Case: Pay down a minorista's debt

    Business Rules:
    1. Payment must be strictly positive
    2. debt_paid = min(amount, debt) restores available credit
    3. The remainder is added to balance in favor
    4. Debt never increases
    5. Idempotency: a repeated idempotency_key returns the recorded entry
    """

    failure_message = "Failed to record debt payment"

    async def execute(self, command: DebtPaymentCommandDTO) -> Result[LedgerCommandResponseDTO]:
        try:
            # Step 1: Validate
            amount = to_money(command.amount)
            if amount <= 0:
                raise InvalidAmount(f"payment amount must be > 0, got {amount}")

            async with self.lock_manager.hold(command.minorista_id):
                # Step 2: Idempotent replay
                if command.idempotency_key:
                    existing = await self.transaction_repo.get_by_idempotency_key(
                        command.idempotency_key
                    )
                    if existing:
                        original = existing[0]
                        if (
                            TransactionType(original.transaction_type) != TransactionType.RECHARGE
                            or original.minorista_id != command.minorista_id
                        ):
                            raise InvalidAmount(
                                f"idempotency_key {command.idempotency_key} was already used by another operation"
                            )
                        if original.amount != amount:
                            raise InvalidAmount(
                                f"idempotency_key {command.idempotency_key} was already used for "
                                f"amount={original.amount}"
                            )
                        account = await self.account_repo.get_by_minorista_id(command.minorista_id)
                        return Return.ok(
                            LedgerCommandResponseDTO(
                                entry=entry_to_dto(original),
                                account=account_to_dto(account),
                            )
                        )

                # Step 3: Load account with pessimistic lock
                account = await self._load_for_update(command.minorista_id)
                before = account.to_state()

                # Step 4: Apply payment
                outcome = apply_debt_payment(before, amount)
                entry = build_entry(
                    account,
                    TransactionType.RECHARGE,
                    amount,
                    before,
                    outcome.state,
                    debt_paid=outcome.debt_paid,
                    surplus_added=outcome.surplus_added,
                    description=command.description,
                    idempotency_key=command.idempotency_key,
                )
                created = await self.transaction_repo.create(entry)

                # Step 5: Update projection and commit
                await self._commit(account, outcome.state)

            logger.info(
                f"Debt payment of {amount} recorded for minorista {command.minorista_id}: "
                f"debt_paid={outcome.debt_paid} surplus_added={outcome.surplus_added}"
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
