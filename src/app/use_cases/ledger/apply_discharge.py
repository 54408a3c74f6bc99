"""ApplyDischarge Use Case

Charges a giro against a minorista account: surplus first, then credit, with
the earned profit paying external debt, restoring credit and finally adding
to surplus.
"""

import logging
from decimal import Decimal
from libs.result import Result, Return
from src.domain.allocation import evaluate_sufficiency
from src.domain.exceptions import InsufficientBalance, InvalidAmount
from src.domain.ledger_state import apply_discount, apply_profit
from src.domain.minorista_transaction import MinoristaTransaction, TransactionType
from src.domain.money import (
    ZERO,
    compute_profit,
    to_exchange_rate,
    to_non_negative_money,
    to_rate,
)
from .base import HANDLED_ERRORS, LedgerCommand, build_entry
from .dtos import DischargeCommandDTO, DischargeResponseDTO
from .mappers import entry_to_dto

logger = logging.getLogger(__name__)

PROFIT_KEY_SUFFIX = ":profit"


class ApplyDischarge(LedgerCommand):
    """
    Use Case: Charge a giro against a minorista account

    Business Rules:
    1. Amount must be a non-negative minor-unit value, rate within [0, 1]
    2. Rejected iff profit leaves external debt unpaid or liquidity negative
    3. A rejected charge mutates nothing
    4. Profit that lands entirely in surplus is itemized as its own PROFIT
       entry; any other profit is recorded on the DISCOUNT entry
    5. Idempotency: a repeated idempotency_key returns the recorded entries

    Flow:
    1. Validate amount and rate
    2. Hold the account lock
    3. Check idempotency
    4. Load account with SELECT FOR UPDATE
    5. Evaluate sufficiency
    6. Append entries and update the projection
    7. Commit and publish
    """

    failure_message = "Failed to apply discharge"

    async def execute(self, command: DischargeCommandDTO) -> Result[DischargeResponseDTO]:
        try:
            # Step 1: Validate before reading any state
            amount = to_non_negative_money(command.amount)
            profit_rate = to_rate(command.profit_rate)
            exchange_rate = (
                to_exchange_rate(command.exchange_rate) if command.exchange_rate is not None else None
            )

            async with self.lock_manager.hold(command.minorista_id):
                # Step 2: Idempotent replay returns the recorded entries untouched
                if command.idempotency_key:
                    existing = await self.transaction_repo.get_by_idempotency_key(
                        command.idempotency_key
                    )
                    if existing:
                        logger.info(
                            f"Discharge {command.idempotency_key} already applied for "
                            f"minorista {command.minorista_id}"
                        )
                        return Return.ok(
                            self._replay_response(command, existing, amount, profit_rate)
                        )

                # Step 3: Load account with pessimistic lock
                account = await self._load_for_update(command.minorista_id)
                before = account.to_state()

                # Step 4: Evaluate sufficiency with the earned profit
                profit = compute_profit(amount, profit_rate)
                evaluation = evaluate_sufficiency(
                    before.balance_in_favor, before.available_credit, amount, profit
                )
                if not evaluation.accepted:
                    raise InsufficientBalance(
                        f"Insufficient balance for minorista {command.minorista_id}: "
                        f"unpaid_debt={evaluation.unpaid_debt}, total_after={evaluation.total_after}",
                        unpaid_debt=evaluation.unpaid_debt,
                        total_after=evaluation.total_after,
                    )

                allocation = evaluation.allocation
                profit_to_surplus_only = (
                    profit > 0 and allocation.from_credit == 0 and allocation.external_debt == 0
                )

                # Step 5: Build entries with chained snapshots
                entries: list[MinoristaTransaction] = []
                discount_profit = ZERO if profit_to_surplus_only else profit
                discount = apply_discount(before, amount, discount_profit)
                entries.append(
                    build_entry(
                        account,
                        TransactionType.DISCOUNT,
                        amount,
                        before,
                        discount.state,
                        balance_in_favor_used=discount.allocation.from_surplus,
                        credit_used=discount.allocation.from_credit,
                        external_debt=discount.allocation.external_debt,
                        debt_paid=discount.distribution.debt_paid,
                        remaining_balance=discount.state.balance_in_favor,
                        profit_earned=discount_profit,
                        profit_rate=profit_rate,
                        exchange_rate=exchange_rate,
                        description=command.description,
                        idempotency_key=command.idempotency_key,
                    )
                )
                after = discount.state

                if profit_to_surplus_only:
                    after = apply_profit(discount.state, profit)
                    entries.append(
                        build_entry(
                            account,
                            TransactionType.PROFIT,
                            profit,
                            discount.state,
                            after,
                            profit_earned=profit,
                            description=command.description,
                            idempotency_key=(
                                f"{command.idempotency_key}{PROFIT_KEY_SUFFIX}"
                                if command.idempotency_key
                                else None
                            ),
                        )
                    )

                created = [await self.transaction_repo.create(entry) for entry in entries]

                # Step 6: Update projection and commit atomically
                await self._commit(account, after)

            logger.info(
                f"Discharge of {amount} applied for minorista {command.minorista_id}: "
                f"surplus={allocation.from_surplus} credit={allocation.from_credit} "
                f"external={allocation.external_debt} profit={profit}"
            )

            # Step 7: Publish after commit
            await self._publish(account, created)

            return Return.ok(self._to_response(created, idempotent_replay=False))

        except HANDLED_ERRORS as e:
            return Return.err(await self._fail(e))
        except Exception:
            await self.uow.rollback()
            raise

    def _replay_response(
        self,
        command: DischargeCommandDTO,
        existing: list[MinoristaTransaction],
        amount: Decimal,
        profit_rate: Decimal,
    ) -> DischargeResponseDTO:
        ordered = sorted(existing, key=lambda entry: entry.id)
        original = ordered[0]

        # Idempotency keys are shared with debt payments
        if (
            TransactionType(original.transaction_type) != TransactionType.DISCOUNT
            or original.minorista_id != command.minorista_id
        ):
            raise InvalidAmount(
                f"idempotency_key {command.idempotency_key} was already used by another operation"
            )
        if original.amount != amount or (
            original.profit_rate is not None and original.profit_rate != profit_rate
        ):
            raise InvalidAmount(
                f"idempotency_key {command.idempotency_key} was already used for "
                f"amount={original.amount} profit_rate={original.profit_rate}"
            )
        return self._to_response(ordered, idempotent_replay=True)

    def _to_response(self, entries: list[MinoristaTransaction], idempotent_replay: bool) -> DischargeResponseDTO:
        """
        Rebuild the waterfall from the stored entries

        Works identically for a fresh charge and for an idempotent replay,
        since every figure is read back from the log.
        """
        discount = entries[0]
        last = entries[-1]

        credit_used = discount.credit_used or ZERO
        direct_profit = sum(
            (entry.profit_earned or ZERO for entry in entries[1:]), ZERO
        )
        profit = (discount.profit_earned or ZERO) + direct_profit
        debt_paid = discount.debt_paid or ZERO
        credit_restored = discount.available_credit - discount.previous_available_credit + credit_used

        return DischargeResponseDTO(
            minorista_id=discount.minorista_id,
            amount=discount.amount,
            profit_rate=discount.profit_rate if discount.profit_rate is not None else Decimal("0"),
            profit=profit,
            from_surplus=discount.balance_in_favor_used or ZERO,
            from_credit=credit_used,
            external_debt=discount.external_debt or ZERO,
            debt_paid=debt_paid,
            credit_restored=credit_restored,
            surplus_added=profit - debt_paid - credit_restored,
            previous_available_credit=discount.previous_available_credit,
            available_credit=last.available_credit,
            previous_balance_in_favor=discount.previous_balance_in_favor,
            balance_in_favor=last.balance_in_favor,
            entries=[entry_to_dto(entry) for entry in entries],
            idempotent_replay=idempotent_replay,
        )

