"""OpenAccount Use Case

Creates the ledger account of a new minorista.
"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return
from src.domain.exceptions import AccountAlreadyExists
from src.domain.ledger_state import LedgerState, apply_credit_limit
from src.domain.minorista_account import MinoristaAccount
from src.domain.minorista_transaction import AdjustmentTarget, TransactionType
from src.domain.money import to_non_negative_money
from .base import HANDLED_ERRORS, LedgerCommand, build_entry
from .dtos import AccountResponseDTO, OpenAccountCommandDTO
from .mappers import account_to_dto

logger = logging.getLogger(__name__)


class OpenAccount(LedgerCommand):
    """
    Use Case: Open a minorista ledger account

    Business Rules:
    1. One account per minorista
    2. The account starts from the zero state
    3. A non-zero initial credit limit is logged as an ADJUSTMENT
       (CREDIT_LIMIT) entry, so the log replays to the opening balances
    """

    failure_message = "Failed to open ledger account"

    async def execute(self, command: OpenAccountCommandDTO) -> Result[AccountResponseDTO]:
        try:
            credit_limit = to_non_negative_money(command.credit_limit, field="credit_limit")

            async with self.lock_manager.hold(command.minorista_id):
                # Step 1: Reject duplicates
                existing = await self.account_repo.get_by_minorista_id(command.minorista_id)
                if existing:
                    raise AccountAlreadyExists(
                        f"Ledger account already exists for minorista {command.minorista_id}"
                    )

                # Step 2: Create the zero-state account
                try:
                    account = await self.account_repo.create(
                        MinoristaAccount(minorista_id=command.minorista_id)
                    )
                except IntegrityError:
                    raise AccountAlreadyExists(
                        f"Ledger account already exists for minorista {command.minorista_id}"
                    )

                # Step 3: Log the initial grant
                created = []
                before = LedgerState()
                after = before
                if credit_limit > 0:
                    after = apply_credit_limit(before, credit_limit)
                    created.append(
                        await self.transaction_repo.create(
                            build_entry(
                                account,
                                TransactionType.ADJUSTMENT,
                                credit_limit,
                                before,
                                after,
                                adjustment_target=AdjustmentTarget.CREDIT_LIMIT,
                                description="Initial credit limit",
                            )
                        )
                    )

                await self._commit(account, after)

            logger.info(
                f"Opened ledger account for minorista {command.minorista_id} "
                f"with credit limit {credit_limit}"
            )

            await self._publish(account, created)

            return Return.ok(account_to_dto(account))

        except HANDLED_ERRORS as e:
            return Return.err(await self._fail(e))
        except Exception:
            await self.uow.rollback()
            raise
