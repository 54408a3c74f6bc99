"""Ledger Auditor Background Worker

Periodically replays every minorista ledger and reports the accounts whose
stored balances diverge from their transaction log.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.minorista_account_repository import SqlAlchemyMinoristaAccountRepository
from src.adapter.repositories.minorista_transaction_repository import SqlAlchemyMinoristaTransactionRepository
from src.app.use_cases.ledger import ReconcileLedgers, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class LedgerAuditorWorker:
    """
    Background worker for minorista ledger audits

    Features:
    - Replays every account's log through the live state transitions
    - Logs inconsistent accounts with their difference for manual review
    - Never writes corrected balances back
    - Can run once or continuously

    Usage:
        # Run once
        worker = LedgerAuditorWorker()
        result = await worker.run_once()

        # Run continuously
        worker = LedgerAuditorWorker()
        await worker.run_forever(interval_seconds=86400)  # Daily
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("LedgerAuditorWorker initialized")

    async def run_once(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> ReconciliationResultDTO:
        """
        Audit every account once

        Returns:
            ReconciliationResultDTO with the inconsistent accounts
        """
        if not ApplicationConfig.AUDIT_ENABLED:
            logger.info("Ledger audit is disabled, skipping")
            return ReconciliationResultDTO(
                total_accounts_checked=0,
                inconsistencies_found=0,
                inconsistent=[],
                reconciliation_time=datetime.utcnow(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = ReconcileLedgers(
                account_repo=SqlAlchemyMinoristaAccountRepository(session),
                transaction_repo=SqlAlchemyMinoristaTransactionRepository(session),
            )

            result = await use_case.execute(start=start, end=end)

            if result.is_err():
                logger.error(f"Ledger audit failed: {result.error.message}")
                raise RuntimeError(f"Ledger audit failed: {result.error.message}")

            response = result.value

            if response.inconsistencies_found > 0:
                logger.error(
                    f"ALERT: {response.inconsistencies_found} inconsistent minorista ledgers found!"
                )
                for audit in response.inconsistent:
                    logger.error(
                        f"  - Minorista {audit.minorista_id}: "
                        f"stored={audit.details.stored_available}/{audit.details.stored_surplus}, "
                        f"calculated={audit.details.calculated_available}/{audit.details.calculated_surplus}, "
                        f"diff={audit.details.difference}"
                    )

            return response

    async def run_forever(self, interval_seconds: int = 86400):
        """
        Run the audit continuously at the given interval

        Args:
            interval_seconds: Seconds between runs (default: 24 hours)
        """
        logger.info(f"Starting continuous ledger audit with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Audit cycle complete. "
                    f"Checked {result.total_accounts_checked} accounts, "
                    f"found {result.inconsistencies_found} inconsistencies "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Audit cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("LedgerAuditorWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.ledger_auditor --once

        # Run continuously (default: AUDIT_INTERVAL_SECONDS)
        python -m src.worker.ledger_auditor

        # Run continuously with custom interval (in seconds)
        python -m src.worker.ledger_auditor --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Minorista Ledger Auditor")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.AUDIT_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: AUDIT_INTERVAL_SECONDS)"
    )
    args = parser.parse_args()

    worker = LedgerAuditorWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Ledger audit complete:")
            print(f"  Total accounts checked: {result.total_accounts_checked}")
            print(f"  Inconsistencies found: {result.inconsistencies_found}")
            print(f"  Execution time: {result.execution_time_ms}ms")
            for audit in result.inconsistent:
                print(f"\nMinorista {audit.minorista_id} (difference={audit.details.difference}):")
                for line in audit.trace:
                    print(f"  {line}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


def cli():
    """Console script entry point"""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
