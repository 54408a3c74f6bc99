"""Background workers for the minorista ledger"""
from .ledger_auditor import LedgerAuditorWorker

__all__ = ["LedgerAuditorWorker"]
