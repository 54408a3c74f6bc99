"""Minorista ledger use cases"""
from .open_account import OpenAccount
from .apply_discharge import ApplyDischarge
from .evaluate_sufficiency import EvaluateSufficiency
from .pay_debt import PayDebt
from .assign_credit_limit import AssignCreditLimit
from .record_adjustment import RecordAdjustment
from .get_account import GetAccount
from .list_transactions import ListTransactions
from .audit_account import AuditAccount, replay_entry
from .reconcile_ledgers import ReconcileLedgers
from .dtos import (
    OpenAccountCommandDTO,
    DischargeCommandDTO,
    SufficiencyQueryDTO,
    DebtPaymentCommandDTO,
    CreditLimitCommandDTO,
    AdjustmentCommandDTO,
    AccountResponseDTO,
    DiscountEntryDTO,
    ProfitEntryDTO,
    RechargeEntryDTO,
    AdjustmentEntryDTO,
    TransactionEntryDTO,
    DischargeResponseDTO,
    SufficiencyResponseDTO,
    LedgerCommandResponseDTO,
    ListTransactionsResponseDTO,
    AuditStatus,
    AuditDetailsDTO,
    AuditResultDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "OpenAccount",
    "ApplyDischarge",
    "EvaluateSufficiency",
    "PayDebt",
    "AssignCreditLimit",
    "RecordAdjustment",
    "GetAccount",
    "ListTransactions",
    "AuditAccount",
    "replay_entry",
    "ReconcileLedgers",
    "OpenAccountCommandDTO",
    "DischargeCommandDTO",
    "SufficiencyQueryDTO",
    "DebtPaymentCommandDTO",
    "CreditLimitCommandDTO",
    "AdjustmentCommandDTO",
    "AccountResponseDTO",
    "DiscountEntryDTO",
    "ProfitEntryDTO",
    "RechargeEntryDTO",
    "AdjustmentEntryDTO",
    "TransactionEntryDTO",
    "DischargeResponseDTO",
    "SufficiencyResponseDTO",
    "LedgerCommandResponseDTO",
    "ListTransactionsResponseDTO",
    "AuditStatus",
    "AuditDetailsDTO",
    "AuditResultDTO",
    "ReconciliationResultDTO",
]
