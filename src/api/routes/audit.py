"""Audit API Routes

Read-only replay audits of minorista ledgers.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query

from src.api.error import ClientError
from src.app.services.ledger_service import LedgerService
from src.app.use_cases.ledger.dtos import AuditResultDTO, ReconciliationResultDTO
from src.depends import get_ledger_service

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("/minoristas/{minorista_id}", response_model=AuditResultDTO)
async def audit_minorista(
    minorista_id: str,
    start: Optional[datetime] = Query(default=None, description="Replay entries at or after this moment"),
    end: Optional[datetime] = Query(default=None, description="Replay entries at or before this moment"),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Replay one minorista's log and compare it with the stored balances.

    `INCONSISTENT` is a report state, not an error: the response is 200 with
    the step-by-step trace.
    """
    result = await service.audit_account(minorista_id, start=start, end=end)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/minoristas", response_model=ReconciliationResultDTO)
async def audit_all_minoristas(
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Replay every minorista's log; only inconsistent accounts are listed.
    """
    result = await service.reconcile(start=start, end=end)
    if result.is_err():
        raise ClientError(result.error)
    return result.value
