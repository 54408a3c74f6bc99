"""Minorista Ledger API Routes

FastAPI routes for minorista credit ledger commands and queries.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from config import ApplicationConfig
from src.api.error import ClientError
from src.api.schemas.ledger_request import (
    AdjustmentRequestSchema,
    CreditLimitRequestSchema,
    DebtPaymentRequestSchema,
    DischargeRequestSchema,
    EvaluateRequestSchema,
    OpenAccountRequestSchema,
)
from src.app.services.ledger_service import LedgerService
from src.app.use_cases.ledger.dtos import (
    AccountResponseDTO,
    DischargeResponseDTO,
    LedgerCommandResponseDTO,
    ListTransactionsResponseDTO,
    SufficiencyResponseDTO,
)
from src.depends import get_ledger_service

router = APIRouter(prefix="/minoristas", tags=["Minoristas"])

INSUFFICIENT_BALANCE_EXAMPLE = {
    402: {
        "description": "Insufficient balance",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INSUFFICIENT_BALANCE",
                        "message": "Insufficient balance for minorista minorista_abc123",
                        "details": {"unpaid_debt": "175.00", "total_after": "0.00"}
                    }
                }
            }
        }
    }
}


def _unwrap(result):
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "",
    response_model=AccountResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def open_account(
    request: OpenAccountRequestSchema,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Open the ledger account of a minorista.

    A non-zero `credit_limit` is logged as the initial grant.

    **Returns:**
    - 201: Account opened
    - 409: Account already exists
    """
    result = await service.open_account(request.minorista_id, request.credit_limit)
    return _unwrap(result)


@router.get("/{minorista_id}", response_model=AccountResponseDTO)
async def get_account(
    minorista_id: str,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Current balances of a minorista, with derived debt and total liquidity.

    **Returns:**
    - 200: Account snapshot
    - 404: Account not found
    """
    return _unwrap(await service.get_account(minorista_id))


@router.get("/{minorista_id}/transactions", response_model=ListTransactionsResponseDTO)
async def list_transactions(
    minorista_id: str,
    limit: int = Query(default=20, ge=1, le=100, description="Maximum number of entries"),
    offset: int = Query(default=0, ge=0, description="Number of entries to skip"),
    start: Optional[datetime] = Query(default=None, description="Entries at or after this moment"),
    end: Optional[datetime] = Query(default=None, description="Entries at or before this moment"),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Transaction log of a minorista, newest first.

    Each entry carries only the fields of its `transaction_type`.
    """
    result = await service.list_transactions(
        minorista_id, limit=limit, offset=offset, start=start, end=end
    )
    return _unwrap(result)


@router.post(
    "/{minorista_id}/discharges",
    response_model=DischargeResponseDTO,
    status_code=status.HTTP_200_OK,
    responses=INSUFFICIENT_BALANCE_EXAMPLE,
)
async def apply_discharge(
    minorista_id: str,
    request: DischargeRequestSchema,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Charge a giro against the minorista's surplus and credit.

    **Request body:**
    - `amount` (required): Giro amount
    - `profit_rate` or `operation_type` (optional): explicit rate, or
      TRANSFER / RECHARGE / MOBILE_PAYMENT resolved from configuration
    - `idempotency_key` (optional): repeated keys return the recorded charge
    - `exchange_rate` (optional): stored on the entry for reference

    **Returns:**
    - 200: Charge applied
    - 402: Insufficient balance (order creation must be blocked)
    - 400: Invalid amount
    """
    profit_rate = request.resolve_profit_rate(
        ApplicationConfig.OPERATION_PROFIT_RATES, ApplicationConfig.DEFAULT_PROFIT_RATE
    )
    result = await service.apply_discharge(
        minorista_id,
        request.amount,
        profit_rate,
        idempotency_key=request.idempotency_key,
        exchange_rate=request.exchange_rate,
        description=request.description,
    )
    return _unwrap(result)


@router.post(
    "/{minorista_id}/discharges/evaluate",
    response_model=SufficiencyResponseDTO,
)
async def evaluate_discharge(
    minorista_id: str,
    request: EvaluateRequestSchema,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Preview whether the minorista can afford a giro; nothing is written.
    """
    profit_rate = request.resolve_profit_rate(
        ApplicationConfig.OPERATION_PROFIT_RATES, ApplicationConfig.DEFAULT_PROFIT_RATE
    )
    result = await service.evaluate_sufficiency(minorista_id, request.amount, profit_rate)
    return _unwrap(result)


@router.post(
    "/{minorista_id}/debt-payments",
    response_model=LedgerCommandResponseDTO,
)
async def pay_debt(
    minorista_id: str,
    request: DebtPaymentRequestSchema,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Record a payment; it clears debt first and the excess becomes balance in favor.
    """
    result = await service.pay_debt(
        minorista_id,
        request.amount,
        idempotency_key=request.idempotency_key,
        description=request.description,
    )
    return _unwrap(result)


@router.put(
    "/{minorista_id}/credit-limit",
    response_model=LedgerCommandResponseDTO,
)
async def assign_credit_limit(
    minorista_id: str,
    request: CreditLimitRequestSchema,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Assign a new credit limit; debt and balance in favor are preserved.
    """
    result = await service.assign_credit_limit(minorista_id, request.credit_limit)
    return _unwrap(result)


@router.post(
    "/{minorista_id}/adjustments",
    response_model=LedgerCommandResponseDTO,
)
async def record_adjustment(
    minorista_id: str,
    request: AdjustmentRequestSchema,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Manual balance correction with a mandatory reason.
    """
    result = await service.record_adjustment(minorista_id, request.amount, request.reason)
    return _unwrap(result)
