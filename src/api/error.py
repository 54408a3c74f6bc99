"""HTTP error mapping

Use cases return typed ``libs.result.Error`` values; routes raise them as
``ClientError`` and the handler registered in ``create_app`` renders
``{"error": {...}}`` with the status below.
"""

from typing import Optional
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.result import Error
from src.domain.exceptions import LedgerErrorCode

STATUS_BY_CODE = {
    LedgerErrorCode.INVALID_AMOUNT.value: status.HTTP_400_BAD_REQUEST,
    LedgerErrorCode.ACCOUNT_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    LedgerErrorCode.INSUFFICIENT_BALANCE.value: status.HTTP_402_PAYMENT_REQUIRED,
    LedgerErrorCode.CONCURRENCY_CONFLICT.value: status.HTTP_409_CONFLICT,
    LedgerErrorCode.ACCOUNT_ALREADY_EXISTS.value: status.HTTP_409_CONFLICT,
    LedgerErrorCode.PERSISTENCE_FAILURE.value: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ClientError(Exception):
    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST)


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error.model_dump(mode="json", exclude_none=True)},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request parameters",
                "details": {"errors": [str(err.get("msg")) for err in exc.errors()]},
            }
        },
    )
