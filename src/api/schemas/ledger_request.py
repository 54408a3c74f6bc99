"""Request schemas for the Ledger API

Pydantic models for validating incoming HTTP requests.
"""

from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class OperationType(str, Enum):
    """Giro operation types with a configured profit rate"""
    TRANSFER = "TRANSFER"
    RECHARGE = "RECHARGE"
    MOBILE_PAYMENT = "MOBILE_PAYMENT"


class OpenAccountRequestSchema(BaseModel):
    """
    Request schema for opening a ledger account

    Used for POST /minoristas endpoint.
    """

    minorista_id: str = Field(
        ...,
        min_length=1,
        description="Minorista identifier (required, non-empty)"
    )

    credit_limit: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Initial credit limit"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "minorista_id": "minorista_abc123",
                "credit_limit": "1000.00"
            }
        }


class ProfitRateSourceSchema(BaseModel):
    """Profit rate given explicitly or resolved from the operation type"""

    profit_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=1,
        description="Explicit profit rate (overrides the configured rates)"
    )

    operation_type: Optional[OperationType] = Field(
        default=None,
        description="Operation type used to look up the configured profit rate"
    )

    @model_validator(mode="after")
    def validate_rate_source(self):
        """Ensure at most one profit rate source is given"""
        if self.profit_rate is not None and self.operation_type is not None:
            raise ValueError("Give either profit_rate or operation_type, not both")
        return self

    def resolve_profit_rate(self, operation_rates: Mapping[str, object], default_rate) -> Decimal:
        if self.profit_rate is not None:
            return self.profit_rate
        if self.operation_type is not None and self.operation_type.value in operation_rates:
            return Decimal(str(operation_rates[self.operation_type.value]))
        return Decimal(str(default_rate))


class DischargeRequestSchema(ProfitRateSourceSchema):
    """
    Request schema for charging a giro

    Used for POST /minoristas/{id}/discharges endpoint. The profit rate is
    either given explicitly or resolved from ``operation_type``; with
    neither, the configured default rate applies.
    """

    amount: Decimal = Field(
        ...,
        ge=0,
        description="Giro amount to charge"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Unique key for idempotent charges (e.g. the giro id)"
    )

    exchange_rate: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Exchange rate quoted on the giro, stored for reference"
    )

    description: Optional[str] = Field(default=None, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "600.00",
                "operation_type": "TRANSFER",
                "idempotency_key": "giro_789",
                "exchange_rate": "38.50"
            }
        }


class EvaluateRequestSchema(ProfitRateSourceSchema):
    """
    Request schema for a sufficiency preview

    Used for POST /minoristas/{id}/discharges/evaluate endpoint.
    """

    amount: Decimal = Field(..., ge=0, description="Giro amount to preview")


class DebtPaymentRequestSchema(BaseModel):
    """
    Request schema for paying debt

    Used for POST /minoristas/{id}/debt-payments endpoint.
    """

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Payment amount (must be > 0)"
    )

    idempotency_key: Optional[str] = Field(default=None, min_length=1)

    description: Optional[str] = Field(default=None, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "250.00",
                "idempotency_key": "payment_001"
            }
        }


class CreditLimitRequestSchema(BaseModel):
    """
    Request schema for assigning a credit limit

    Used for PUT /minoristas/{id}/credit-limit endpoint.
    """

    credit_limit: Decimal = Field(
        ...,
        ge=0,
        description="New credit limit (must be >= 0)"
    )


class AdjustmentRequestSchema(BaseModel):
    """
    Request schema for a manual balance adjustment

    Used for POST /minoristas/{id}/adjustments endpoint.
    """

    amount: Decimal = Field(
        ...,
        description="Signed amount: positive adds balance in favor, negative charges it"
    )

    reason: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Why the correction was made"
    )

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        """Ensure the adjustment moves money"""
        if v == 0:
            raise ValueError("Adjustment amount must be non-zero")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "-50.00",
                "reason": "Duplicate giro reversed"
            }
        }
