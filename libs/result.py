"""Result type used by use cases

A use case never raises to its caller. It returns either ``Return.ok(value)``
or ``Return.err(Error(...))`` and the caller branches on ``is_ok()``/``is_err()``.
"""

from typing import Any, Dict, Generic, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class Error(BaseModel):
    """Typed failure carried by an error Result"""

    code: str = Field(..., description="Machine readable error code")
    message: str = Field(..., description="Human readable error message")
    reason: Optional[str] = Field(default=None, description="Underlying cause")
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Structured context for the caller (e.g. computed amounts)",
    )


class Result(Generic[T]):
    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Optional[Error]:
        return self._error

    def __repr__(self) -> str:
        if self.is_ok():
            return f"Result.ok({self._value!r})"
        return f"Result.err({self._error!r})"


class Return:
    @staticmethod
    def ok(value: T) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result[Any]:
        return Result(error=error)
