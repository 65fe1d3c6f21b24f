"""
Common Schemas Module
=====================

Shared response envelopes and input normalizers used by every resource.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

_NON_DIGITS = re.compile(r"\D")


# ==========================
# Normalizers
# ==========================

def digits_only(value: Optional[str]) -> Optional[str]:
    """Strip punctuation from CPF/CNPJ/CEP style identifiers."""
    if value is None:
        return None
    return _NON_DIGITS.sub("", value)


def blank_to_none(value: Any) -> Any:
    """Treat empty form strings as missing values."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def parse_decimal(value: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """
    Parse a money amount typed in a form.

    Accepts numbers and strings with either ``.`` or ``,`` as the decimal
    separator (``"1500,50"``). Blank strings become None.

    Raises:
        ValueError: If the value is not a number.
    """
    if value is None or isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))

    text = value.strip()
    if not text:
        return None
    try:
        return Decimal(text.replace(",", "."))
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a valid amount")


# ==========================
# Response Envelopes
# ==========================

class Page(BaseModel, Generic[T]):
    """Paginated list response."""

    items: List[T]
    total: int = Field(..., description="Total number of matching rows")
    page: int = Field(default=1, description="Current page number")
    page_size: int = Field(default=20, description="Rows per page")


class MessageResponse(BaseModel):
    """Simple confirmation message."""

    message: str = Field(..., description="Confirmation message")


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    message: str = Field(
        ...,
        description="Error message"
    )
    details: dict = Field(
        default_factory=dict,
        description="Additional error details"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Vehicle not found",
                "details": {"resource": "Vehicle", "identifier": "42"}
            }
        }
    )


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
    type: str


class ValidationErrorResponse(BaseModel):
    """Request validation error response."""

    message: str = "Validation error"
    details: dict = Field(
        default_factory=dict,
        description="Contains an 'errors' list of field errors"
    )


COMMON_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Insufficient permissions"},
    422: {"model": ValidationErrorResponse, "description": "Validation error"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}
