"""
Customer Orders API - Request/Response Schemas
===============================================

What:  Pydantic models for every order request body, plus the error and
       health response shapes used in the OpenAPI documentation.
How:   Each endpoint gets its own body model enumerating its rules:
         OrderCreate   POST  /customers/{id}/orders              all fields required
         OrderReplace  PUT   /customers/{id}/orders/{order_num}  all fields required
         OrderPatch    PATCH /customers/{id}/orders/{order_num}  every field optional
       Field validators delegate to orders_api.validators. Pydantic evaluates
       every field before reporting, so a response lists all violations.

Unknown keys are rejected (extra="forbid"): an update statement can only
ever name columns declared here.
"""

from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from orders_api.validators import (
    digits_only,
    exact_length,
    parse_currency,
    parse_iso8601,
    require_text,
    trimmed_length,
)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class _OrderRules(BaseModel):
    """Field rules shared by every order body. Subclasses declare the fields."""

    model_config = ConfigDict(extra="forbid")

    @field_validator("ord_num", mode="before", check_fields=False)
    @classmethod
    def check_ord_num(cls, v: Any) -> str:
        return digits_only(exact_length(require_text(v), 6))

    @field_validator("ord_amount", "advance_amount", mode="before", check_fields=False)
    @classmethod
    def check_amount(cls, v: Any) -> Decimal:
        return parse_currency(require_text(v))

    @field_validator("ord_date", mode="before", check_fields=False)
    @classmethod
    def check_ord_date(cls, v: Any) -> date:
        if isinstance(v, date):
            return v
        return parse_iso8601(require_text(v))

    @field_validator("agent_code", mode="before", check_fields=False)
    @classmethod
    def check_agent_code(cls, v: Any) -> str:
        return trimmed_length(require_text(v), 4, 4)

    @field_validator("ord_description", mode="before", check_fields=False)
    @classmethod
    def check_ord_description(cls, v: Any) -> str:
        return trimmed_length(require_text(v), 1, 60)


class OrderCreate(_OrderRules):
    """Body of POST /customers/{id}/orders."""

    ord_num: str = Field(description="The order number (6 digits)", examples=["200150"])
    ord_amount: Decimal = Field(description="The amount of the order", examples=["1500.00"])
    advance_amount: Decimal = Field(
        description="The amount of the order, in advance", examples=["500.00"]
    )
    ord_date: date = Field(
        description="The ISO-8601-formatted date of the order", examples=["2008-07-15"]
    )
    agent_code: str = Field(description="The agent's code of the order", examples=["A003"])
    ord_description: str = Field(
        description="A brief description of the order (1-60 characters)", examples=["SOD"]
    )


class OrderReplace(OrderCreate):
    """Body of PUT /customers/{id}/orders/{order_num}: a full replacement."""


class OrderPatch(_OrderRules):
    """
    Body of PATCH /customers/{id}/orders/{order_num}.

    Absent fields are left untouched; present fields follow the PUT rules.
    An explicit null is a violation, not a way to clear a column.
    """

    ord_num: Optional[str] = Field(default=None, description="The order number (6 digits)")
    ord_amount: Optional[Decimal] = Field(default=None, description="The amount of the order")
    advance_amount: Optional[Decimal] = Field(
        default=None, description="The amount of the order, in advance"
    )
    ord_date: Optional[date] = Field(
        default=None, description="The ISO-8601-formatted date of the order"
    )
    agent_code: Optional[str] = Field(default=None, description="The agent's code of the order")
    ord_description: Optional[str] = Field(
        default=None, description="A brief description of the order"
    )

    @model_validator(mode="after")
    def require_any_field(self) -> "OrderPatch":
        if not self.model_fields_set:
            raise ValueError("At least one field must be supplied")
        return self


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class Violation(BaseModel):
    """A single validation or backend failure."""

    msg: str = Field(description="What went wrong")
    value: Optional[Any] = Field(default=None, description="The offending value, if any")
    param: Optional[str] = Field(default=None, description="The offending field, if any")


class ErrorResponse(BaseModel):
    """
    Body of every 400 and 500 response.

    Example:
        {"errors": [{"msg": "Must be exactly 6 characters", "value": "C001", "param": "id"}]}
    """

    errors: List[Violation]


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
