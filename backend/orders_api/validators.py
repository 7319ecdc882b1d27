"""
Customer Orders API - Field Rules
==================================

What:  The individual checks applied to order fields.
How:   Plain functions that take a raw value and either return the cleaned
       value or raise ValueError with the message that ends up in the
       violation's `msg`. The pydantic request schemas call them from
       field validators, so one failing field never hides another.
Who:   orders_api.schemas.order

Rules:
    require_text      JSON numbers are accepted and read as their string form
    exact_length      customer code (6), agent code (4), order number (6)
    digits_only       order number on create/replace: no sign, no decimal point
    parse_currency    no symbol, optional "," grouping, exactly two decimals,
                      no negatives
    parse_iso8601     strict ISO-8601 calendar date or date-time
    trimmed_length    surrounding whitespace removed, then length-checked
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

# A lone "0", a grouped amount ("1,234,567"), or an ungrouped one without
# leading zeros, followed by exactly two decimals.
CURRENCY_PATTERN = re.compile(r"^(0|[1-9]\d{0,2}(,\d{3})+|[1-9]\d*)\.\d{2}$")

DIGITS_PATTERN = re.compile(r"^[0-9]+$")

# Path lookups accept a sign and a decimal point.
NUMERIC_PATTERN = r"^[+-]?([0-9]*[.])?[0-9]+$"


def require_text(value: Any) -> str:
    """Accept strings, and numbers as their string form; reject anything else."""
    if isinstance(value, bool):
        raise ValueError("Invalid value")
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, str):
        return value
    raise ValueError("Invalid value")


def exact_length(value: str, length: int) -> str:
    if len(value) != length:
        raise ValueError(f"Must be exactly {length} characters")
    return value


def digits_only(value: str) -> str:
    if not DIGITS_PATTERN.match(value):
        raise ValueError("Must contain digits only")
    return value


def parse_currency(value: str) -> Decimal:
    """
    Validate a currency amount and return it as a Decimal.

    "1,234.50" -> Decimal("1234.50"). Negative amounts, currency symbols,
    a missing or malformed decimal part all raise ValueError.
    """
    if not CURRENCY_PATTERN.match(value):
        raise ValueError("Must be a non-negative amount with two decimal places")
    try:
        return Decimal(value.replace(",", ""))
    except InvalidOperation:
        raise ValueError("Must be a non-negative amount with two decimal places")


def parse_iso8601(value: str) -> date:
    """
    Validate a strict ISO-8601 date or date-time and return the date part.

    Impossible calendar dates (2023-02-30) are rejected.
    """
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        raise ValueError("Must be an ISO-8601 date")


def trimmed_length(value: str, min_length: int, max_length: int) -> str:
    trimmed = value.strip()
    if not min_length <= len(trimmed) <= max_length:
        if min_length == max_length:
            raise ValueError(f"Must be exactly {min_length} characters")
        raise ValueError(f"Must be between {min_length} and {max_length} characters")
    return trimmed
