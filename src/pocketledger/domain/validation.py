"""Input validation shared by the domain services."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, TypeVar

from pocketledger.domain.errors import (
    ValidationError,
    invalid_choice,
    must_be_positive,
    must_not_be_empty,
)

E = TypeVar("E", bound=Enum)

CENTS = Decimal("0.01")

# Largest value a Numeric(12, 2) column holds
MAX_MONEY = Decimal("9999999999.99")


def coerce_enum(enum_type: type[E], value: object, field: str) -> E:
    """Return the enum member for value, accepting members or their string values."""
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        raise ValidationError(invalid_choice(field, value, list(enum_type)))


def to_money(value: object, field: str = "amount") -> Decimal:
    """Convert value to a Decimal at currency scale."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number, got '{value}'")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if abs(amount) > MAX_MONEY:
        raise ValidationError(f"{field} must not exceed {MAX_MONEY:,}")
    return amount.quantize(CENTS)


def positive_money(value: object, field: str = "amount") -> Decimal:
    """Convert value to money and require it to be greater than zero."""
    amount = to_money(value, field)
    if amount <= 0:
        raise ValidationError(must_be_positive(field))
    return amount


def non_negative_decimal(value: object, field: str, maximum: Optional[Decimal] = None) -> Decimal:
    """Convert value to a Decimal and require it to be zero or more (and at most maximum)."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number, got '{value}'")
    if not number.is_finite() or number < 0:
        raise ValidationError(f"{field} must be zero or greater")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field} must not exceed {maximum}")
    return number


def optional_text(value: object, field: str) -> str:
    """Strip value, treating None as empty; reject non-string values."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value.strip()


def required_text(value: object, field: str) -> str:
    """Strip value and require it to be non-empty."""
    text = optional_text(value, field)
    if not text:
        raise ValidationError(must_not_be_empty(field))
    return text


def required_date(value: object, field: str = "date") -> date:
    """Require a calendar date, accepting ISO strings."""
    if value is None or value == "":
        raise ValidationError(must_not_be_empty(field))
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD), got '{value}'")
