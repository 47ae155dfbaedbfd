"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class AuthenticationError(DomainError):
    """Missing or rejected credentials."""


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def loan_not_found(loan_id: str) -> str:
    """Return message for missing loan."""
    return f"Loan {loan_id} not found"


def payment_not_found(payment_id: str) -> str:
    """Return message for missing loan payment."""
    return f"Loan payment {payment_id} not found"


def invalid_choice(field: str, value: object, choices) -> str:
    """Return message for a value outside an enumerated set."""
    allowed = ", ".join(str(getattr(c, "value", c)) for c in choices)
    return f"Invalid {field} '{value}'. Expected one of: {allowed}"


def must_be_positive(field: str) -> str:
    """Return message for a non-positive amount."""
    return f"{field} must be greater than zero"


def must_not_be_empty(field: str) -> str:
    """Return message for a blank required field."""
    return f"{field} is required"
