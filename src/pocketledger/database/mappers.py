"""Mapper functions to convert SQLAlchemy models into domain entities.

Enum columns are stored as their string values; the mappers are the single
place that turns them back into enum members and timestamps back into UTC.
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from pocketledger.domain import entities as domain
from pocketledger.database.models import (
    Transaction as ORMTransaction,
    Loan as ORMLoan,
    LoanPayment as ORMLoanPayment,
    DeviceToken as ORMDeviceToken,
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return value as an aware UTC datetime.

    SQLite hands timestamps back without an offset; they were written as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        kind=domain.TransactionKind(orm_transaction.kind),
        amount=Decimal(orm_transaction.amount),
        category=orm_transaction.category,
        description=orm_transaction.description or "",
        date=orm_transaction.date,
        created_at=as_utc(orm_transaction.created_at),
    )


def loan_to_domain(orm_loan: ORMLoan) -> domain.Loan:
    """Convert SQLAlchemy Loan model to domain Loan entity."""
    return domain.Loan(
        id=orm_loan.id,
        direction=domain.LoanDirection(orm_loan.direction),
        principal=Decimal(orm_loan.principal),
        remaining_amount=Decimal(orm_loan.remaining_amount),
        counterparty_name=orm_loan.counterparty_name,
        counterparty_contact=orm_loan.counterparty_contact or "",
        description=orm_loan.description or "",
        interest_rate=Decimal(orm_loan.interest_rate or 0),
        due_date=orm_loan.due_date,
        status=domain.LoanStatus(orm_loan.status),
        created_at=as_utc(orm_loan.created_at),
        completed_at=as_utc(orm_loan.completed_at),
        opening_amount=Decimal(orm_loan.opening_amount),
    )


def loan_payment_to_domain(orm_payment: ORMLoanPayment) -> domain.LoanPayment:
    """Convert SQLAlchemy LoanPayment model to domain LoanPayment entity."""
    return domain.LoanPayment(
        id=orm_payment.id,
        loan_id=orm_payment.loan_id,
        amount=Decimal(orm_payment.amount),
        kind=domain.PaymentKind(orm_payment.kind),
        description=orm_payment.description or "",
        payment_date=orm_payment.payment_date,
        created_at=as_utc(orm_payment.created_at),
    )


def device_token_to_domain(orm_token: ORMDeviceToken) -> domain.DeviceToken:
    """Convert SQLAlchemy DeviceToken model to domain DeviceToken entity."""
    return domain.DeviceToken(
        token=orm_token.token,
        device_id=orm_token.device_id,
        device_name=orm_token.device_name,
        user_agent=orm_token.user_agent or "",
        created_at=as_utc(orm_token.created_at),
        last_seen=as_utc(orm_token.last_seen),
        active=orm_token.active,
    )
