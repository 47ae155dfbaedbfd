"""Loan and loan payment domain service.

A loan's remaining amount is never edited directly. It is re-derived from the
loan's opening amount and its recorded principal payments every time a
payment is added or removed, and stored together with that payment change in
a single commit.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Iterable, Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Loan,
    LoanBalance,
    LoanDirection,
    LoanPayment,
    LoanStatus,
    LoanSummary,
    LoanUpdate,
    PaymentKind,
)
from pocketledger.domain.errors import (
    NotFoundError,
    ValidationError,
    loan_not_found,
    payment_not_found,
)
from pocketledger.domain.validation import (
    coerce_enum,
    non_negative_decimal,
    optional_text,
    positive_money,
    required_date,
    required_text,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# Largest rate a Numeric(7, 3) column holds
MAX_INTEREST_RATE = Decimal("9999.999")


def reconcile_loan(
    loan: Loan, payments: Iterable[LoanPayment], now: Optional[datetime] = None
) -> LoanBalance:
    """Derive a loan's balance from its opening amount and payments.

    remaining = max(0, opening_amount - sum of principal payments). The loan
    is completed exactly when nothing remains; completed_at is kept from an
    earlier completion and stamped otherwise. A positive remainder reopens a
    completed loan, while a defaulted loan stays defaulted.

    Args:
        loan: Loan as currently stored
        payments: The full set of payments the loan will have
        now: Completion timestamp to use (defaults to the current UTC time)
    """
    paid = sum((p.amount for p in payments if p.kind == PaymentKind.PAYMENT), ZERO)
    remaining = max(ZERO, loan.opening_amount - paid)

    if remaining == 0:
        completed_at = loan.completed_at if loan.status == LoanStatus.COMPLETED else None
        return LoanBalance(
            remaining_amount=remaining,
            status=LoanStatus.COMPLETED,
            completed_at=completed_at or now or datetime.now(UTC),
        )

    status = LoanStatus.DEFAULTED if loan.status == LoanStatus.DEFAULTED else LoanStatus.ACTIVE
    return LoanBalance(remaining_amount=remaining, status=status, completed_at=None)


def summarize_loans(loans: Iterable[Loan]) -> LoanSummary:
    """Aggregate principal and outstanding amounts by direction."""
    totals = {
        "given": ZERO,
        "taken": ZERO,
        "active_given": ZERO,
        "active_taken": ZERO,
    }
    for loan in loans:
        key = loan.direction.value
        totals[key] += loan.principal
        if loan.status == LoanStatus.ACTIVE:
            totals[f"active_{key}"] += loan.remaining_amount

    return LoanSummary(
        total_loans_given=totals["given"],
        total_loans_taken=totals["taken"],
        active_loans_given=totals["active_given"],
        active_loans_taken=totals["active_taken"],
        total_outstanding=totals["active_given"],
        total_owed=totals["active_taken"],
    )


class LoanService:
    """Service for managing loans and their payments."""

    def __init__(self, db: Database):
        """Initialize loan service.

        Args:
            db: Database instance
        """
        self.db = db

    # Loans
    def add_loan(
        self,
        direction: LoanDirection | str,
        principal: Decimal | str | int | float,
        counterparty_name: str,
        counterparty_contact: Optional[str] = None,
        description: Optional[str] = None,
        interest_rate: Decimal | str | int | float = 0,
        due_date: Optional[date | str] = None,
        remaining_amount: Optional[Decimal | str | int | float] = None,
    ) -> Loan:
        """Create a loan.

        Args:
            direction: given (lent out) or taken (borrowed)
            principal: Positive loan amount
            counterparty_name: Person lent to or borrowed from
            counterparty_contact: Optional phone/email
            description: Optional description
            interest_rate: Annual interest rate percentage, zero or more
            due_date: Optional due date
            remaining_amount: Optional opening balance for migrated loans;
                ignored unless strictly positive

        Raises:
            ValidationError: If any field is missing or out of range
        """
        direction = coerce_enum(LoanDirection, direction, "direction")
        principal = positive_money(principal, "principal")
        name = required_text(counterparty_name, "counterparty name")
        rate = non_negative_decimal(
            interest_rate if interest_rate is not None else 0, "interest rate", MAX_INTEREST_RATE
        )
        loan_due = required_date(due_date, "due date") if due_date else None

        opening = principal
        if remaining_amount is not None and remaining_amount != "":
            override = non_negative_decimal(remaining_amount, "remaining amount")
            if override > principal:
                raise ValidationError("remaining amount must not exceed the principal")
            if override > 0:
                opening = positive_money(override, "remaining amount")

        loan = self.db.create_loan(
            direction=direction,
            principal=principal,
            opening_amount=opening,
            counterparty_name=name,
            counterparty_contact=optional_text(counterparty_contact, "counterparty contact"),
            description=optional_text(description, "description"),
            interest_rate=rate,
            due_date=loan_due,
        )
        logger.info("Added %s loan %s", direction.value, loan.id)
        return loan

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        """Get loan by ID."""
        return self.db.get_loan(loan_id)

    def require_loan(self, loan_id: str) -> Loan:
        """Get loan by ID or raise NotFoundError."""
        loan = self.db.get_loan(loan_id)
        if loan is None:
            raise NotFoundError(loan_not_found(loan_id))
        return loan

    def list_loans(
        self,
        direction: Optional[LoanDirection | str] = None,
        status: Optional[LoanStatus | str] = None,
    ) -> list[Loan]:
        """List loans, newest first, optionally filtered by direction and status."""
        if direction is not None:
            direction = coerce_enum(LoanDirection, direction, "direction")
        if status is not None:
            status = coerce_enum(LoanStatus, status, "status")
        return self.db.list_loans(direction=direction, status=status)

    def update_loan(self, loan_id: str, update: LoanUpdate) -> Loan:
        """Apply a metadata update to a loan.

        Balance and status are not part of LoanUpdate; use payments or
        set_defaulted to change them.

        Raises:
            NotFoundError: If loan doesn't exist
            ValidationError: If a provided field is invalid
        """
        self.require_loan(loan_id)

        if update.counterparty_name is not None:
            update = replace(
                update, counterparty_name=required_text(update.counterparty_name, "counterparty name")
            )
        if update.interest_rate is not None:
            rate = non_negative_decimal(update.interest_rate, "interest rate", MAX_INTEREST_RATE)
            update = replace(update, interest_rate=rate)
        if update.counterparty_contact is not None:
            update = replace(
                update,
                counterparty_contact=optional_text(update.counterparty_contact, "counterparty contact"),
            )
        if update.description is not None:
            update = replace(update, description=optional_text(update.description, "description"))
        if update.clear_due_date and update.due_date is not None:
            raise ValidationError("Cannot set both due date and clear due date")

        loan = self.db.update_loan(loan_id, update)
        if loan is None:
            raise NotFoundError(loan_not_found(loan_id))
        logger.info("Updated loan %s", loan_id)
        return loan

    def set_defaulted(self, loan_id: str, defaulted: bool = True) -> Loan:
        """Mark a loan as defaulted, or clear the mark.

        Clearing re-derives the status from the payment history.

        Raises:
            NotFoundError: If loan doesn't exist
            ValidationError: If the loan is already fully repaid
        """
        loan = self.require_loan(loan_id)

        if defaulted:
            if loan.status == LoanStatus.COMPLETED:
                raise ValidationError(f"Loan {loan_id} is fully repaid and cannot be marked defaulted")
            balance = LoanBalance(
                remaining_amount=loan.remaining_amount,
                status=LoanStatus.DEFAULTED,
                completed_at=None,
            )
        else:
            reopened = replace(loan, status=LoanStatus.ACTIVE)
            balance = reconcile_loan(reopened, self.db.list_loan_payments(loan_id))

        updated = self.db.update_loan_status(loan_id, balance)
        if updated is None:
            raise NotFoundError(loan_not_found(loan_id))
        logger.info("Loan %s status set to %s", loan_id, updated.status.value)
        return updated

    def delete_loan(self, loan_id: str) -> None:
        """Delete a loan together with all of its payments.

        Raises:
            NotFoundError: If loan doesn't exist
        """
        if not self.db.delete_loan(loan_id):
            raise NotFoundError(loan_not_found(loan_id))
        logger.info("Deleted loan %s", loan_id)

    def summary(self) -> LoanSummary:
        """Aggregate totals over all loans."""
        return summarize_loans(self.db.list_loans())

    # Payments
    def list_payments(self, loan_id: str) -> list[LoanPayment]:
        """List payments recorded against a loan."""
        return self.db.list_loan_payments(loan_id)

    def add_payment(
        self,
        loan_id: str,
        amount: Decimal | str | int | float,
        kind: PaymentKind | str = PaymentKind.PAYMENT,
        payment_date: Optional[date | str] = None,
        description: Optional[str] = None,
    ) -> LoanPayment:
        """Record a payment and re-derive the loan's balance.

        Args:
            loan_id: Loan the payment belongs to
            amount: Positive payment amount
            kind: payment (reduces the remaining amount) or interest
            payment_date: Date of the payment (defaults to today)
            description: Optional description

        Raises:
            NotFoundError: If loan doesn't exist
            ValidationError: If amount or kind is invalid
        """
        amount = positive_money(amount)
        kind = coerce_enum(PaymentKind, kind, "payment kind")
        paid_on = required_date(payment_date, "payment date") if payment_date else date.today()
        note = optional_text(description, "description")
        loan = self.require_loan(loan_id)

        payments = self.db.list_loan_payments(loan_id)
        pending = LoanPayment(
            id="",
            loan_id=loan_id,
            amount=amount,
            kind=kind,
            description="",
            payment_date=paid_on,
            created_at=datetime.now(UTC),
        )
        balance = reconcile_loan(loan, [*payments, pending])

        payment = self.db.create_loan_payment(
            loan_id=loan_id,
            amount=amount,
            kind=kind,
            payment_date=paid_on,
            description=note,
            balance=balance,
        )
        logger.info(
            "Recorded %s of %s on loan %s; remaining %s (%s)",
            kind.value,
            amount,
            loan_id,
            balance.remaining_amount,
            balance.status.value,
        )
        return payment

    def delete_payment(self, payment_id: str) -> Loan:
        """Delete a payment and re-derive the loan's balance.

        Returns:
            The loan after the reversal

        Raises:
            NotFoundError: If payment doesn't exist
        """
        payment = self.db.get_loan_payment(payment_id)
        if payment is None:
            raise NotFoundError(payment_not_found(payment_id))
        loan = self.require_loan(payment.loan_id)

        remaining = [p for p in self.db.list_loan_payments(loan.id) if p.id != payment_id]
        balance = reconcile_loan(loan, remaining)

        if not self.db.delete_loan_payment(payment_id, balance):
            raise NotFoundError(payment_not_found(payment_id))
        logger.info(
            "Deleted payment %s on loan %s; remaining %s (%s)",
            payment_id,
            loan.id,
            balance.remaining_amount,
            balance.status.value,
        )
        return self.require_loan(loan.id)
