"""Domain model entities for pocketledger.

These are pure data classes representing business concepts, independent of
database schema. The persistence layer maps its rows onto these so the ledger
arithmetic never sees ORM objects.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionKind(str, Enum):
    """Direction of money for a transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class LoanDirection(str, Enum):
    """Whether the user lent the money out or borrowed it."""

    GIVEN = "given"
    TAKEN = "taken"


class LoanStatus(str, Enum):
    """Lifecycle status of a loan."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"


class PaymentKind(str, Enum):
    """Kind of loan payment.

    Principal payments reduce the remaining amount; interest payments are
    recorded for reference only.
    """

    PAYMENT = "payment"
    INTEREST = "interest"


INCOME_CATEGORIES = (
    "salary",
    "freelance",
    "investment",
    "business",
    "loan-repayment",
    "other-income",
)

EXPENSE_CATEGORIES = (
    "food",
    "transport",
    "shopping",
    "bills",
    "entertainment",
    "health",
    "loan-payment",
    "other-expense",
)

CATEGORIES: dict[TransactionKind, tuple[str, ...]] = {
    TransactionKind.INCOME: INCOME_CATEGORIES,
    TransactionKind.EXPENSE: EXPENSE_CATEGORIES,
}

CATEGORY_LABELS = {
    "food": "Food & Dining",
    "transport": "Transportation",
    "shopping": "Shopping",
    "bills": "Bills & Utilities",
    "entertainment": "Entertainment",
    "health": "Health & Fitness",
    "salary": "Salary",
    "freelance": "Freelance",
    "investment": "Investment",
    "business": "Business",
    "loan-repayment": "Loan Repayment",
    "loan-payment": "Loan Payment",
    "other-income": "Other Income",
    "other-expense": "Other Expense",
}


@dataclass(frozen=True)
class Transaction:
    """Income or expense transaction."""

    id: str
    kind: TransactionKind
    amount: Decimal
    category: str
    description: str
    date: date
    created_at: datetime


@dataclass(frozen=True)
class Loan:
    """Peer-to-peer loan.

    ``opening_amount`` is the unpaid balance the loan started with (the
    principal unless an explicit override was given at creation). The
    remaining amount is always derived from it and the recorded payments.
    """

    id: str
    direction: LoanDirection
    principal: Decimal
    remaining_amount: Decimal
    counterparty_name: str
    counterparty_contact: str
    description: str
    interest_rate: Decimal
    due_date: Optional[date]
    status: LoanStatus
    created_at: datetime
    completed_at: Optional[datetime]
    opening_amount: Decimal


@dataclass(frozen=True)
class LoanUpdate:
    """Metadata fields of a loan that may be edited directly.

    Balance and status are absent; they only change through
    payments (see ``LoanService.add_payment``).
    """

    counterparty_name: Optional[str] = None
    counterparty_contact: Optional[str] = None
    description: Optional[str] = None
    interest_rate: Optional[Decimal] = None
    due_date: Optional[date] = None
    clear_due_date: bool = False


@dataclass(frozen=True)
class LoanBalance:
    """Derived balance state of a loan."""

    remaining_amount: Decimal
    status: LoanStatus
    completed_at: Optional[datetime]


@dataclass(frozen=True)
class LoanPayment:
    """Payment recorded against a loan."""

    id: str
    loan_id: str
    amount: Decimal
    kind: PaymentKind
    description: str
    payment_date: date
    created_at: datetime


@dataclass(frozen=True)
class LoanSummary:
    """Aggregates over all loans."""

    total_loans_given: Decimal
    total_loans_taken: Decimal
    active_loans_given: Decimal
    active_loans_taken: Decimal
    total_outstanding: Decimal
    total_owed: Decimal


@dataclass(frozen=True)
class Trend:
    """Month-over-month change of an amount.

    ``percentage`` is None when the previous month was zero; ``is_new`` marks
    the case where there was nothing last month but something this month.
    """

    percentage: Optional[Decimal]
    is_new: bool = False

    @property
    def label(self) -> str:
        if self.is_new:
            return "New"
        sign = "+" if self.percentage > 0 else ""
        return f"{sign}{self.percentage:.1f}%"


@dataclass(frozen=True)
class BalanceOverview:
    """Dashboard figures derived from the full transaction set."""

    current_balance: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    previous_month_income: Decimal
    previous_month_expenses: Decimal
    income_trend: Optional[Trend]
    expense_trend: Optional[Trend]


@dataclass(frozen=True)
class StatementEntry:
    """One row of the bank-statement view."""

    date: date
    description: str
    withdrawal: Optional[Decimal]
    deposit: Optional[Decimal]
    balance: Decimal


@dataclass(frozen=True)
class DeviceToken:
    """Bearer credential issued to one client device."""

    token: str
    device_id: str
    device_name: str
    user_agent: str
    created_at: datetime
    last_seen: datetime
    active: bool


@dataclass(frozen=True)
class Device:
    """Client-facing view of a registered device (never carries the token)."""

    device_id: str
    name: str
    user_agent: str
    registered_at: datetime
    last_seen: datetime
