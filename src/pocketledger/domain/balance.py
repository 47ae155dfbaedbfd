"""Balance and monthly aggregate views over the transaction set."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    BalanceOverview,
    Transaction,
    TransactionKind,
    Trend,
)
from pocketledger.domain.validation import coerce_enum
from pocketledger.utils.date_parser import month_key, previous_month_key

ZERO = Decimal("0.00")


def signed_amount(txn: Transaction) -> Decimal:
    """Return the amount as it affects the balance."""
    return txn.amount if txn.kind == TransactionKind.INCOME else -txn.amount


def total(transactions: Iterable[Transaction], kind: TransactionKind) -> Decimal:
    """Sum amounts of the given kind."""
    return sum((t.amount for t in transactions if t.kind == kind), ZERO)


def in_month(transactions: Iterable[Transaction], key: str) -> list[Transaction]:
    """Return transactions whose date falls in the YYYY-MM month key."""
    return [t for t in transactions if t.date.isoformat().startswith(key)]


def trend(current: Decimal, previous: Decimal) -> Optional[Trend]:
    """Compute month-over-month change.

    Returns None when both months are zero, and a "New" trend when only the
    current month has activity.
    """
    if previous == 0:
        if current > 0:
            return Trend(percentage=None, is_new=True)
        return None
    percentage = (current - previous) / previous * 100
    return Trend(percentage=percentage.quantize(Decimal("0.1")))


class BalanceService:
    """Service computing derived balance figures.

    Every figure is recomputed from the full transaction set on each call;
    nothing is tracked incrementally.
    """

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def current_balance(self) -> Decimal:
        """Return total income minus total expenses over all transactions."""
        return sum((signed_amount(t) for t in self.db.list_transactions()), ZERO)

    def overview(self, today: Optional[date] = None) -> BalanceOverview:
        """Build dashboard figures for the month containing today.

        Args:
            today: Reference date (defaults to the current date)
        """
        today = today or date.today()
        transactions = self.db.list_transactions()

        current = in_month(transactions, month_key(today))
        previous = in_month(transactions, previous_month_key(today))

        monthly_income = total(current, TransactionKind.INCOME)
        monthly_expenses = total(current, TransactionKind.EXPENSE)
        previous_income = total(previous, TransactionKind.INCOME)
        previous_expenses = total(previous, TransactionKind.EXPENSE)

        return BalanceOverview(
            current_balance=sum((signed_amount(t) for t in transactions), ZERO),
            monthly_income=monthly_income,
            monthly_expenses=monthly_expenses,
            previous_month_income=previous_income,
            previous_month_expenses=previous_expenses,
            income_trend=trend(monthly_income, previous_income),
            expense_trend=trend(monthly_expenses, previous_expenses),
        )

    def category_breakdown(
        self,
        kind: TransactionKind | str = TransactionKind.EXPENSE,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[tuple[str, Decimal]]:
        """Total amount per category, largest first.

        Args:
            kind: Which kind of transactions to group
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
        """
        kind = coerce_enum(TransactionKind, kind, "kind")
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in self.db.list_transactions(kind=kind, start_date=start_date, end_date=end_date):
            totals[txn.category] += txn.amount
        return sorted(totals.items(), key=lambda item: (-item[1], item[0]))
