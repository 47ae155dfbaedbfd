"""Bank-statement view and CSV export."""

import csv
import io
from datetime import date
from decimal import Decimal

from pocketledger.database.base import Database
from pocketledger.domain.entities import StatementEntry, TransactionKind

CSV_HEADER = "Date,Description,Withdrawals,Deposits,Balance"


def format_statement_date(value: date) -> str:
    """Format a date as M/D/YYYY, without zero padding."""
    return f"{value.month}/{value.day}/{value.year}"


def quote(text: str) -> str:
    """Double-quote a CSV field, escaping embedded quotes."""
    buffer = io.StringIO()
    csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="").writerow([text])
    return buffer.getvalue()


def format_amount(amount) -> str:
    return "" if amount is None else f"{amount:.2f}"


class StatementService:
    """Service building statement rows with a running balance."""

    def __init__(self, db: Database):
        """Initialize statement service.

        Args:
            db: Database instance
        """
        self.db = db

    def build_statement(self) -> list[StatementEntry]:
        """Return statement rows in ascending date order.

        The running balance is accumulated in date order (ties broken by
        creation time), so the final row's balance equals the current balance.
        """
        transactions = sorted(self.db.list_transactions(), key=lambda t: (t.date, t.created_at))

        entries = []
        running = Decimal("0.00")
        for txn in transactions:
            is_income = txn.kind == TransactionKind.INCOME
            running += txn.amount if is_income else -txn.amount
            entries.append(
                StatementEntry(
                    date=txn.date,
                    description=txn.description or txn.category,
                    withdrawal=None if is_income else txn.amount,
                    deposit=txn.amount if is_income else None,
                    balance=running,
                )
            )
        return entries

    def export_csv(self) -> str:
        """Render the statement as CSV text.

        Only the description is quoted; dates and amounts never need it.
        """
        lines = [CSV_HEADER]
        for entry in self.build_statement():
            lines.append(
                ",".join(
                    [
                        format_statement_date(entry.date),
                        quote(entry.description),
                        format_amount(entry.withdrawal),
                        format_amount(entry.deposit),
                        format_amount(entry.balance),
                    ]
                )
            )
        return "\n".join(lines) + "\n"
