"""Conversion of domain entities to JSON-ready dictionaries (camelCase keys)."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pocketledger.domain.entities import (
    BalanceOverview,
    Device,
    Loan,
    LoanPayment,
    LoanSummary,
    Transaction,
    Trend,
)


def money(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else float(value)


def iso(value: Optional[date | datetime]) -> Optional[str]:
    return None if value is None else value.isoformat()


def transaction_to_json(txn: Transaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "kind": txn.kind.value,
        "amount": money(txn.amount),
        "category": txn.category,
        "description": txn.description,
        "date": iso(txn.date),
        "createdAt": iso(txn.created_at),
    }


def loan_to_json(loan: Loan) -> dict[str, Any]:
    return {
        "id": loan.id,
        "direction": loan.direction.value,
        "principal": money(loan.principal),
        "remainingAmount": money(loan.remaining_amount),
        "counterpartyName": loan.counterparty_name,
        "counterpartyContact": loan.counterparty_contact,
        "description": loan.description,
        "interestRate": float(loan.interest_rate),
        "dueDate": iso(loan.due_date),
        "status": loan.status.value,
        "createdAt": iso(loan.created_at),
        "completedAt": iso(loan.completed_at),
    }


def payment_to_json(payment: LoanPayment) -> dict[str, Any]:
    return {
        "id": payment.id,
        "loanId": payment.loan_id,
        "amount": money(payment.amount),
        "kind": payment.kind.value,
        "description": payment.description,
        "paymentDate": iso(payment.payment_date),
        "createdAt": iso(payment.created_at),
    }


def loan_summary_to_json(summary: LoanSummary) -> dict[str, Any]:
    return {
        "totalLoansGiven": money(summary.total_loans_given),
        "totalLoansTaken": money(summary.total_loans_taken),
        "activeLoansGiven": money(summary.active_loans_given),
        "activeLoansTaken": money(summary.active_loans_taken),
        "totalOutstanding": money(summary.total_outstanding),
        "totalOwed": money(summary.total_owed),
    }


def trend_to_json(trend: Optional[Trend]) -> Optional[dict[str, Any]]:
    if trend is None:
        return None
    return {
        "percentage": money(trend.percentage),
        "isNew": trend.is_new,
        "label": trend.label,
    }


def overview_to_json(overview: BalanceOverview) -> dict[str, Any]:
    return {
        "currentBalance": money(overview.current_balance),
        "monthlyIncome": money(overview.monthly_income),
        "monthlyExpenses": money(overview.monthly_expenses),
        "previousMonthIncome": money(overview.previous_month_income),
        "previousMonthExpenses": money(overview.previous_month_expenses),
        "incomeTrend": trend_to_json(overview.income_trend),
        "expenseTrend": trend_to_json(overview.expense_trend),
    }


def device_to_json(device: Device) -> dict[str, Any]:
    # The token value is never part of this projection
    return {
        "id": device.device_id,
        "name": device.name,
        "userAgent": device.user_agent,
        "registeredAt": iso(device.registered_at),
        "lastSeen": iso(device.last_seen),
    }
