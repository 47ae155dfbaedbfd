"""Loan and loan payment routes."""

from flask import Blueprint, jsonify, request

from pocketledger.api.app import services
from pocketledger.api.serializers import loan_summary_to_json, loan_to_json, payment_to_json
from pocketledger.api.transactions import json_body, optional_json_body
from pocketledger.domain.entities import LoanUpdate
from pocketledger.domain.errors import ValidationError
from pocketledger.domain.validation import required_date

loans_bp = Blueprint("loans", __name__, url_prefix="/api/loans")

# Fields owned by payment reconciliation
_DERIVED_FIELDS = ("remainingAmount", "status", "completedAt", "principal", "direction")


def loan_update_from_json(body: dict) -> LoanUpdate:
    """Build a metadata update, rejecting fields derived from payments."""
    forbidden = [key for key in _DERIVED_FIELDS if key in body]
    if forbidden:
        raise ValidationError(
            f"{', '.join(forbidden)} cannot be edited directly; record payments instead"
        )

    clear_due_date = "dueDate" in body and not body["dueDate"]
    return LoanUpdate(
        counterparty_name=body.get("counterpartyName"),
        counterparty_contact=body.get("counterpartyContact"),
        description=body.get("description"),
        interest_rate=body.get("interestRate"),
        due_date=None if clear_due_date or "dueDate" not in body else required_date(body["dueDate"], "due date"),
        clear_due_date=clear_due_date,
    )


@loans_bp.get("")
def list_loans():
    return jsonify([loan_to_json(loan) for loan in services().loans.list_loans()])


@loans_bp.post("")
def add_loan():
    body = json_body()
    loan = services().loans.add_loan(
        direction=body.get("direction"),
        principal=body.get("principal"),
        counterparty_name=body.get("counterpartyName"),
        counterparty_contact=body.get("counterpartyContact"),
        description=body.get("description"),
        interest_rate=body.get("interestRate", 0),
        due_date=body.get("dueDate"),
        remaining_amount=body.get("remainingAmount"),
    )
    return jsonify(loan_to_json(loan)), 201


@loans_bp.get("/summary")
def loan_summary():
    return jsonify(loan_summary_to_json(services().loans.summary()))


@loans_bp.get("/type/<direction>")
def list_loans_by_direction(direction: str):
    return jsonify([loan_to_json(loan) for loan in services().loans.list_loans(direction=direction)])


@loans_bp.get("/status/<status>")
def list_loans_by_status(status: str):
    return jsonify([loan_to_json(loan) for loan in services().loans.list_loans(status=status)])


@loans_bp.put("/<loan_id>")
def update_loan(loan_id: str):
    loan = services().loans.update_loan(loan_id, loan_update_from_json(json_body()))
    return jsonify(loan_to_json(loan))


@loans_bp.post("/<loan_id>/default")
def set_loan_defaulted(loan_id: str):
    body = optional_json_body()
    defaulted = body.get("defaulted", True)
    if not isinstance(defaulted, bool):
        raise ValidationError("defaulted must be true or false")
    loan = services().loans.set_defaulted(loan_id, defaulted)
    return jsonify(loan_to_json(loan))


@loans_bp.delete("/<loan_id>")
def delete_loan(loan_id: str):
    services().loans.delete_loan(loan_id)
    return jsonify({"success": True})


@loans_bp.get("/<loan_id>/payments")
def list_payments(loan_id: str):
    services().loans.require_loan(loan_id)
    return jsonify([payment_to_json(p) for p in services().loans.list_payments(loan_id)])


@loans_bp.post("/<loan_id>/payments")
def add_payment(loan_id: str):
    body = json_body()
    payment = services().loans.add_payment(
        loan_id,
        amount=body.get("amount"),
        kind=body.get("kind", "payment"),
        payment_date=body.get("paymentDate"),
        description=body.get("description"),
    )
    return jsonify(payment_to_json(payment)), 201


@loans_bp.delete("/payments/<payment_id>")
def delete_payment(payment_id: str):
    loan = services().loans.delete_payment(payment_id)
    return jsonify({"success": True, "loan": loan_to_json(loan)})
