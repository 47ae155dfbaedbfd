"""Transaction, balance and statement routes."""

from flask import Blueprint, Response, jsonify, request

from pocketledger.api.app import services
from pocketledger.api.serializers import money, overview_to_json, transaction_to_json
from pocketledger.domain.errors import ValidationError
from pocketledger.domain.validation import required_date

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api")

_TRANSACTION_FIELDS = ("kind", "amount", "category", "date", "description")


def json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def optional_json_body() -> dict:
    """Like json_body, but an absent body reads as an empty object."""
    if request.get_json(silent=True) is None:
        return {}
    return json_body()


def optional_date_arg(name: str):
    value = request.args.get(name)
    return required_date(value, name) if value else None


@transactions_bp.get("/transactions")
def list_transactions():
    transactions = services().transactions.list_transactions(
        kind=request.args.get("kind") or None,
        start_date=optional_date_arg("startDate"),
        end_date=optional_date_arg("endDate"),
    )
    return jsonify([transaction_to_json(t) for t in transactions])


@transactions_bp.post("/transactions")
def add_transaction():
    body = json_body()
    transaction = services().transactions.add_transaction(
        kind=body.get("kind"),
        amount=body.get("amount"),
        category=body.get("category"),
        date=body.get("date"),
        description=body.get("description"),
    )
    return jsonify(transaction_to_json(transaction)), 201


@transactions_bp.put("/transactions/<transaction_id>")
def update_transaction(transaction_id: str):
    body = json_body()
    fields = {key: body[key] for key in _TRANSACTION_FIELDS if key in body}
    transaction = services().transactions.update_transaction(transaction_id, **fields)
    return jsonify(transaction_to_json(transaction))


@transactions_bp.delete("/transactions/<transaction_id>")
def delete_transaction(transaction_id: str):
    services().transactions.delete_transaction(transaction_id)
    return jsonify({"success": True})


@transactions_bp.get("/transactions/type/<kind>")
def list_transactions_by_kind(kind: str):
    transactions = services().transactions.list_transactions(kind=kind)
    return jsonify([transaction_to_json(t) for t in transactions])


@transactions_bp.get("/transactions/csv")
def statement_csv():
    return Response(services().statement.export_csv(), mimetype="text/csv")


@transactions_bp.get("/transactions/download/csv")
def download_statement_csv():
    return Response(
        services().statement.export_csv(),
        mimetype="text/csv",
        headers={"Content-Disposition": 'attachment; filename="transactions.csv"'},
    )


@transactions_bp.get("/balance")
def balance():
    overview = services().balance.overview(today=optional_date_arg("today"))
    return jsonify(overview_to_json(overview))


@transactions_bp.get("/analytics/categories")
def category_breakdown():
    rows = services().balance.category_breakdown(
        kind=request.args.get("kind", "expense"),
        start_date=optional_date_arg("startDate"),
        end_date=optional_date_arg("endDate"),
    )
    return jsonify([{"category": category, "amount": money(amount)} for category, amount in rows])
