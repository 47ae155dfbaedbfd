"""Flask application factory and request gate."""

import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from pocketledger.config import Settings
from pocketledger.database.base import Database
from pocketledger.database.factories import create_database
from pocketledger.domain.balance import BalanceService
from pocketledger.domain.device import DeviceAccessService, mask_token
from pocketledger.domain.errors import AuthenticationError, NotFoundError, ValidationError
from pocketledger.domain.loan import LoanService
from pocketledger.domain.statement import StatementService
from pocketledger.domain.transaction import TransactionService

logger = logging.getLogger(__name__)

EXTENSION_KEY = "pocketledger"

# Endpoints reachable without a device token
OPEN_ENDPOINTS = {
    "health",
    "auth.master_password",
    "auth.validate_device",
}


@dataclass
class Services:
    """Domain services bound to one database for the lifetime of the app."""

    db: Database
    settings: Settings
    transactions: TransactionService
    balance: BalanceService
    statement: StatementService
    loans: LoanService
    devices: DeviceAccessService

    @classmethod
    def build(cls, db: Database, settings: Settings) -> "Services":
        return cls(
            db=db,
            settings=settings,
            transactions=TransactionService(db),
            balance=BalanceService(db),
            statement=StatementService(db),
            loans=LoanService(db),
            devices=DeviceAccessService(db, settings.master_password),
        )


def services() -> Services:
    """Return the services of the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]


def bearer_token() -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer`` header."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> Flask:
    """Create the JSON API application.

    Args:
        settings: Configuration (defaults to Settings.from_env())
        db: Database to use (defaults to the one selected by settings)
    """
    settings = settings or Settings.from_env()
    db = db or create_database(settings)
    db.connect()
    db.initialize_schema()

    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = Services.build(db, settings)

    @app.before_request
    def require_device_token():
        if request.endpoint is None or request.endpoint in OPEN_ENDPOINTS:
            return None
        token = bearer_token()
        if token is None or not services().devices.validate_device_token(token):
            logger.info(
                "Unauthorized %s %s (device %s, token %s)",
                request.method,
                request.path,
                request.headers.get("X-Device-ID", "-"),
                mask_token(token) if token else "-",
            )
            return jsonify({"error": "Authentication required"}), 401
        return None

    @app.teardown_appcontext
    def release_session(exc):
        services().db.disconnect()

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(error):
        return jsonify({"error": str(error)}), 404

    @app.errorhandler(AuthenticationError)
    def handle_auth_error(error):
        return jsonify({"error": "Authentication failed"}), 401

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(error):
        logger.exception("Storage failure during %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok"})

    from pocketledger.api.auth import auth_bp
    from pocketledger.api.loans import loans_bp
    from pocketledger.api.transactions import transactions_bp

    app.register_blueprint(transactions_bp)
    app.register_blueprint(loans_bp)
    app.register_blueprint(auth_bp)

    return app
