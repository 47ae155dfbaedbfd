"""Shared pytest fixtures for pocketledger tests."""

import tempfile
import os
from datetime import date
import pytest

from pocketledger.config import Settings
from pocketledger.database.factories import create_sqlite_database
from pocketledger.domain.balance import BalanceService
from pocketledger.domain.device import DeviceAccessService
from pocketledger.domain.loan import LoanService
from pocketledger.domain.statement import StatementService
from pocketledger.domain.transaction import TransactionService

MASTER_PASSWORD = "correct horse battery staple"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    db.session_factory.get_bind().dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def statement_service(temp_db):
    """Create a StatementService with a temporary database."""
    return StatementService(temp_db)


@pytest.fixture
def loan_service(temp_db):
    """Create a LoanService with a temporary database."""
    return LoanService(temp_db)


@pytest.fixture
def device_service(temp_db):
    """Create a DeviceAccessService with a configured master password."""
    return DeviceAccessService(temp_db, MASTER_PASSWORD)


@pytest.fixture
def sample_transactions(transaction_service):
    """Create a small ledger spread over two months."""
    return [
        transaction_service.add_transaction(
            kind="income", amount="1000", category="salary", date=date(2024, 1, 5),
            description="January salary",
        ),
        transaction_service.add_transaction(
            kind="expense", amount="250.50", category="food", date=date(2024, 1, 20),
            description="Groceries",
        ),
        transaction_service.add_transaction(
            kind="income", amount="1500", category="salary", date=date(2024, 2, 5),
            description="February salary",
        ),
        transaction_service.add_transaction(
            kind="expense", amount="100", category="transport", date=date(2024, 2, 10),
            description="Train pass",
        ),
    ]


@pytest.fixture
def settings():
    """Settings with a master password and default retention."""
    return Settings(master_password=MASTER_PASSWORD)


@pytest.fixture
def app(settings, temp_db):
    """Create the Flask app bound to the temporary database."""
    from pocketledger.api.app import create_app

    app = create_app(settings=settings, db=temp_db)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def device_token(client):
    """Register a test device and return its token."""
    response = client.post(
        "/api/auth/master-password",
        json={"password": MASTER_PASSWORD, "deviceId": "test-device", "deviceName": "Test Laptop"},
    )
    assert response.status_code == 200
    return response.get_json()["token"]


@pytest.fixture
def auth_headers(device_token):
    """Authorization headers carrying a valid device token."""
    return {"Authorization": f"Bearer {device_token}", "X-Device-ID": "test-device"}


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
