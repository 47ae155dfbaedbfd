"""Tests for Database interface returning domain models."""

from datetime import date, datetime, timedelta, timezone, UTC
from decimal import Decimal

from pocketledger.config import Settings
from pocketledger.database.factories import create_database
from pocketledger.database.mappers import as_utc
from pocketledger.database.sqlalchemy_db import SQLAlchemyDatabase
from pocketledger.domain import entities


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_create_transaction_returns_domain_model(self, temp_db):
        """Test that create_transaction returns a domain Transaction entity."""
        transaction = temp_db.create_transaction(
            kind=entities.TransactionKind.EXPENSE,
            amount=Decimal("50.00"),
            category="food",
            date=date(2024, 1, 15),
            description="Test transaction",
        )

        assert isinstance(transaction, entities.Transaction)
        assert isinstance(transaction.id, str)
        assert transaction.kind == entities.TransactionKind.EXPENSE
        assert transaction.amount == Decimal("50.00")
        assert isinstance(transaction.amount, Decimal)
        assert isinstance(transaction.created_at, datetime)
        assert temp_db.get_transaction(transaction.id) == transaction

    def test_update_and_delete_transaction_report_missing(self, temp_db):
        """Test that writes against unknown ids report nothing matched."""
        assert temp_db.update_transaction("missing", amount=Decimal("1.00")) is None
        assert temp_db.delete_transaction("missing") is False
        assert temp_db.get_transaction("missing") is None

    def test_create_loan_returns_domain_model(self, temp_db):
        """Test that create_loan returns a domain Loan entity."""
        loan = temp_db.create_loan(
            direction=entities.LoanDirection.TAKEN,
            principal=Decimal("1000.00"),
            opening_amount=Decimal("600.00"),
            counterparty_name="Bank of Mum",
        )

        assert isinstance(loan, entities.Loan)
        assert loan.direction == entities.LoanDirection.TAKEN
        assert loan.status == entities.LoanStatus.ACTIVE
        assert loan.remaining_amount == Decimal("600.00")
        assert loan.opening_amount == Decimal("600.00")
        assert loan.counterparty_contact == ""
        assert loan.due_date is None

    def test_payment_write_updates_loan_in_same_commit(self, temp_db):
        """Test that a payment and the loan balance change together."""
        loan = temp_db.create_loan(
            direction=entities.LoanDirection.GIVEN,
            principal=Decimal("100.00"),
            opening_amount=Decimal("100.00"),
            counterparty_name="Alice",
        )
        balance = entities.LoanBalance(
            remaining_amount=Decimal("40.00"), status=entities.LoanStatus.ACTIVE, completed_at=None
        )

        payment = temp_db.create_loan_payment(
            loan_id=loan.id,
            amount=Decimal("60.00"),
            kind=entities.PaymentKind.PAYMENT,
            payment_date=date(2024, 3, 3),
            description="",
            balance=balance,
        )

        assert isinstance(payment, entities.LoanPayment)
        assert payment.kind == entities.PaymentKind.PAYMENT
        assert temp_db.get_loan(loan.id).remaining_amount == Decimal("40.00")
        assert temp_db.list_loan_payments(loan.id) == [payment]

        restored = entities.LoanBalance(
            remaining_amount=Decimal("100.00"), status=entities.LoanStatus.ACTIVE, completed_at=None
        )
        assert temp_db.delete_loan_payment(payment.id, restored) is True
        assert temp_db.get_loan(loan.id).remaining_amount == Decimal("100.00")
        assert temp_db.delete_loan_payment(payment.id, restored) is False

    def test_update_loan_has_no_balance_fields(self, temp_db):
        """Test that a metadata update leaves the balance untouched."""
        loan = temp_db.create_loan(
            direction=entities.LoanDirection.GIVEN,
            principal=Decimal("100.00"),
            opening_amount=Decimal("100.00"),
            counterparty_name="Alice",
            due_date=date(2024, 12, 31),
        )

        updated = temp_db.update_loan(loan.id, entities.LoanUpdate(description="Car repair"))

        assert updated.description == "Car repair"
        assert updated.due_date == date(2024, 12, 31)
        assert updated.remaining_amount == loan.remaining_amount
        assert updated.status == loan.status
        assert temp_db.update_loan("missing", entities.LoanUpdate(description="x")) is None

    def test_device_token_records(self, temp_db):
        """Test storing, listing and deactivating device tokens."""
        record = temp_db.store_device_token("dt_1_aa", "phone", "Phone", "agent")
        temp_db.store_device_token("dt_2_bb", "phone", "Phone", "agent")
        temp_db.store_device_token("dt_3_cc", "laptop", "Laptop", "")

        assert isinstance(record, entities.DeviceToken)
        assert record.active is True
        assert len(temp_db.list_device_tokens()) == 3

        assert temp_db.deactivate_device("phone") == 2
        assert [r.token for r in temp_db.list_device_tokens(active_only=True)] == ["dt_3_cc"]
        assert len(temp_db.list_device_tokens(active_only=False)) == 3
        assert temp_db.deactivate_device("tablet") == 0

    def test_timestamps_are_utc(self, temp_db):
        """Test that stored timestamps come back with a UTC offset."""
        transaction = temp_db.create_transaction(
            kind=entities.TransactionKind.INCOME,
            amount=Decimal("10.00"),
            category="salary",
            date=date(2024, 1, 1),
            description="",
        )
        record = temp_db.store_device_token("dt_1_aa", "phone", "Phone", "agent")

        assert transaction.created_at.utcoffset() == timedelta(0)
        assert record.created_at.utcoffset() == timedelta(0)
        assert record.last_seen.utcoffset() == timedelta(0)
        assert abs(datetime.now(UTC) - transaction.created_at) < timedelta(minutes=5)

    def test_as_utc(self):
        naive = datetime(2024, 1, 1, 12, 0)
        offset = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        assert as_utc(None) is None
        assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert as_utc(offset).tzinfo is UTC
        assert as_utc(offset) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class TestDatabaseFactory:
    """Tests for selecting the backend from settings."""

    def test_database_url_takes_precedence(self, tmp_path):
        db = create_database(
            Settings(database_url=f"sqlite:///{tmp_path / 'url.db'}", database_path=str(tmp_path / "path.db"))
        )

        assert isinstance(db, SQLAlchemyDatabase)
        assert db.database_url.endswith("url.db")

    def test_database_path_builds_sqlite_url(self, tmp_path):
        db = create_database(Settings(database_path=str(tmp_path / "ledger.db")))

        assert db.database_url == f"sqlite:///{tmp_path / 'ledger.db'}"

    def test_in_memory_database(self):
        db = SQLAlchemyDatabase("sqlite://")
        db.connect()
        assert db.list_transactions() == []
        db.disconnect()
