"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from pocketledger.domain.entities import (
    Transaction,
    TransactionKind,
    Loan,
    LoanBalance,
    LoanDirection,
    LoanStatus,
    LoanUpdate,
    LoanPayment,
    PaymentKind,
    DeviceToken,
)


class Database(ABC):
    """Abstract database interface for pocketledger.

    Implementations own atomicity: each method is a single unit of work that
    either commits completely or leaves the store untouched.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        kind: TransactionKind,
        amount: Decimal,
        category: str,
        date: date,
        description: str = "",
    ) -> Transaction:
        """Create a transaction. Returns the stored transaction."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: str,
        kind: Optional[TransactionKind] = None,
        amount: Optional[Decimal] = None,
        category: Optional[str] = None,
        date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> Optional[Transaction]:
        """Update the given transaction fields. Returns None if not found."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction. Returns False if nothing matched."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        kind: Optional[TransactionKind] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions, newest first.

        Args:
            kind: Optional income/expense filter
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
        """
        pass

    # Loan operations
    @abstractmethod
    def create_loan(
        self,
        direction: LoanDirection,
        principal: Decimal,
        opening_amount: Decimal,
        counterparty_name: str,
        counterparty_contact: str = "",
        description: str = "",
        interest_rate: Decimal = Decimal("0"),
        due_date: Optional[date] = None,
        status: LoanStatus = LoanStatus.ACTIVE,
    ) -> Loan:
        """Create a loan whose remaining amount starts at opening_amount."""
        pass

    @abstractmethod
    def get_loan(self, loan_id: str) -> Optional[Loan]:
        """Get loan by ID."""
        pass

    @abstractmethod
    def update_loan(self, loan_id: str, update: LoanUpdate) -> Optional[Loan]:
        """Apply a metadata update. Returns None if not found."""
        pass

    @abstractmethod
    def update_loan_status(self, loan_id: str, balance: LoanBalance) -> Optional[Loan]:
        """Store a re-derived balance/status for a loan without payment changes."""
        pass

    @abstractmethod
    def delete_loan(self, loan_id: str) -> bool:
        """Delete a loan and all of its payments. Returns False if nothing matched."""
        pass

    @abstractmethod
    def list_loans(
        self,
        direction: Optional[LoanDirection] = None,
        status: Optional[LoanStatus] = None,
    ) -> list[Loan]:
        """List loans, newest first, optionally filtered."""
        pass

    # Loan payment operations
    @abstractmethod
    def create_loan_payment(
        self,
        loan_id: str,
        amount: Decimal,
        kind: PaymentKind,
        payment_date: date,
        description: str,
        balance: LoanBalance,
    ) -> LoanPayment:
        """Create a payment and store the loan's new balance in one commit."""
        pass

    @abstractmethod
    def get_loan_payment(self, payment_id: str) -> Optional[LoanPayment]:
        """Get loan payment by ID."""
        pass

    @abstractmethod
    def delete_loan_payment(self, payment_id: str, balance: LoanBalance) -> bool:
        """Delete a payment and store the loan's new balance in one commit."""
        pass

    @abstractmethod
    def list_loan_payments(self, loan_id: str) -> list[LoanPayment]:
        """List payments for a loan, most recent payment date first."""
        pass

    # Device token operations
    @abstractmethod
    def store_device_token(
        self, token: str, device_id: str, device_name: str, user_agent: str
    ) -> DeviceToken:
        """Insert or refresh a device token record (upsert keyed by token)."""
        pass

    @abstractmethod
    def get_device_token(self, token: str) -> Optional[DeviceToken]:
        """Get device token record by token value."""
        pass

    @abstractmethod
    def touch_device_token(self, token: str, seen_at: datetime) -> None:
        """Refresh last_seen for a token."""
        pass

    @abstractmethod
    def list_device_tokens(self, active_only: bool = True) -> list[DeviceToken]:
        """List device token records, most recently seen first."""
        pass

    @abstractmethod
    def deactivate_device(self, device_id: str) -> int:
        """Deactivate all tokens of a device. Returns number of records matched."""
        pass

    @abstractmethod
    def deactivate_devices_seen_before(self, cutoff: datetime) -> int:
        """Deactivate active tokens last seen before cutoff. Returns count."""
        pass
