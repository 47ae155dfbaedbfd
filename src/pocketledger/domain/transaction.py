"""Transaction domain service."""

import logging
from typing import Optional
from datetime import date
from decimal import Decimal

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    CATEGORIES,
    Transaction as TransactionEntity,
    TransactionKind,
)
from pocketledger.domain.errors import NotFoundError, ValidationError, transaction_not_found
from pocketledger.domain.validation import (
    coerce_enum,
    optional_text,
    positive_money,
    required_date,
    required_text,
)

logger = logging.getLogger(__name__)


def validate_category(kind: TransactionKind, category: str) -> str:
    """Require category to belong to the fixed category set of kind."""
    category = required_text(category, "category").lower()
    if category not in CATEGORIES[kind]:
        allowed = ", ".join(CATEGORIES[kind])
        raise ValidationError(
            f"Category '{category}' is not a valid {kind.value} category. Expected one of: {allowed}"
        )
    return category


class TransactionService:
    """Service for managing income and expense transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_transaction(
        self,
        kind: TransactionKind | str,
        amount: Decimal | str | int | float,
        category: str,
        date: date | str,
        description: Optional[str] = None,
    ) -> TransactionEntity:
        """Create a transaction.

        Args:
            kind: income or expense
            amount: Positive amount
            category: Category from the kind's category set
            date: Transaction date
            description: Optional description

        Returns:
            The stored transaction, with generated id and created_at

        Raises:
            ValidationError: If any field is missing or out of range
        """
        kind = coerce_enum(TransactionKind, kind, "kind")
        amount = positive_money(amount)
        category = validate_category(kind, category)
        txn_date = required_date(date)
        note = optional_text(description, "description")

        transaction = self.db.create_transaction(
            kind=kind,
            amount=amount,
            category=category,
            date=txn_date,
            description=note,
        )
        logger.info("Added %s transaction %s", kind.value, transaction.id)
        return transaction

    def get_transaction(self, transaction_id: str) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: str) -> TransactionEntity:
        """Get transaction by ID or raise NotFoundError."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def update_transaction(
        self,
        transaction_id: str,
        kind: Optional[TransactionKind | str] = None,
        amount: Optional[Decimal | str | int | float] = None,
        category: Optional[str] = None,
        date: Optional[date | str] = None,
        description: Optional[str] = None,
    ) -> TransactionEntity:
        """Update transaction fields.

        Only the provided fields change. The merged record must still be a
        valid transaction, including the category matching the kind.

        Raises:
            NotFoundError: If transaction doesn't exist
            ValidationError: If the merged record is invalid
        """
        txn = self.require_transaction(transaction_id)

        new_kind = coerce_enum(TransactionKind, kind, "kind") if kind is not None else None
        new_amount = positive_money(amount) if amount is not None else None
        new_date = required_date(date) if date is not None else None
        new_description = optional_text(description, "description") if description is not None else None

        effective_kind = new_kind or txn.kind
        new_category = None
        if category is not None:
            new_category = validate_category(effective_kind, category)
        elif new_kind is not None and new_kind != txn.kind:
            # Changing kind must come with a category of the new kind
            validate_category(effective_kind, txn.category)

        updated = self.db.update_transaction(
            transaction_id,
            kind=new_kind,
            amount=new_amount,
            category=new_category,
            date=new_date,
            description=new_description,
        )
        if updated is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        logger.info("Updated transaction %s", transaction_id)
        return updated

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        if not self.db.delete_transaction(transaction_id):
            raise NotFoundError(transaction_not_found(transaction_id))
        logger.info("Deleted transaction %s", transaction_id)

    def list_transactions(
        self,
        kind: Optional[TransactionKind | str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[TransactionEntity]:
        """List transactions, newest first.

        Args:
            kind: Optional income/expense filter
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
        """
        if kind is not None:
            kind = coerce_enum(TransactionKind, kind, "kind")
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("start date must not be after end date")
        return self.db.list_transactions(kind=kind, start_date=start_date, end_date=end_date)
