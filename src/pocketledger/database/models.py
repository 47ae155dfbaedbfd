"""SQLAlchemy models for pocketledger database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, scoped_session, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Transaction(Base):
    """Income/expense transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    kind = Column(String(16), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Loan(Base):
    """Loan model."""

    __tablename__ = "loans"

    id = Column(String(36), primary_key=True, default=_new_id)
    direction = Column(String(16), nullable=False, index=True)
    principal = Column(Numeric(12, 2), nullable=False)
    opening_amount = Column(Numeric(12, 2), nullable=False)
    remaining_amount = Column(Numeric(12, 2), nullable=False)
    counterparty_name = Column(String, nullable=False)
    counterparty_contact = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    interest_rate = Column(Numeric(7, 3), nullable=False, default=0)
    due_date = Column(Date, nullable=True)
    status = Column(String(16), nullable=False, default="active", index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    payments = relationship("LoanPayment", back_populates="loan", cascade="all, delete-orphan")


class LoanPayment(Base):
    """Loan payment model."""

    __tablename__ = "loan_payments"

    id = Column(String(36), primary_key=True, default=_new_id)
    loan_id = Column(String(36), ForeignKey("loans.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    kind = Column(String(16), nullable=False)
    description = Column(String, nullable=False, default="")
    payment_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    loan = relationship("Loan", back_populates="payments")


class DeviceToken(Base):
    """Device token model, keyed by the token itself."""

    __tablename__ = "device_tokens"

    token = Column(String, primary_key=True)
    device_id = Column(String, nullable=False, index=True)
    device_name = Column(String, nullable=False)
    user_agent = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    last_seen = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    active = Column(Boolean, default=True, nullable=False, index=True)


def create_session_factory(database_url: str) -> scoped_session[Session]:
    """Create a thread-scoped SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return scoped_session(sessionmaker(bind=engine))
