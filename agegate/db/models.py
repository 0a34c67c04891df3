"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from agegate.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Company(Base):
    __tablename__ = "companies"
    __table_args__ = (CheckConstraint("balance_cents >= 0", name="ck_companies_balance_non_negative"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(150), nullable=False)
    balance_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="CZK")
    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    shops = relationship("Shop", back_populates="company", cascade="all, delete-orphan")


class Shop(Base):
    __tablename__ = "shops"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    api_key = Column(String(100), unique=True, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="active")  # active, inactive
    allowed_methods = Column(Text, nullable=False, default="[]")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    company = relationship("Company", back_populates="shops")


class Verification(Base):
    __tablename__ = "verifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    shop_id = Column(String(36), ForeignKey("shops.id"), nullable=False, index=True)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    method = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, completed, failed
    result = Column(String(20))  # success, failure
    price_cents = Column(Integer, nullable=False)
    user_identifier = Column(String(255), index=True)
    redirect_url = Column(String(2048))
    details = Column(Text)
    error_message = Column(Text)
    refunded = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True))

    shop = relationship("Shop")


class WalletTransaction(Base):
    """Wallet top-up awaiting confirmation from the bank statement feed."""

    __tablename__ = "wallet_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="CZK")
    external_reference = Column(String(20), unique=True, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, completed, failed
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    confirmed_at = Column(DateTime(timezone=True))

    company = relationship("Company")


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"
    __table_args__ = (
        UniqueConstraint("kind", "verification_id", name="uq_ledger_entries_kind_verification"),
        UniqueConstraint("kind", "wallet_transaction_id", name="uq_ledger_entries_kind_wallet_transaction"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    kind = Column(String(20), nullable=False)  # debit, credit, refund
    amount_cents = Column(Integer, nullable=False)  # signed: debits are negative
    verification_id = Column(String(36), ForeignKey("verifications.id"), nullable=True)
    wallet_transaction_id = Column(String(36), ForeignKey("wallet_transactions.id"), nullable=True)
    description = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    company = relationship("Company")
