"""Wallet ledger service.

All balance mutation goes through this service. Mutations run inside the
caller's database transaction and never commit on their own, so a debit and
the record it pays for are persisted together or not at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from agegate.db.models import LedgerEntry as LedgerEntryModel
from agegate.infrastructure.database.repositories.ledger_repository import SqlLedgerRepository
from agegate.modules.common.exceptions import (
    ConcurrencyConflictError,
    InsufficientCreditError,
    NotFoundError,
    ValidationError,
)

from .models import CREDIT, DEBIT, REFUND, LedgerAudit, LedgerEntryRecord, WalletSnapshot
from .repository import LedgerRepository

logger = logging.getLogger(__name__)


def _require_positive(amount_cents: int) -> None:
    if not isinstance(amount_cents, int) or isinstance(amount_cents, bool) or amount_cents <= 0:
        raise ValidationError("Amount must be a positive number of minor units")


@dataclass(slots=True)
class LedgerService:
    repository: LedgerRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "LedgerService":
        return cls(SqlLedgerRepository(session))

    async def get_balance(self, company_id: str) -> WalletSnapshot:
        row = await self.repository.read_balance(company_id)
        if row is None:
            raise NotFoundError(f"Company {company_id} not found")
        balance, _, currency = row
        return WalletSnapshot(company_id=company_id, balance_cents=balance, currency=currency)

    async def debit(
        self,
        company_id: str,
        amount_cents: int,
        *,
        verification_id: str | None = None,
        description: str | None = None,
    ) -> WalletSnapshot:
        """Check-and-decrement in one compare-and-set step.

        Raises InsufficientCreditError without touching the wallet, or
        ConcurrencyConflictError when another writer got there first.
        """
        _require_positive(amount_cents)
        row = await self.repository.read_balance(company_id)
        if row is None:
            raise NotFoundError(f"Company {company_id} not found")
        balance, version, currency = row
        if balance < amount_cents:
            raise InsufficientCreditError(
                "Insufficient credit",
                balance_cents=balance,
                required_cents=amount_cents,
            )
        swapped = await self.repository.compare_and_set(
            company_id,
            expected_version=version,
            delta_cents=-amount_cents,
        )
        if not swapped:
            raise ConcurrencyConflictError(f"Wallet of company {company_id} changed during debit")
        await self.repository.add_entry(
            company_id=company_id,
            kind=DEBIT,
            amount_cents=-amount_cents,
            verification_id=verification_id,
            wallet_transaction_id=None,
            description=description or "Verification charge",
        )
        logger.info("Debited %d from company %s (verification %s)", amount_cents, company_id, verification_id)
        return WalletSnapshot(company_id=company_id, balance_cents=balance - amount_cents, currency=currency)

    async def credit(
        self,
        company_id: str,
        amount_cents: int,
        *,
        wallet_transaction_id: str | None = None,
        description: str | None = None,
    ) -> WalletSnapshot:
        _require_positive(amount_cents)
        if wallet_transaction_id is not None:
            existing = await self.repository.find_entry(kind=CREDIT, wallet_transaction_id=wallet_transaction_id)
            if existing is not None:
                logger.warning("Top-up %s already credited, skipping", wallet_transaction_id)
                return await self.get_balance(company_id)
        if not await self.repository.increment(company_id, amount_cents):
            raise NotFoundError(f"Company {company_id} not found")
        await self.repository.add_entry(
            company_id=company_id,
            kind=CREDIT,
            amount_cents=amount_cents,
            verification_id=None,
            wallet_transaction_id=wallet_transaction_id,
            description=description or "Wallet top-up",
        )
        logger.info("Credited %d to company %s (top-up %s)", amount_cents, company_id, wallet_transaction_id)
        return await self.get_balance(company_id)

    async def refund(
        self,
        company_id: str,
        amount_cents: int,
        *,
        verification_id: str,
        description: str | None = None,
    ) -> WalletSnapshot:
        """Return the charge of one failed verification; repeated calls are no-ops."""
        _require_positive(amount_cents)
        existing = await self.repository.find_entry(kind=REFUND, verification_id=verification_id)
        if existing is not None:
            logger.warning("Verification %s already refunded, skipping", verification_id)
            return await self.get_balance(company_id)
        if not await self.repository.increment(company_id, amount_cents):
            raise NotFoundError(f"Company {company_id} not found")
        await self.repository.add_entry(
            company_id=company_id,
            kind=REFUND,
            amount_cents=amount_cents,
            verification_id=verification_id,
            wallet_transaction_id=None,
            description=description or "Refund of failed verification",
        )
        logger.info("Refunded %d to company %s (verification %s)", amount_cents, company_id, verification_id)
        return await self.get_balance(company_id)

    async def list_entries(self, company_id: str, limit: int = 50, offset: int = 0) -> list[LedgerEntryRecord]:
        rows = await self.repository.list_entries(company_id, limit, offset)
        return [self._to_entry(row) for row in rows]

    async def audit(self, company_id: str) -> LedgerAudit:
        snapshot = await self.get_balance(company_id)
        ledger_sum = await self.repository.sum_entries(company_id)
        return LedgerAudit(
            company_id=company_id,
            balance_cents=snapshot.balance_cents,
            ledger_sum_cents=ledger_sum,
        )

    @staticmethod
    def _to_entry(model: LedgerEntryModel) -> LedgerEntryRecord:
        return LedgerEntryRecord(
            id=model.id,
            company_id=model.company_id,
            kind=model.kind,
            amount_cents=model.amount_cents,
            verification_id=model.verification_id,
            wallet_transaction_id=model.wallet_transaction_id,
            description=model.description,
            created_at=model.created_at,
        )
