"""Top-up domain service."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from agegate.core.config import get_settings
from agegate.db.models import WalletTransaction as WalletTransactionModel
from agegate.infrastructure.database.repositories.company_repository import SqlCompanyRepository
from agegate.infrastructure.database.repositories.topup_repository import SqlTopupRepository
from agegate.modules.common.exceptions import NotFoundError, TerminalStateError, ValidationError
from agegate.modules.shops.repository import CompanyRepository

from .models import COMPLETED, FAILED, WalletTransaction
from .repository import TopupRepository

logger = logging.getLogger(__name__)

REFERENCE_DIGITS = 10
MAX_REFERENCE_ATTEMPTS = 5


def generate_reference() -> str:
    """Random variable symbol: ten digits, no leading zero."""
    low = 10 ** (REFERENCE_DIGITS - 1)
    return str(low + secrets.randbelow(9 * low))


@dataclass(slots=True)
class TopupService:
    repository: TopupRepository
    companies: CompanyRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "TopupService":
        return cls(SqlTopupRepository(session), SqlCompanyRepository(session))

    async def create_topup(self, company_id: str, amount_cents: int) -> WalletTransaction:
        if amount_cents <= 0:
            raise ValidationError("Top-up amount must be positive")
        company = await self.companies.get_company(company_id)
        if company is None:
            raise NotFoundError(f"Company {company_id} not found")

        for _ in range(MAX_REFERENCE_ATTEMPTS):
            reference = generate_reference()
            if await self.repository.get_by_reference(reference) is None:
                break
        else:
            raise RuntimeError("Could not allocate a unique payment reference")

        model = await self.repository.create(
            company_id=company_id,
            amount_cents=amount_cents,
            currency=company.currency,
            external_reference=reference,
        )
        logger.info("Created top-up %s (%s) for company %s: %d", model.id, reference, company_id, amount_cents)
        return self._to_domain(model)

    async def get(self, transaction_id: str) -> WalletTransaction:
        model = await self.repository.get(transaction_id)
        if model is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return self._to_domain(model)

    async def get_by_reference(self, reference: str) -> WalletTransaction:
        model = await self.repository.get_by_reference(reference)
        if model is None:
            raise NotFoundError(f"No transaction with reference {reference}")
        return self._to_domain(model)

    async def mark_completed(self, transaction_id: str) -> bool:
        return await self.repository.transition(
            transaction_id,
            status=COMPLETED,
            confirmed_at=datetime.now(timezone.utc),
        )

    async def mark_failed(self, transaction_id: str) -> bool:
        return await self.repository.transition(
            transaction_id,
            status=FAILED,
            confirmed_at=datetime.now(timezone.utc),
        )

    async def cancel(self, transaction_id: str) -> WalletTransaction:
        """Fail a pending top-up on operator request; the caller commits."""
        transaction = await self.get(transaction_id)
        if transaction.is_terminal() or not await self.mark_failed(transaction_id):
            raise TerminalStateError(f"Transaction {transaction_id} is already settled")
        logger.info("Top-up %s (%s) cancelled", transaction_id, transaction.external_reference)
        return await self.get(transaction_id)

    async def list_for_company(
        self,
        company_id: str,
        limit: int = 20,
        offset: int = 0,
        status: str | None = None,
    ) -> list[WalletTransaction]:
        rows = await self.repository.list_for_company(company_id, limit, offset, status)
        return [self._to_domain(row) for row in rows]

    async def list_pending(self, limit: int = 500) -> list[WalletTransaction]:
        rows = await self.repository.list_pending(limit)
        return [self._to_domain(row) for row in rows]

    async def expire_overdue(self, older_than: datetime | None = None, limit: int = 500) -> int:
        """Fail pending top-ups past the payment deadline; the caller commits."""
        if older_than is None:
            deadline = get_settings().reconciliation.topup_deadline_hours
            older_than = datetime.now(timezone.utc) - timedelta(hours=deadline)
        rows = await self.repository.list_pending(limit, created_before=older_than)
        expired = 0
        for row in rows:
            if await self.mark_failed(row.id):
                expired += 1
                logger.info("Top-up %s (%s) expired unpaid", row.id, row.external_reference)
        return expired

    @staticmethod
    def _to_domain(model: WalletTransactionModel) -> WalletTransaction:
        return WalletTransaction(
            id=model.id,
            company_id=model.company_id,
            amount_cents=model.amount_cents,
            currency=model.currency,
            external_reference=model.external_reference,
            status=model.status,
            created_at=model.created_at,
            confirmed_at=model.confirmed_at,
        )
