"""SQLAlchemy implementation for wallet top-up repository"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.db.models import WalletTransaction


class SqlTopupRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        company_id: str,
        amount_cents: int,
        currency: str,
        external_reference: str,
    ) -> WalletTransaction:
        transaction = WalletTransaction(
            company_id=company_id,
            amount_cents=amount_cents,
            currency=currency,
            external_reference=external_reference,
            status="pending",
        )
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def get(self, transaction_id: str) -> WalletTransaction | None:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_reference(self, external_reference: str) -> WalletTransaction | None:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.external_reference == external_reference)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def transition(
        self,
        transaction_id: str,
        *,
        status: str,
        confirmed_at: datetime,
    ) -> bool:
        """Move a pending top-up to ``status``; False if it was no longer pending."""
        stmt = (
            update(WalletTransaction)
            .where(WalletTransaction.id == transaction_id, WalletTransaction.status == "pending")
            .values(status=status, confirmed_at=confirmed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_for_company(
        self,
        company_id: str,
        limit: int,
        offset: int,
        status: str | None = None,
    ) -> Sequence[WalletTransaction]:
        stmt = select(WalletTransaction).where(WalletTransaction.company_id == company_id)
        if status and status != "all":
            stmt = stmt.where(WalletTransaction.status == status)
        stmt = stmt.order_by(desc(WalletTransaction.created_at)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_pending(self, limit: int, created_before: datetime | None = None) -> Sequence[WalletTransaction]:
        stmt = select(WalletTransaction).where(WalletTransaction.status == "pending")
        if created_before is not None:
            stmt = stmt.where(WalletTransaction.created_at < created_before)
        stmt = stmt.order_by(WalletTransaction.created_at).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()
