"""SQLAlchemy implementation for verification records"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.db.models import Verification


class SqlVerificationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        verification_id: str,
        shop_id: str,
        company_id: str,
        method: str,
        price_cents: int,
        user_identifier: str | None,
        redirect_url: str | None,
    ) -> Verification:
        verification = Verification(
            id=verification_id,
            shop_id=shop_id,
            company_id=company_id,
            method=method,
            status="pending",
            price_cents=price_cents,
            user_identifier=user_identifier,
            redirect_url=redirect_url,
            refunded=False,
        )
        self.session.add(verification)
        await self.session.flush()
        await self.session.refresh(verification)
        return verification

    async def get(self, verification_id: str) -> Verification | None:
        stmt = (
            select(Verification)
            .where(Verification.id == verification_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def transition(
        self,
        verification_id: str,
        *,
        from_status: str,
        values: dict[str, Any],
    ) -> bool:
        """Conditionally move a verification out of ``from_status``; True if this call won."""
        stmt = (
            update(Verification)
            .where(Verification.id == verification_id, Verification.status == from_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def find_latest_success(self, identifier: str, method: str | None = None) -> Verification | None:
        stmt = select(Verification).where(
            Verification.user_identifier == identifier,
            Verification.status == "completed",
            Verification.result == "success",
            Verification.method != "revalidate",
        )
        if method:
            stmt = stmt.where(Verification.method == method)
        stmt = stmt.order_by(desc(Verification.created_at), desc(Verification.completed_at)).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_shop(self, shop_id: str, limit: int, offset: int) -> Sequence[Verification]:
        stmt = (
            select(Verification)
            .where(Verification.shop_id == shop_id)
            .order_by(desc(Verification.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_pending_before(self, cutoff: datetime, limit: int) -> Sequence[Verification]:
        stmt = (
            select(Verification)
            .where(Verification.status == "pending", Verification.created_at < cutoff)
            .order_by(Verification.created_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
