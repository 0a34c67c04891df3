"""SQLAlchemy implementation for the wallet ledger"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.db.models import Company, LedgerEntry
from agegate.infrastructure.database.errors import lock_conflicts


class SqlLedgerRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def read_balance(self, company_id: str) -> tuple[int, int, str] | None:
        """Return ``(balance_cents, version, currency)`` straight from the row."""
        stmt = select(Company.balance_cents, Company.version, Company.currency).where(Company.id == company_id)
        with lock_conflicts(f"Wallet of company {company_id} is locked"):
            result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return int(row.balance_cents), int(row.version), row.currency

    async def compare_and_set(self, company_id: str, *, expected_version: int, delta_cents: int) -> bool:
        """Apply ``delta_cents`` only if nobody changed the wallet since it was read."""
        stmt = (
            update(Company)
            .where(
                Company.id == company_id,
                Company.version == expected_version,
                Company.balance_cents + delta_cents >= 0,
            )
            .values(
                balance_cents=Company.balance_cents + delta_cents,
                version=Company.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        with lock_conflicts(f"Wallet of company {company_id} is locked"):
            result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def increment(self, company_id: str, delta_cents: int) -> bool:
        stmt = (
            update(Company)
            .where(Company.id == company_id)
            .values(
                balance_cents=Company.balance_cents + delta_cents,
                version=Company.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        with lock_conflicts(f"Wallet of company {company_id} is locked"):
            result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def find_entry(
        self,
        *,
        kind: str,
        verification_id: str | None = None,
        wallet_transaction_id: str | None = None,
    ) -> LedgerEntry | None:
        stmt = select(LedgerEntry).where(LedgerEntry.kind == kind)
        if verification_id is not None:
            stmt = stmt.where(LedgerEntry.verification_id == verification_id)
        if wallet_transaction_id is not None:
            stmt = stmt.where(LedgerEntry.wallet_transaction_id == wallet_transaction_id)
        result = await self.session.execute(stmt.limit(1))
        return result.scalars().first()

    async def add_entry(
        self,
        *,
        company_id: str,
        kind: str,
        amount_cents: int,
        verification_id: str | None,
        wallet_transaction_id: str | None,
        description: str | None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            company_id=company_id,
            kind=kind,
            amount_cents=amount_cents,
            verification_id=verification_id,
            wallet_transaction_id=wallet_transaction_id,
            description=description,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_entries(self, company_id: str, limit: int, offset: int) -> Sequence[LedgerEntry]:
        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.company_id == company_id)
            .order_by(desc(LedgerEntry.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def sum_entries(self, company_id: str) -> int:
        stmt = select(func.coalesce(func.sum(LedgerEntry.amount_cents), 0)).where(
            LedgerEntry.company_id == company_id
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
