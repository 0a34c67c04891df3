"""SQLAlchemy implementation for company persistence"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.db.models import Company


class SqlCompanyRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_company(self, company_id: str) -> Company | None:
        stmt = select(Company).where(Company.id == company_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_company(self, *, name: str, currency: str) -> Company:
        company = Company(name=name, currency=currency, balance_cents=0, version=0)
        self.session.add(company)
        await self.session.flush()
        await self.session.refresh(company)
        return company

    async def list_companies(self, limit: int, offset: int) -> Sequence[Company]:
        stmt = select(Company).order_by(Company.created_at).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()
