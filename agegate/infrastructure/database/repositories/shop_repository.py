"""SQLAlchemy implementation for shop persistence"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.db.models import Shop


class SqlShopRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_shop(self, shop_id: str) -> Shop | None:
        stmt = select(Shop).where(Shop.id == shop_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_api_key(self, api_key: str) -> Sequence[Shop]:
        # the caller insists on exactly one match, so fetch at most two
        stmt = select(Shop).where(Shop.api_key == api_key).limit(2)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def create_shop(
        self,
        *,
        company_id: str,
        name: str,
        api_key: str,
        status: str,
        allowed_methods: str,
    ) -> Shop:
        shop = Shop(
            company_id=company_id,
            name=name,
            api_key=api_key,
            status=status,
            allowed_methods=allowed_methods,
        )
        self.session.add(shop)
        await self.session.flush()
        await self.session.refresh(shop)
        return shop

    async def update_shop(self, shop_id: str, **values: Any) -> Shop | None:
        stmt = (
            update(Shop)
            .where(Shop.id == shop_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
            .returning(Shop)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_shops(self, company_id: str) -> Sequence[Shop]:
        stmt = select(Shop).where(Shop.company_id == company_id).order_by(Shop.created_at)
        result = await self.session.execute(stmt)
        return result.scalars().all()
