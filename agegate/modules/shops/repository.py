"""Repository protocols for companies and shops."""

from __future__ import annotations

from typing import Protocol, Sequence

from agegate.db.models import Company as CompanyModel, Shop as ShopModel


class CompanyRepository(Protocol):
    async def get_company(self, company_id: str) -> CompanyModel | None:
        ...

    async def create_company(self, *, name: str, currency: str) -> CompanyModel:
        ...


class ShopRepository(Protocol):
    async def get_shop(self, shop_id: str) -> ShopModel | None:
        ...

    async def get_by_api_key(self, api_key: str) -> Sequence[ShopModel]:
        ...

    async def create_shop(
        self,
        *,
        company_id: str,
        name: str,
        api_key: str,
        status: str,
        allowed_methods: str,
    ) -> ShopModel:
        ...

    async def update_shop(self, shop_id: str, **values) -> ShopModel | None:
        ...

    async def list_shops(self, company_id: str) -> Sequence[ShopModel]:
        ...
