"""Shop registry: companies, shops, identity keys and enabled methods."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from agegate.core.config import get_settings
from agegate.core.security import generate_api_key
from agegate.db.models import Company as CompanyModel, Shop as ShopModel
from agegate.infrastructure.database.repositories.company_repository import SqlCompanyRepository
from agegate.infrastructure.database.repositories.shop_repository import SqlShopRepository
from agegate.modules.common.exceptions import (
    InvalidCredentialError,
    NotFoundError,
    ShopInactiveError,
    ValidationError,
)
from agegate.modules.pricing.models import IDENTITY_METHODS, VerificationMethod

from .models import SHOP_STATUSES, Company, Shop, ShopCreateInput
from .repository import CompanyRepository, ShopRepository

logger = logging.getLogger(__name__)


def normalize_methods(methods: Iterable[str]) -> list[str]:
    """Validate method names; revalidation is always implicit and never stored."""
    normalized: set[str] = set()
    for name in methods:
        method = VerificationMethod.parse(name)
        if method not in IDENTITY_METHODS:
            raise ValidationError(f"Method {method.value!r} cannot be enabled on a shop")
        normalized.add(method.value)
    return sorted(normalized)


@dataclass(slots=True)
class ShopRegistry:
    companies: CompanyRepository
    shops: ShopRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "ShopRegistry":
        return cls(SqlCompanyRepository(session), SqlShopRepository(session))

    async def create_company(self, name: str, currency: str | None = None) -> Company:
        if not name or not name.strip():
            raise ValidationError("Company name is required")
        model = await self.companies.create_company(
            name=name.strip(),
            currency=currency or get_settings().currency,
        )
        logger.info("Created company %s", model.id)
        return self._to_company(model)

    async def get_company(self, company_id: str) -> Company:
        model = await self.companies.get_company(company_id)
        if model is None:
            raise NotFoundError(f"Company {company_id} not found")
        return self._to_company(model)

    async def create_shop(self, payload: ShopCreateInput) -> Shop:
        if payload.status not in SHOP_STATUSES:
            raise ValidationError(f"Unknown shop status {payload.status!r}")
        await self.get_company(payload.company_id)
        model = await self.shops.create_shop(
            company_id=payload.company_id,
            name=payload.name,
            api_key=generate_api_key(),
            status=payload.status,
            allowed_methods=json.dumps(normalize_methods(payload.allowed_methods)),
        )
        logger.info("Created shop %s for company %s", model.id, model.company_id)
        return self._to_shop(model)

    async def get_shop(self, shop_id: str) -> Shop:
        model = await self.shops.get_shop(shop_id)
        if model is None:
            raise NotFoundError(f"Shop {shop_id} not found")
        return self._to_shop(model)

    async def get_active_shop(self, shop_id: str) -> Shop:
        shop = await self.get_shop(shop_id)
        if not shop.is_active():
            raise ShopInactiveError(f"Shop {shop_id} is not active")
        return shop

    async def authenticate(self, api_key: str) -> Shop:
        """Resolve a bearer key to exactly one active shop."""
        if not api_key:
            raise InvalidCredentialError("Missing API key")
        models = await self.shops.get_by_api_key(api_key)
        if len(models) != 1:
            raise InvalidCredentialError("Invalid API key")
        shop = self._to_shop(models[0])
        if not shop.is_active():
            raise ShopInactiveError("Shop is not active")
        return shop

    async def regenerate_key(self, shop_id: str) -> Shop:
        model = await self.shops.update_shop(shop_id, api_key=generate_api_key())
        if model is None:
            raise NotFoundError(f"Shop {shop_id} not found")
        logger.info("Regenerated API key for shop %s", shop_id)
        return self._to_shop(model)

    async def set_status(self, shop_id: str, status: str) -> Shop:
        if status not in SHOP_STATUSES:
            raise ValidationError(f"Unknown shop status {status!r}")
        model = await self.shops.update_shop(shop_id, status=status)
        if model is None:
            raise NotFoundError(f"Shop {shop_id} not found")
        return self._to_shop(model)

    async def set_allowed_methods(self, shop_id: str, methods: Iterable[str]) -> Shop:
        encoded = json.dumps(normalize_methods(methods))
        model = await self.shops.update_shop(shop_id, allowed_methods=encoded)
        if model is None:
            raise NotFoundError(f"Shop {shop_id} not found")
        return self._to_shop(model)

    async def list_shops(self, company_id: str) -> list[Shop]:
        rows = await self.shops.list_shops(company_id)
        return [self._to_shop(row) for row in rows]

    @staticmethod
    def _to_company(model: CompanyModel) -> Company:
        return Company(
            id=model.id,
            name=model.name,
            balance_cents=model.balance_cents,
            currency=model.currency,
            created_at=model.created_at,
        )

    @staticmethod
    def _to_shop(model: ShopModel) -> Shop:
        return Shop(
            id=model.id,
            company_id=model.company_id,
            name=model.name,
            status=model.status,
            allowed_methods=frozenset(json.loads(model.allowed_methods or "[]")),
            api_key=model.api_key,
            created_at=model.created_at,
        )
