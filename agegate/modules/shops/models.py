"""Domain models for companies and their shops."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ACTIVE = "active"
INACTIVE = "inactive"
SHOP_STATUSES = frozenset({ACTIVE, INACTIVE})


@dataclass(slots=True)
class Company:
    id: str
    name: str
    balance_cents: int
    currency: str
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class Shop:
    id: str
    company_id: str
    name: str
    status: str
    allowed_methods: frozenset[str]
    api_key: str = field(repr=False)
    created_at: Optional[datetime] = None

    def is_active(self) -> bool:
        return self.status == ACTIVE

    def allows(self, method: str) -> bool:
        return method in self.allowed_methods


@dataclass(slots=True)
class ShopCreateInput:
    company_id: str
    name: str
    allowed_methods: list[str]
    status: str = ACTIVE
