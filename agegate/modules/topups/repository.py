"""Repository interface for wallet top-ups."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from agegate.db.models import WalletTransaction as WalletTransactionModel


class TopupRepository(Protocol):
    async def create(
        self,
        *,
        company_id: str,
        amount_cents: int,
        currency: str,
        external_reference: str,
    ) -> WalletTransactionModel:
        ...

    async def get(self, transaction_id: str) -> WalletTransactionModel | None:
        ...

    async def get_by_reference(self, external_reference: str) -> WalletTransactionModel | None:
        ...

    async def transition(self, transaction_id: str, *, status: str, confirmed_at: datetime) -> bool:
        ...

    async def list_for_company(
        self,
        company_id: str,
        limit: int,
        offset: int,
        status: str | None = None,
    ) -> Sequence[WalletTransactionModel]:
        ...

    async def list_pending(self, limit: int, created_before: datetime | None = None) -> Sequence[WalletTransactionModel]:
        ...
