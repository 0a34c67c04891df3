"""Repository protocol for wallet ledger operations."""

from __future__ import annotations

from typing import Protocol, Sequence

from agegate.db.models import LedgerEntry as LedgerEntryModel


class LedgerRepository(Protocol):
    async def read_balance(self, company_id: str) -> tuple[int, int, str] | None:
        ...

    async def compare_and_set(self, company_id: str, *, expected_version: int, delta_cents: int) -> bool:
        ...

    async def increment(self, company_id: str, delta_cents: int) -> bool:
        ...

    async def find_entry(
        self,
        *,
        kind: str,
        verification_id: str | None = None,
        wallet_transaction_id: str | None = None,
    ) -> LedgerEntryModel | None:
        ...

    async def add_entry(
        self,
        *,
        company_id: str,
        kind: str,
        amount_cents: int,
        verification_id: str | None,
        wallet_transaction_id: str | None,
        description: str | None,
    ) -> LedgerEntryModel:
        ...

    async def list_entries(self, company_id: str, limit: int, offset: int) -> Sequence[LedgerEntryModel]:
        ...

    async def sum_entries(self, company_id: str) -> int:
        ...
