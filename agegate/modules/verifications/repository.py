"""Repository protocol for verification records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, Sequence

from agegate.db.models import Verification as VerificationModel


class VerificationRepository(Protocol):
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
    ) -> VerificationModel:
        ...

    async def get(self, verification_id: str) -> VerificationModel | None:
        ...

    async def transition(self, verification_id: str, *, from_status: str, values: dict[str, Any]) -> bool:
        ...

    async def find_latest_success(self, identifier: str, method: str | None = None) -> VerificationModel | None:
        ...

    async def list_for_shop(self, shop_id: str, limit: int, offset: int) -> Sequence[VerificationModel]:
        ...

    async def list_pending_before(self, cutoff: datetime, limit: int) -> Sequence[VerificationModel]:
        ...
