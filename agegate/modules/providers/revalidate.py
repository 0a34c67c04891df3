"""Revalidation: re-derive a verdict from earlier successful verifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agegate.infrastructure.database.repositories.verification_repository import SqlVerificationRepository
from agegate.modules.pricing.models import VerificationMethod

from .base import ProviderResult, VerificationProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PriorVerification:
    id: str
    method: str
    created_at: Optional[datetime]


class VerificationHistory(Protocol):
    async def find_latest_success(
        self,
        identifier: str,
        method: str | None = None,
    ) -> PriorVerification | None:
        ...


class SessionFactoryHistory:
    """History lookup that runs in its own short-lived session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_latest_success(self, identifier: str, method: str | None = None) -> PriorVerification | None:
        async with self._session_factory() as session:
            model = await SqlVerificationRepository(session).find_latest_success(identifier, method=method)
            if model is None:
                return None
            return PriorVerification(id=model.id, method=model.method, created_at=model.created_at)


class RevalidateProvider(VerificationProvider):
    method = VerificationMethod.REVALIDATE

    def __init__(self, history: VerificationHistory) -> None:
        self.history = history

    async def submit(self, identifier: str, previous_method: str | None = None) -> ProviderResult:
        prior = await self.history.find_latest_success(identifier, method=previous_method)
        if prior is None:
            logger.info("No earlier successful verification to revalidate")
            return ProviderResult(success=False, reason="Identity was not verified before")
        return ProviderResult(
            success=True,
            details={
                "previous_verification": prior.id,
                "previous_method": prior.method,
                "previous_date": prior.created_at.isoformat() if prior.created_at else None,
            },
        )
