"""Method-keyed lookup of verification providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agegate.core.config import ProviderSettings, get_settings
from agegate.modules.common.exceptions import ValidationError
from agegate.modules.pricing.models import IDENTITY_METHODS, VerificationMethod

from .base import VerificationProvider
from .http import HttpVerificationProvider
from .revalidate import RevalidateProvider, SessionFactoryHistory


@dataclass(slots=True)
class ProviderRegistry:
    providers: Mapping[VerificationMethod, VerificationProvider]

    def get(self, method: VerificationMethod | str) -> VerificationProvider:
        if not isinstance(method, VerificationMethod):
            method = VerificationMethod.parse(method)
        provider = self.providers.get(method)
        if provider is None:
            raise ValidationError(f"No provider registered for {method.value}")
        return provider


def build_provider_registry(
    session_factory: async_sessionmaker[AsyncSession],
    settings: ProviderSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ProviderRegistry:
    settings = settings or get_settings().providers
    providers: dict[VerificationMethod, VerificationProvider] = {
        method: HttpVerificationProvider(
            method,
            getattr(settings, f"{method.value}_url"),
            api_key=settings.api_key,
            timeout=settings.timeout_seconds,
            transport=transport,
        )
        for method in IDENTITY_METHODS
    }
    providers[VerificationMethod.REVALIDATE] = RevalidateProvider(SessionFactoryHistory(session_factory))
    return ProviderRegistry(providers=providers)
