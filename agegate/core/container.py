"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agegate.core.config import Settings, get_settings
from agegate.infrastructure.bank_feed import FioBankFeed
from agegate.infrastructure.database.session import get_engine, get_session_factory
from agegate.modules.providers import ProviderRegistry, build_provider_registry
from agegate.modules.reconciliation import BankFeed


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    providers: ProviderRegistry
    bank_feed: BankFeed

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()


def build_container(settings: Settings | None = None) -> ApplicationContainer:
    settings = settings or get_settings()
    session_factory = get_session_factory()
    return ApplicationContainer(
        settings=settings,
        session_factory=session_factory,
        providers=build_provider_registry(session_factory, settings.providers),
        bank_feed=FioBankFeed(settings.bank_feed),
    )


@lru_cache()
def get_container() -> ApplicationContainer:
    container = build_container()
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "build_container", "get_container"]
