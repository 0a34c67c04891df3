"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Iterable, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agegate.core.config import Settings, get_settings
from agegate.core.container import ApplicationContainer, get_container
from agegate.infrastructure.database.session import dispose_engine, get_session_factory, init_db
from agegate.modules.common.exceptions import FeedUnavailableError
from agegate.modules.pricing import IDENTITY_METHODS, VerificationMethod
from agegate.modules.providers import (
    ProviderRegistry,
    ProviderResult,
    RevalidateProvider,
    SessionFactoryHistory,
    VerificationProvider,
)
from agegate.modules.reconciliation import BankDeposit
from agegate.modules.shops import Company, Shop, ShopCreateInput, ShopRegistry
from agegate.modules.wallets import LedgerService

ADMIN_TOKEN = "test-admin-token"


class StubProvider(VerificationProvider):
    """Identity provider answering from a script instead of the network."""

    def __init__(
        self,
        method: VerificationMethod,
        *,
        success: bool = True,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.method = method
        self.success = success
        self.delay = delay
        self.error = error
        self.calls: list[str] = []

    async def submit(self, identifier: str) -> ProviderResult:
        self.calls.append(identifier)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.success:
            return ProviderResult(success=True, details={"provider": self.method.value})
        return ProviderResult(success=False, reason="Document rejected")


class StubBankFeed:
    """Bank feed serving a fixed statement, optionally failing the first calls."""

    def __init__(self, deposits: Iterable[BankDeposit] = (), failures: int = 0) -> None:
        self.deposits = list(deposits)
        self.failures = failures
        self.calls = 0

    async def fetch_statement(self) -> list[BankDeposit]:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise FeedUnavailableError("Bank feed rate limited")
        return list(self.deposits)

    async def query(self, reference: str) -> list[BankDeposit]:
        return [deposit for deposit in await self.fetch_statement() if deposit.reference == reference]


@pytest.fixture
def anyio_backend() -> str:
    """Configure anyio backend for async tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def settings(tmp_path, monkeypatch) -> Iterator[Settings]:
    """Point every test at its own SQLite file with fast retries."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DATABASE__URL", f"sqlite+aiosqlite:///{tmp_path / 'agegate.db'}")
    monkeypatch.setenv("SECURITY__ADMIN_TOKEN", ADMIN_TOKEN)
    monkeypatch.setenv("RETRY__MAX_ATTEMPTS", "5")
    monkeypatch.setenv("RETRY__INITIAL_WAIT", "0.01")
    monkeypatch.setenv("RETRY__MAX_WAIT", "0.05")
    monkeypatch.setenv("PROVIDERS__TIMEOUT_SECONDS", "0.5")
    monkeypatch.setenv("BANK_FEED__API_TOKEN", "fio-test-token")
    get_settings.cache_clear()
    get_container.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
    get_container.cache_clear()


@pytest_asyncio.fixture
async def session_factory(settings: Settings) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    await dispose_engine()
    await init_db()
    yield get_session_factory()
    await dispose_engine()


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as db:
        yield db


@pytest.fixture
def stub_providers() -> dict[VerificationMethod, StubProvider]:
    return {method: StubProvider(method) for method in IDENTITY_METHODS}


@pytest.fixture
def providers(session_factory, stub_providers) -> ProviderRegistry:
    registry: dict[VerificationMethod, VerificationProvider] = dict(stub_providers)
    registry[VerificationMethod.REVALIDATE] = RevalidateProvider(SessionFactoryHistory(session_factory))
    return ProviderRegistry(providers=registry)


@pytest.fixture
def bank_feed() -> StubBankFeed:
    return StubBankFeed()


@pytest.fixture
def make_company(session_factory):
    """Factory seeding a company with one shop; the opening balance is booked as a credit."""

    async def _make(
        *,
        balance_cents: int = 0,
        methods: Iterable[str] = ("bankid", "mojeid", "ocr", "facescan"),
        shop_status: str = "active",
    ) -> tuple[Company, Shop]:
        async with session_factory() as db:
            registry = ShopRegistry.with_session(db)
            company = await registry.create_company("Test s.r.o.")
            shop = await registry.create_shop(
                ShopCreateInput(
                    company_id=company.id,
                    name="Test shop",
                    allowed_methods=list(methods),
                    status=shop_status,
                )
            )
            if balance_cents:
                await LedgerService.with_session(db).credit(company.id, balance_cents, description="Opening balance")
            await db.commit()
        return company, shop

    return _make


@pytest.fixture
def balance_of(session_factory):
    async def _balance(company_id: str) -> int:
        async with session_factory() as db:
            snapshot = await LedgerService.with_session(db).get_balance(company_id)
        return snapshot.balance_cents

    return _balance


@pytest.fixture
def ledger_audit(session_factory):
    """Returns an async check that balance equals the sum of ledger entries and is non-negative."""

    async def _audit(company_id: str) -> None:
        async with session_factory() as db:
            audit = await LedgerService.with_session(db).audit(company_id)
        assert audit.consistent, audit

    return _audit


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Token": ADMIN_TOKEN}


@pytest_asyncio.fixture
async def client(settings, session_factory, providers, bank_feed) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client wired to the stub collaborators.

    Yields:
        Configured AsyncClient for testing.
    """
    from agegate.interfaces.http.deps import get_app_container
    from agegate.main import create_app

    app = create_app()
    container = ApplicationContainer(
        settings=settings,
        session_factory=session_factory,
        providers=providers,
        bank_feed=bank_feed,
    )
    app.dependency_overrides[get_app_container] = lambda: container
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
