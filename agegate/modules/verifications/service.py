"""Verification orchestrator.

A verification is charged and recorded in one database transaction, then
settled against its provider outside of any transaction. Settlement either
completes the record or fails it and refunds the exact charge; the guarded
pending -> terminal transition makes the refund happen at most once.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import partial

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agegate.core.config import RetrySettings, Settings, get_settings
from agegate.db.models import Verification as VerificationModel, generate_uuid
from agegate.infrastructure.database.errors import lock_conflicts
from agegate.infrastructure.database.repositories.verification_repository import SqlVerificationRepository
from agegate.modules.common.exceptions import (
    ConcurrencyConflictError,
    MethodNotAllowedError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from agegate.modules.common.retry import retry_async
from agegate.modules.pricing import PricingTable, VerificationMethod
from agegate.modules.providers import ProviderRegistry, ProviderResult, RevalidateProvider
from agegate.modules.shops import Shop, ShopRegistry
from agegate.modules.wallets import LedgerService

from .models import (
    COMPLETED,
    FAILED,
    FAILURE,
    PENDING,
    SUCCESS,
    InitializeOutcome,
    RevalidationOutcome,
    Verification,
    VerificationStatusView,
)
from .repository import VerificationRepository

logger = logging.getLogger(__name__)

ProviderCall = Callable[[], Awaitable[ProviderResult]]


@dataclass(slots=True)
class VerificationOrchestrator:
    session: AsyncSession
    shops: ShopRegistry
    ledger: LedgerService
    repository: VerificationRepository
    pricing: PricingTable
    providers: ProviderRegistry
    provider_timeout: float = 30.0
    stale_after: timedelta = timedelta(minutes=30)
    retry_settings: RetrySettings | None = None

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        providers: ProviderRegistry,
        settings: Settings | None = None,
    ) -> "VerificationOrchestrator":
        settings = settings or get_settings()
        return cls(
            session=session,
            shops=ShopRegistry.with_session(session),
            ledger=LedgerService.with_session(session),
            repository=SqlVerificationRepository(session),
            pricing=PricingTable.from_settings(settings.pricing),
            providers=providers,
            provider_timeout=settings.providers.timeout_seconds,
            stale_after=timedelta(minutes=settings.reconciliation.verification_stale_minutes),
            retry_settings=settings.retry,
        )

    async def initialize(
        self,
        shop_id: str,
        method: str,
        redirect_url: str | None = None,
        identifier: str | None = None,
    ) -> InitializeOutcome:
        verification_method = VerificationMethod.parse(method)
        if verification_method is VerificationMethod.REVALIDATE:
            raise ValidationError("Revalidation has its own endpoint")

        shop = await self.shops.get_active_shop(shop_id)
        if not shop.allows(verification_method.value):
            raise MethodNotAllowedError(f"Method {verification_method.value} is not enabled for shop {shop_id}")

        price = self.pricing.price_for(verification_method)
        verification = await self._charge(
            shop,
            verification_method,
            price,
            identifier=identifier,
            redirect_url=redirect_url,
        )
        return InitializeOutcome(verification_id=verification.id, status=verification.status)

    async def settle(self, verification_id: str) -> VerificationStatusView:
        """Ask the provider for a verdict and finalize; terminal records are left alone."""
        verification = await self.get(verification_id)
        if verification.is_terminal():
            return self._to_view(verification)
        provider = self.providers.get(verification.method)
        # without a user identifier the provider session is keyed by the verification id
        identifier = verification.user_identifier or verification.id
        return await self._settle(verification, partial(provider.submit, identifier))

    async def status(self, verification_id: str) -> VerificationStatusView:
        return self._to_view(await self._get_model(verification_id))

    async def get(self, verification_id: str) -> Verification:
        return self._to_domain(await self._get_model(verification_id))

    async def revalidate(self, shop_id: str, identifier: str, method: str | None = None) -> RevalidationOutcome:
        """Re-check an identity that passed an earlier verification, at the revalidation price."""
        if not identifier or not identifier.strip():
            raise ValidationError("Identifier is required")
        identifier = identifier.strip()
        previous_method: str | None = None
        if method:
            parsed = VerificationMethod.parse(method)
            if parsed is not VerificationMethod.REVALIDATE:
                previous_method = parsed.value

        shop = await self.shops.get_active_shop(shop_id)
        price = self.pricing.price_for(VerificationMethod.REVALIDATE)
        verification = await self._charge(
            shop,
            VerificationMethod.REVALIDATE,
            price,
            identifier=identifier,
            redirect_url=None,
        )

        provider = self.providers.get(VerificationMethod.REVALIDATE)
        call: ProviderCall
        if isinstance(provider, RevalidateProvider):
            call = partial(provider.submit, identifier, previous_method=previous_method)
        else:
            call = partial(provider.submit, identifier)
        await self._settle(verification, call)

        settled = await self.get(verification.id)
        is_verified = settled.status == COMPLETED and settled.result == SUCCESS
        return RevalidationOutcome(
            success=is_verified,
            verification_id=settled.id,
            is_verified=is_verified,
            previous_verification=settled.details or None,
        )

    async def fail_stale(self, older_than: datetime | None = None, limit: int = 100) -> int:
        """Fail and refund verifications whose provider never answered."""
        cutoff = older_than or datetime.now(timezone.utc) - self.stale_after
        rows = await self.repository.list_pending_before(cutoff, limit)
        stale = [self._to_domain(row) for row in rows]
        await self.session.commit()
        failed = 0
        for verification in stale:
            if await self._finalize_failed(verification, reason="Verification expired without provider answer"):
                failed += 1
        if failed:
            logger.warning("Failed %d stale verifications", failed)
        return failed

    async def list_for_shop(self, shop_id: str, limit: int = 50, offset: int = 0) -> list[Verification]:
        rows = await self.repository.list_for_shop(shop_id, limit, offset)
        return [self._to_domain(row) for row in rows]

    async def _charge(
        self,
        shop: Shop,
        method: VerificationMethod,
        price: int,
        *,
        identifier: str | None,
        redirect_url: str | None,
    ) -> Verification:
        """Record the pending verification and debit its price as one unit of work."""
        verification_id = generate_uuid()

        async def attempt() -> Verification:
            try:
                with lock_conflicts(f"Wallet of company {shop.company_id} is locked"):
                    model = await self.repository.create(
                        verification_id=verification_id,
                        shop_id=shop.id,
                        company_id=shop.company_id,
                        method=method.value,
                        price_cents=price,
                        user_identifier=identifier,
                        redirect_url=redirect_url,
                    )
                    await self.ledger.debit(
                        shop.company_id,
                        price,
                        verification_id=verification_id,
                        description=f"Verification {verification_id} ({method.value})",
                    )
                    verification = self._to_domain(model)
                    await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            return verification

        verification = await retry_async(
            attempt,
            retry_on=(ConcurrencyConflictError,),
            settings=self.retry_settings,
        )
        logger.info(
            "Created %s verification %s for shop %s at %d",
            method.value,
            verification.id,
            shop.id,
            price,
        )
        return verification

    async def _settle(self, verification: Verification, call: ProviderCall) -> VerificationStatusView:
        # no transaction may stay open while the provider is being called
        await self.session.commit()
        try:
            result = await asyncio.wait_for(call(), timeout=self.provider_timeout)
        except asyncio.TimeoutError:
            logger.warning("Provider %s timed out for verification %s", verification.method, verification.id)
            await self._finalize_failed(verification, reason="Provider timed out")
        except ProviderError as exc:
            logger.warning(
                "Provider %s failed for verification %s: %s",
                verification.method,
                verification.id,
                exc.message,
            )
            await self._finalize_failed(verification, reason=exc.message)
        except Exception:
            logger.exception("Provider %s crashed for verification %s", verification.method, verification.id)
            await self._finalize_failed(verification, reason="Provider error")
        else:
            if result.success:
                await self._finalize_completed(verification, result)
            else:
                await self._finalize_failed(
                    verification,
                    reason=result.reason or "Verification rejected by provider",
                    details=result.details,
                )
        return self._to_view(await self._get_model(verification.id))

    async def _finalize_completed(self, verification: Verification, result: ProviderResult) -> bool:
        async def attempt() -> bool:
            try:
                with lock_conflicts(f"Verification {verification.id} is locked"):
                    won = await self.repository.transition(
                        verification.id,
                        from_status=PENDING,
                        values={
                            "status": COMPLETED,
                            "result": SUCCESS,
                            "details": json.dumps(result.details) if result.details else None,
                            "completed_at": datetime.now(timezone.utc),
                        },
                    )
                    await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            return won

        won = await retry_async(attempt, retry_on=(ConcurrencyConflictError,), settings=self.retry_settings)
        if won:
            logger.info("Verification %s completed", verification.id)
        else:
            logger.info("Verification %s was already settled", verification.id)
        return won

    async def _finalize_failed(
        self,
        verification: Verification,
        *,
        reason: str,
        details: dict | None = None,
    ) -> bool:
        """Fail a pending verification and refund it; False if it was already settled."""

        async def attempt() -> bool:
            try:
                with lock_conflicts(f"Verification {verification.id} is locked"):
                    won = await self.repository.transition(
                        verification.id,
                        from_status=PENDING,
                        values={
                            "status": FAILED,
                            "result": FAILURE,
                            "error_message": reason,
                            "details": json.dumps(details) if details else None,
                            "refunded": True,
                            "completed_at": datetime.now(timezone.utc),
                        },
                    )
                    if won:
                        await self.ledger.refund(
                            verification.company_id,
                            verification.price_cents,
                            verification_id=verification.id,
                        )
                    await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            return won

        won = await retry_async(attempt, retry_on=(ConcurrencyConflictError,), settings=self.retry_settings)
        if won:
            logger.info("Verification %s failed (%s), refunded %d", verification.id, reason, verification.price_cents)
        else:
            logger.info("Verification %s was already settled, no refund", verification.id)
        return won

    async def _get_model(self, verification_id: str) -> VerificationModel:
        model = await self.repository.get(verification_id)
        if model is None:
            raise NotFoundError(f"Verification {verification_id} not found")
        return model

    @staticmethod
    def _to_view(model: VerificationModel | Verification) -> VerificationStatusView:
        return VerificationStatusView(status=model.status, result=model.result, method=model.method)

    @staticmethod
    def _to_domain(model: VerificationModel) -> Verification:
        return Verification(
            id=model.id,
            shop_id=model.shop_id,
            company_id=model.company_id,
            method=model.method,
            status=model.status,
            result=model.result,
            price_cents=model.price_cents,
            user_identifier=model.user_identifier,
            redirect_url=model.redirect_url,
            details=json.loads(model.details) if model.details else {},
            error_message=model.error_message,
            refunded=bool(model.refunded),
            created_at=model.created_at,
            completed_at=model.completed_at,
        )


async def run_settlement(
    session_factory: async_sessionmaker[AsyncSession],
    providers: ProviderRegistry,
    verification_id: str,
) -> None:
    """Background entry point: settle one verification in a fresh session."""
    async with session_factory() as session:
        orchestrator = VerificationOrchestrator.with_session(session, providers)
        try:
            await orchestrator.settle(verification_id)
        except Exception:
            # nobody awaits a background task; the stale sweep fails and refunds it later
            logger.exception("Settlement of verification %s crashed", verification_id)
