"""Payment reconciliation poller.

Matches pending top-ups against the bank statement feed. The
pending -> completed transition and the wallet credit share one database
transaction, and the transition is conditional on the row still being
pending, so concurrent checks of the same reference credit at most once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from agegate.core.config import RetrySettings, Settings, get_settings
from agegate.infrastructure.database.errors import lock_conflicts
from agegate.modules.common.exceptions import (
    ConcurrencyConflictError,
    DomainError,
    FeedUnavailableError,
    ValidationError,
)
from agegate.modules.common.retry import retry_async
from agegate.modules.topups import COMPLETED, PENDING, TopupService, WalletTransaction
from agegate.modules.wallets import LedgerService

from .models import BankDeposit, BankFeed, CheckResult, ReconciliationSummary

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationPoller:
    session: AsyncSession
    topups: TopupService
    ledger: LedgerService
    feed: BankFeed
    retry_settings: RetrySettings | None = None

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        feed: BankFeed,
        settings: Settings | None = None,
    ) -> "ReconciliationPoller":
        settings = settings or get_settings()
        return cls(
            session=session,
            topups=TopupService.with_session(session),
            ledger=LedgerService.with_session(session),
            feed=feed,
            retry_settings=settings.retry,
        )

    async def check(self, reference: str) -> CheckResult:
        """Look for the deposit paying ``reference``; pending is a normal answer.

        Raises FeedUnavailableError once the bounded retries are spent; the
        transaction is never failed because of a feed outage.
        """
        reference = (reference or "").strip()
        if not reference:
            raise ValidationError("Transaction reference is required")

        transaction = await self.topups.get_by_reference(reference)
        await self.session.commit()
        if transaction.is_terminal():
            return CheckResult(reference=reference, status=transaction.status)

        deposits = await retry_async(
            partial(self.feed.query, reference),
            retry_on=(FeedUnavailableError,),
            settings=self.retry_settings,
        )
        status = await self._reconcile(transaction, deposits)
        return CheckResult(reference=reference, status=status)

    async def check_all(self, limit: int = 500) -> ReconciliationSummary:
        """Reconcile every pending top-up against one statement snapshot."""
        summary = ReconciliationSummary()
        pending = await self.topups.list_pending(limit)
        await self.session.commit()
        if not pending:
            return summary

        try:
            statement = await retry_async(
                self.feed.fetch_statement,
                retry_on=(FeedUnavailableError,),
                settings=self.retry_settings,
            )
        except FeedUnavailableError as exc:
            logger.error("Bank feed unavailable, %d top-ups left pending: %s", len(pending), exc.message)
            summary.errored_count = len(pending)
            return summary

        for transaction in pending:
            try:
                deposits = [d for d in statement if d.reference == transaction.external_reference]
                status = await self._reconcile(transaction, deposits)
            except DomainError as exc:
                logger.warning("Reconciling %s failed: %s", transaction.external_reference, exc.message)
                summary.errored_count += 1
                continue
            except Exception:
                logger.exception("Reconciling %s crashed", transaction.external_reference)
                await self.session.rollback()
                summary.errored_count += 1
                continue

            if status == COMPLETED:
                summary.completed_count += 1
            elif status == PENDING:
                summary.pending_count += 1

        logger.info(
            "Reconciliation finished: %d completed, %d pending, %d errored",
            summary.completed_count,
            summary.pending_count,
            summary.errored_count,
        )
        return summary

    async def _reconcile(self, transaction: WalletTransaction, deposits: Sequence[BankDeposit]) -> str:
        deposit = self._match(transaction, deposits)
        if deposit is None:
            return PENDING

        async def attempt() -> bool:
            try:
                with lock_conflicts(f"Top-up {transaction.external_reference} is locked"):
                    won = await self.topups.mark_completed(transaction.id)
                    if won:
                        await self.ledger.credit(
                            transaction.company_id,
                            deposit.amount_cents,
                            wallet_transaction_id=transaction.id,
                            description=f"Top-up {transaction.external_reference}",
                        )
                    await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            return won

        won = await retry_async(attempt, retry_on=(ConcurrencyConflictError,), settings=self.retry_settings)
        if won:
            logger.info(
                "Top-up %s matched, credited %d to company %s",
                transaction.external_reference,
                deposit.amount_cents,
                transaction.company_id,
            )
            return COMPLETED

        current = await self.topups.get(transaction.id)
        await self.session.commit()
        logger.info("Top-up %s was settled concurrently (%s)", transaction.external_reference, current.status)
        return current.status

    @staticmethod
    def _match(transaction: WalletTransaction, deposits: Sequence[BankDeposit]) -> BankDeposit | None:
        for deposit in deposits:
            if deposit.reference != transaction.external_reference:
                continue
            if deposit.amount_cents != transaction.amount_cents:
                logger.warning(
                    "Deposit for %s has amount %d, expected %d; leaving it pending",
                    transaction.external_reference,
                    deposit.amount_cents,
                    transaction.amount_cents,
                )
                continue
            return deposit
        return None
