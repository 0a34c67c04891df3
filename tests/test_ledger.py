"""Tests for the wallet ledger."""

import pytest

from agegate.infrastructure.database.repositories import SqlLedgerRepository, SqlVerificationRepository
from agegate.modules.common.exceptions import (
    ConcurrencyConflictError,
    InsufficientCreditError,
    NotFoundError,
    ValidationError,
)
from agegate.modules.topups import TopupService
from agegate.modules.wallets import CREDIT, DEBIT, REFUND, LedgerService


async def _pending_verification(db, shop, price_cents: int = 2000) -> str:
    model = await SqlVerificationRepository(db).create(
        verification_id="c0ffee00-0000-4000-8000-000000000001",
        shop_id=shop.id,
        company_id=shop.company_id,
        method="bankid",
        price_cents=price_cents,
        user_identifier=None,
        redirect_url=None,
    )
    return model.id


class _StaleRepository:
    """Ledger repository whose compare-and-set always loses."""

    async def read_balance(self, company_id):
        return 5000, 3, "CZK"

    async def compare_and_set(self, company_id, *, expected_version, delta_cents):
        return False


class TestDebit:
    """Tests for conditional debits."""

    @pytest.mark.asyncio
    async def test_debit_decrements_and_records_entry(self, session_factory, make_company, ledger_audit) -> None:
        """Should lower the balance and write a negative debit entry."""
        company, _ = await make_company(balance_cents=5000)

        async with session_factory() as db:
            ledger = LedgerService.with_session(db)
            snapshot = await ledger.debit(company.id, 2000, description="Test charge")
            await db.commit()
            entries = await ledger.list_entries(company.id)

        assert snapshot.balance_cents == 3000
        debits = [entry for entry in entries if entry.kind == DEBIT]
        assert [entry.amount_cents for entry in debits] == [-2000]
        await ledger_audit(company.id)

    @pytest.mark.asyncio
    async def test_insufficient_credit_leaves_balance(self, session_factory, make_company, balance_of) -> None:
        """Should reject a debit larger than the balance without side effects."""
        company, _ = await make_company(balance_cents=1000)

        async with session_factory() as db:
            with pytest.raises(InsufficientCreditError) as excinfo:
                await LedgerService.with_session(db).debit(company.id, 2000)
            await db.rollback()

        assert excinfo.value.balance_cents == 1000
        assert excinfo.value.required_cents == 2000
        assert await balance_of(company.id) == 1000

    @pytest.mark.asyncio
    async def test_rejects_non_positive_amounts(self, session_factory, make_company) -> None:
        """Should refuse zero and negative amounts."""
        company, _ = await make_company(balance_cents=1000)

        async with session_factory() as db:
            ledger = LedgerService.with_session(db)
            with pytest.raises(ValidationError):
                await ledger.debit(company.id, 0)
            with pytest.raises(ValidationError):
                await ledger.credit(company.id, -5)

    @pytest.mark.asyncio
    async def test_unknown_company(self, session_factory) -> None:
        """Should raise NotFoundError for a company that does not exist."""
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await LedgerService.with_session(db).debit("missing", 100)

    @pytest.mark.asyncio
    async def test_lost_compare_and_set_is_a_conflict(self) -> None:
        """Should raise ConcurrencyConflictError when the wallet version moved."""
        ledger = LedgerService(_StaleRepository())

        with pytest.raises(ConcurrencyConflictError) as excinfo:
            await ledger.debit("company-1", 100)

        assert excinfo.value.retryable is True

    @pytest.mark.asyncio
    async def test_stale_version_does_not_apply(self, session_factory, make_company, balance_of) -> None:
        """Should not change the row when the expected version is outdated."""
        company, _ = await make_company(balance_cents=1000)

        async with session_factory() as db:
            repository = SqlLedgerRepository(db)
            _, version, _ = await repository.read_balance(company.id)
            await LedgerService.with_session(db).credit(company.id, 500)
            swapped = await repository.compare_and_set(company.id, expected_version=version, delta_cents=-100)
            await db.commit()

        assert swapped is False
        assert await balance_of(company.id) == 1500

    @pytest.mark.asyncio
    async def test_balance_sees_own_uncommitted_debit(self, session_factory, make_company, balance_of) -> None:
        """Should read the fresh column inside the caller's transaction."""
        company, _ = await make_company(balance_cents=3000)

        async with session_factory() as db:
            ledger = LedgerService.with_session(db)
            await ledger.debit(company.id, 1000)
            inside = await ledger.get_balance(company.id)
            await db.rollback()

        assert inside.balance_cents == 2000
        assert await balance_of(company.id) == 3000


class TestRefundAndCredit:
    """Tests for idempotent balance increases."""

    @pytest.mark.asyncio
    async def test_refund_applies_once(self, session_factory, make_company, balance_of, ledger_audit) -> None:
        """Should restore the charge exactly once per verification."""
        company, shop = await make_company(balance_cents=2000)

        async with session_factory() as db:
            verification_id = await _pending_verification(db, shop)
            ledger = LedgerService.with_session(db)
            await ledger.debit(company.id, 2000, verification_id=verification_id)
            await db.commit()

            await ledger.refund(company.id, 2000, verification_id=verification_id)
            await db.commit()
            await ledger.refund(company.id, 2000, verification_id=verification_id)
            await db.commit()
            entries = await ledger.list_entries(company.id)

        assert await balance_of(company.id) == 2000
        assert len([entry for entry in entries if entry.kind == REFUND]) == 1
        await ledger_audit(company.id)

    @pytest.mark.asyncio
    async def test_credit_per_topup_applies_once(self, session_factory, make_company, balance_of) -> None:
        """Should credit a top-up only once even when asked twice."""
        company, _ = await make_company()

        async with session_factory() as db:
            topup = await TopupService.with_session(db).create_topup(company.id, 50000)
            ledger = LedgerService.with_session(db)
            await ledger.credit(company.id, 50000, wallet_transaction_id=topup.id)
            await ledger.credit(company.id, 50000, wallet_transaction_id=topup.id)
            await db.commit()
            entries = await ledger.list_entries(company.id)

        assert await balance_of(company.id) == 50000
        assert [entry.kind for entry in entries] == [CREDIT]

    @pytest.mark.asyncio
    async def test_audit_matches_entries(self, session_factory, make_company) -> None:
        """Should report the balance and the ledger sum as equal."""
        company, _ = await make_company(balance_cents=4000)

        async with session_factory() as db:
            ledger = LedgerService.with_session(db)
            await ledger.debit(company.id, 1500)
            await db.commit()
            audit = await ledger.audit(company.id)

        assert audit.balance_cents == 2500
        assert audit.ledger_sum_cents == 2500
        assert audit.consistent
