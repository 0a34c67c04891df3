"""Tests for wallet top-up requests."""

from datetime import datetime, timedelta, timezone

import pytest

from agegate.modules.common.exceptions import NotFoundError, TerminalStateError, ValidationError
from agegate.modules.topups import COMPLETED, FAILED, PENDING, TopupService, generate_reference


class TestGenerateReference:
    """Tests for variable symbol generation."""

    def test_ten_digits_without_leading_zero(self) -> None:
        """Should produce numeric references a bank transfer form accepts."""
        for _ in range(50):
            reference = generate_reference()
            assert len(reference) == 10
            assert reference.isdigit()
            assert reference[0] != "0"


class TestTopupService:
    """Tests for the top-up lifecycle."""

    @pytest.mark.asyncio
    async def test_create_topup(self, session_factory, make_company) -> None:
        """Should create a pending top-up in the company currency."""
        company, _ = await make_company()

        async with session_factory() as db:
            service = TopupService.with_session(db)
            topup = await service.create_topup(company.id, 50000)
            await db.commit()
            found = await service.get_by_reference(topup.external_reference)

        assert topup.status == PENDING
        assert topup.currency == "CZK"
        assert found.id == topup.id

    @pytest.mark.asyncio
    async def test_rejects_bad_requests(self, session_factory, make_company) -> None:
        """Should refuse non-positive amounts and unknown companies."""
        company, _ = await make_company()

        async with session_factory() as db:
            service = TopupService.with_session(db)
            with pytest.raises(ValidationError):
                await service.create_topup(company.id, 0)
            with pytest.raises(NotFoundError):
                await service.create_topup("missing", 100)
            with pytest.raises(NotFoundError):
                await service.get_by_reference("0000000000")

    @pytest.mark.asyncio
    async def test_transitions_are_guarded(self, session_factory, make_company) -> None:
        """Should move a top-up out of pending only once."""
        company, _ = await make_company()

        async with session_factory() as db:
            service = TopupService.with_session(db)
            topup = await service.create_topup(company.id, 50000)
            first = await service.mark_completed(topup.id)
            second = await service.mark_failed(topup.id)
            await db.commit()
            current = await service.get(topup.id)

        assert first is True
        assert second is False
        assert current.status == COMPLETED
        assert current.confirmed_at is not None

    @pytest.mark.asyncio
    async def test_expire_overdue(self, session_factory, make_company) -> None:
        """Should fail pending top-ups older than the deadline and keep recent ones."""
        company, _ = await make_company()

        async with session_factory() as db:
            service = TopupService.with_session(db)
            topup = await service.create_topup(company.id, 50000)
            await db.commit()

            kept = await service.expire_overdue()
            expired = await service.expire_overdue(older_than=datetime.now(timezone.utc) + timedelta(minutes=1))
            await db.commit()
            current = await service.get(topup.id)
            listed = await service.list_for_company(company.id, status=FAILED)

        assert kept == 0
        assert expired == 1
        assert current.status == FAILED
        assert [item.id for item in listed] == [topup.id]

    @pytest.mark.asyncio
    async def test_cancel(self, session_factory, make_company) -> None:
        """Should fail a pending top-up and refuse to touch a settled one."""
        company, _ = await make_company()

        async with session_factory() as db:
            service = TopupService.with_session(db)
            pending = await service.create_topup(company.id, 50000)
            paid = await service.create_topup(company.id, 20000)
            await service.mark_completed(paid.id)
            await db.commit()

            cancelled = await service.cancel(pending.id)
            await db.commit()

            with pytest.raises(TerminalStateError):
                await service.cancel(paid.id)
            with pytest.raises(TerminalStateError):
                await service.cancel(pending.id)
            with pytest.raises(NotFoundError):
                await service.cancel("missing")
            still_paid = await service.get(paid.id)

        assert cancelled.status == FAILED
        assert still_paid.status == COMPLETED
