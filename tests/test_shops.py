"""Tests for the shop registry."""

import pytest

from agegate.modules.common.exceptions import (
    InvalidCredentialError,
    NotFoundError,
    ShopInactiveError,
    ValidationError,
)
from agegate.modules.shops import INACTIVE, ShopCreateInput, ShopRegistry
from agegate.modules.shops.service import normalize_methods


class TestNormalizeMethods:
    """Tests for method validation."""

    def test_sorts_and_deduplicates(self) -> None:
        """Should return a sorted list of known method names."""
        assert normalize_methods(["OCR", "bankid", "ocr"]) == ["bankid", "ocr"]

    def test_rejects_revalidate_and_unknown(self) -> None:
        """Should refuse methods a shop cannot enable."""
        with pytest.raises(ValidationError):
            normalize_methods(["revalidate"])
        with pytest.raises(ValidationError):
            normalize_methods(["passport"])


class TestShopRegistry:
    """Tests for shop identity and configuration."""

    @pytest.mark.asyncio
    async def test_create_shop_issues_key(self, session_factory, make_company) -> None:
        """Should generate an ``sk_`` key of 48 hex characters."""
        _, shop = await make_company(methods=["bankid"])

        assert shop.api_key.startswith("sk_")
        assert len(shop.api_key) == 3 + 48
        assert shop.allowed_methods == frozenset({"bankid"})

    @pytest.mark.asyncio
    async def test_authenticate(self, session_factory, make_company) -> None:
        """Should resolve a key to its shop and reject unknown keys."""
        _, shop = await make_company()

        async with session_factory() as db:
            registry = ShopRegistry.with_session(db)
            resolved = await registry.authenticate(shop.api_key)
            with pytest.raises(InvalidCredentialError):
                await registry.authenticate("sk_unknown")
            with pytest.raises(InvalidCredentialError):
                await registry.authenticate("")

        assert resolved.id == shop.id

    @pytest.mark.asyncio
    async def test_inactive_shop_cannot_authenticate(self, session_factory, make_company) -> None:
        """Should raise ShopInactiveError for a deactivated shop."""
        _, shop = await make_company()

        async with session_factory() as db:
            registry = ShopRegistry.with_session(db)
            updated = await registry.set_status(shop.id, INACTIVE)
            await db.commit()
            with pytest.raises(ShopInactiveError):
                await registry.authenticate(shop.api_key)

        assert updated.status == INACTIVE

    @pytest.mark.asyncio
    async def test_regenerate_key_revokes_old_key(self, session_factory, make_company) -> None:
        """Should stop accepting the previous key."""
        _, shop = await make_company()

        async with session_factory() as db:
            registry = ShopRegistry.with_session(db)
            renewed = await registry.regenerate_key(shop.id)
            await db.commit()
            with pytest.raises(InvalidCredentialError):
                await registry.authenticate(shop.api_key)
            resolved = await registry.authenticate(renewed.api_key)

        assert renewed.api_key != shop.api_key
        assert resolved.id == shop.id

    @pytest.mark.asyncio
    async def test_update_methods(self, session_factory, make_company) -> None:
        """Should replace the enabled methods."""
        _, shop = await make_company(methods=["bankid"])

        async with session_factory() as db:
            updated = await ShopRegistry.with_session(db).set_allowed_methods(shop.id, ["ocr", "facescan"])
            await db.commit()

        assert updated.allowed_methods == frozenset({"ocr", "facescan"})
        assert updated.allows("ocr")
        assert not updated.allows("bankid")

    @pytest.mark.asyncio
    async def test_shop_for_missing_company(self, session_factory) -> None:
        """Should not create a shop for an unknown company."""
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await ShopRegistry.with_session(db).create_shop(
                    ShopCreateInput(company_id="missing", name="Ghost", allowed_methods=["ocr"])
                )

    @pytest.mark.asyncio
    async def test_unknown_shop(self, session_factory) -> None:
        """Should raise NotFoundError for missing shops."""
        async with session_factory() as db:
            registry = ShopRegistry.with_session(db)
            with pytest.raises(NotFoundError):
                await registry.get_shop("missing")
            with pytest.raises(NotFoundError):
                await registry.set_status("missing", INACTIVE)
