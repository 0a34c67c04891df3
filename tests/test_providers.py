"""Tests for verification provider adapters."""

import json

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from agegate.core.config import ProviderSettings
from agegate.modules.common.exceptions import ProviderError, ValidationError
from agegate.modules.pricing import VerificationMethod
from agegate.modules.providers import (
    HttpVerificationProvider,
    ProviderRegistry,
    RevalidateProvider,
    build_provider_registry,
)

ENDPOINT = "https://bankid.example/verify"


def _provider(handler, **kwargs) -> HttpVerificationProvider:
    return HttpVerificationProvider(
        VerificationMethod.BANKID,
        ENDPOINT,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestHttpVerificationProvider:
    """Tests for the HTTP provider adapter."""

    @pytest.mark.asyncio
    async def test_success_verdict(self) -> None:
        """Should post the identifier and return the verdict with details."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"result": "success", "age_over": 18})

        result = await _provider(handler, api_key="provider-key").submit("user-1")

        assert result.success is True
        assert result.details == {"age_over": 18}
        assert json.loads(requests[0].content) == {"identifier": "user-1"}
        assert requests[0].headers["Authorization"] == "Bearer provider-key"

    @pytest.mark.asyncio
    async def test_failure_verdict(self) -> None:
        """Should return an unsuccessful result with the provider's reason."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"result": "failure", "reason": "Underage"})

        result = await _provider(handler).submit("user-1")

        assert result.success is False
        assert result.reason == "Underage"

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        """Should raise ProviderError on a non-2xx answer."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502)

        with pytest.raises(ProviderError):
            await _provider(handler).submit("user-1")

    @pytest.mark.asyncio
    async def test_unexpected_payload(self) -> None:
        """Should raise ProviderError when the verdict is missing."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "ok"})

        with pytest.raises(ProviderError):
            await _provider(handler).submit("user-1")

    @pytest.mark.asyncio
    async def test_unconfigured_endpoint(self) -> None:
        """Should raise ProviderError when no endpoint is configured."""
        provider = HttpVerificationProvider(VerificationMethod.OCR, None)

        with pytest.raises(ProviderError):
            await provider.submit("user-1")


class TestProviderRegistry:
    """Tests for provider lookup."""

    def test_builds_every_method(self) -> None:
        """Should register an adapter for each priced method."""
        registry = build_provider_registry(async_sessionmaker(), ProviderSettings(bankid_url=ENDPOINT))

        for method in VerificationMethod:
            assert registry.get(method).method is method
        assert isinstance(registry.get("revalidate"), RevalidateProvider)
        assert registry.get("bankid").endpoint == ENDPOINT

    def test_missing_provider(self) -> None:
        """Should raise ValidationError for a method without a provider."""
        registry = ProviderRegistry(providers={})

        with pytest.raises(ValidationError):
            registry.get(VerificationMethod.OCR)
