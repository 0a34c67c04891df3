"""Provider adapter for identity services reached over HTTP."""

from __future__ import annotations

import logging

import httpx

from agegate.modules.common.exceptions import ProviderError
from agegate.modules.pricing.models import VerificationMethod

from .base import ProviderResult, VerificationProvider

logger = logging.getLogger(__name__)


class HttpVerificationProvider(VerificationProvider):
    """POSTs ``{"identifier": ...}`` to the configured endpoint.

    The endpoint answers ``{"result": "success" | "failure"}``; anything else,
    a non 2xx status or a transport error is a ProviderError.
    """

    def __init__(
        self,
        method: VerificationMethod,
        endpoint: str | None,
        *,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.method = method
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def submit(self, identifier: str) -> ProviderResult:
        if not self.endpoint:
            raise ProviderError(f"Provider for {self.method.value} is not configured")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, json={"identifier": identifier}, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("%s provider answered %s", self.method.value, exc.response.status_code)
            raise ProviderError(f"{self.method.value} provider returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("%s provider unreachable: %s", self.method.value, exc)
            raise ProviderError(f"{self.method.value} provider unreachable") from exc
        except ValueError as exc:
            raise ProviderError(f"{self.method.value} provider sent invalid JSON") from exc

        result = payload.get("result") if isinstance(payload, dict) else None
        if result not in {"success", "failure"}:
            raise ProviderError(f"{self.method.value} provider sent unexpected result {result!r}")
        return ProviderResult(
            success=result == "success",
            details={key: value for key, value in payload.items() if key != "result"},
            reason=payload.get("reason"),
        )
