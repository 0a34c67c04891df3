"""Verification provider capability."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from agegate.modules.pricing.models import VerificationMethod


@dataclass(slots=True)
class ProviderResult:
    success: bool
    details: dict[str, Any] = field(default_factory=dict)
    reason: str | None = None


class VerificationProvider(ABC):
    """One verification method; ``submit`` decides whether an identity passes."""

    method: VerificationMethod

    @abstractmethod
    async def submit(self, identifier: str) -> ProviderResult:
        """Return the provider's verdict or raise ProviderError."""
        raise NotImplementedError
