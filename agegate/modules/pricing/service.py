"""Static price list keyed by verification method."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from agegate.core.config import PricingSettings, get_settings

from .models import VerificationMethod


@dataclass(frozen=True, slots=True)
class PricingTable:
    prices: Mapping[VerificationMethod, int]
    currency: str

    @classmethod
    def from_settings(cls, settings: PricingSettings | None = None) -> "PricingTable":
        settings = settings or get_settings().pricing
        prices = {method: getattr(settings, method.value) for method in VerificationMethod}
        return cls(prices=MappingProxyType(prices), currency=settings.currency)

    def price_for(self, method: VerificationMethod | str) -> int:
        if not isinstance(method, VerificationMethod):
            method = VerificationMethod.parse(method)
        return self.prices[method]

    def as_dict(self) -> dict[str, int]:
        return {method.value: price for method, price in self.prices.items()}
