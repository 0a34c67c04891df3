"""Pricing table exports"""

from .models import IDENTITY_METHODS, VerificationMethod
from .service import PricingTable

__all__ = [
    "IDENTITY_METHODS",
    "PricingTable",
    "VerificationMethod",
]
