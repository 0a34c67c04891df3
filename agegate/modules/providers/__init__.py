"""Verification provider exports"""

from .base import ProviderResult, VerificationProvider
from .http import HttpVerificationProvider
from .registry import ProviderRegistry, build_provider_registry
from .revalidate import PriorVerification, RevalidateProvider, SessionFactoryHistory, VerificationHistory

__all__ = [
    "HttpVerificationProvider",
    "PriorVerification",
    "ProviderRegistry",
    "ProviderResult",
    "RevalidateProvider",
    "SessionFactoryHistory",
    "VerificationHistory",
    "VerificationProvider",
    "build_provider_registry",
]
