"""Shared abstractions used across domain modules."""

from .exceptions import (
    ConcurrencyConflictError,
    DomainError,
    FeedUnavailableError,
    InsufficientCreditError,
    InvalidCredentialError,
    MethodNotAllowedError,
    NotFoundError,
    ProviderError,
    ShopInactiveError,
    StateError,
    TerminalStateError,
    ValidationError,
)
from .retry import retry_async

__all__ = [
    "ConcurrencyConflictError",
    "DomainError",
    "FeedUnavailableError",
    "InsufficientCreditError",
    "InvalidCredentialError",
    "MethodNotAllowedError",
    "NotFoundError",
    "ProviderError",
    "ShopInactiveError",
    "StateError",
    "TerminalStateError",
    "ValidationError",
    "retry_async",
]
