"""Domain error taxonomy shared by all modules.

Every error carries the HTTP status the interface layer answers with and a
stable machine readable ``code``. Only :class:`FeedUnavailableError` and
:class:`ConcurrencyConflictError` are retryable.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain errors."""

    status_code: int = 400
    code: str = "DOMAIN_ERROR"
    retryable: bool = False

    def __init__(self, message: str = "") -> None:
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class ValidationError(DomainError):
    """Malformed input; nothing was changed."""

    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidCredentialError(DomainError):
    """The presented credential does not resolve to a shop."""

    status_code = 401
    code = "INVALID_CREDENTIAL"


class NotFoundError(DomainError):
    """The requested entity does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class StateError(DomainError):
    """The entity is not in a state that allows the operation."""

    status_code = 409
    code = "INVALID_STATE"


class ShopInactiveError(StateError):
    """Shop is not active."""

    status_code = 403
    code = "SHOP_INACTIVE"


class MethodNotAllowedError(StateError):
    """Verification method is not enabled for the shop."""

    status_code = 400
    code = "METHOD_NOT_ALLOWED"


class TerminalStateError(StateError):
    """Entity already reached a terminal state."""

    status_code = 409
    code = "TERMINAL_STATE"


class InsufficientCreditError(DomainError):
    """Insufficient credit."""

    status_code = 402
    code = "INSUFFICIENT_CREDIT"

    def __init__(self, message: str = "", *, balance_cents: int | None = None, required_cents: int | None = None) -> None:
        super().__init__(message)
        self.balance_cents = balance_cents
        self.required_cents = required_cents


class ProviderError(DomainError):
    """Verification provider call failed."""

    status_code = 502
    code = "PROVIDER_ERROR"


class FeedUnavailableError(DomainError):
    """Bank statement feed is unreachable."""

    status_code = 500
    code = "FEED_UNAVAILABLE"
    retryable = True


class ConcurrencyConflictError(DomainError):
    """Lost a compare-and-set race; the operation can be retried."""

    status_code = 409
    code = "CONCURRENCY_CONFLICT"
    retryable = True


__all__ = [
    "DomainError",
    "ValidationError",
    "InvalidCredentialError",
    "NotFoundError",
    "StateError",
    "ShopInactiveError",
    "MethodNotAllowedError",
    "TerminalStateError",
    "InsufficientCreditError",
    "ProviderError",
    "FeedUnavailableError",
    "ConcurrencyConflictError",
]
