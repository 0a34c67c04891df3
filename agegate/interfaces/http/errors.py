"""Translation of domain errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException

from agegate.modules.common.exceptions import DomainError, InsufficientCreditError


def to_http_exception(exc: DomainError) -> HTTPException:
    detail: dict = {"code": exc.code, "message": exc.message}
    if isinstance(exc, InsufficientCreditError):
        detail["balanceCents"] = exc.balance_cents
        detail["requiredCents"] = exc.required_cents
    return HTTPException(status_code=exc.status_code, detail=detail)


__all__ = ["to_http_exception"]
