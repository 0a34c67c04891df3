"""API key generation and request authentication helpers."""

from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from agegate.core.config import get_settings

shop_bearer = HTTPBearer(auto_error=False)
admin_header = APIKeyHeader(name="X-Admin-Token", auto_error=False)


def generate_api_key() -> str:
    """Return a fresh shop identity key, e.g. ``sk_<48 hex chars>``."""
    settings = get_settings()
    return f"{settings.security.api_key_prefix}{secrets.token_hex(settings.security.api_key_bytes)}"


def extract_bearer_key(credentials: HTTPAuthorizationCredentials | None = Depends(shop_bearer)) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")
    return credentials.credentials


def is_admin_token(token: str | None) -> bool:
    expected = get_settings().security.admin_token
    return token is not None and secrets.compare_digest(token, expected)


async def require_admin(token: str | None = Depends(admin_header)) -> None:
    if not is_admin_token(token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin token")


__all__ = [
    "generate_api_key",
    "extract_bearer_key",
    "is_admin_token",
    "require_admin",
]
