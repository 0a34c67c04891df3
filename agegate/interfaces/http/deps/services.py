"""Service-level dependency providers."""

from typing import Optional

from fastapi import Depends, HTTPException, Path, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.core.container import ApplicationContainer, get_container
from agegate.core.security import admin_header, extract_bearer_key, is_admin_token, shop_bearer
from agegate.interfaces.http.errors import to_http_exception
from agegate.modules.common.exceptions import DomainError
from agegate.modules.reconciliation import ReconciliationPoller
from agegate.modules.shops import Shop, ShopRegistry
from agegate.modules.verifications import VerificationOrchestrator

from .database import get_db_session


def get_app_container() -> ApplicationContainer:
    return get_container()


def get_orchestrator(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
) -> VerificationOrchestrator:
    return VerificationOrchestrator.with_session(db, container.providers, container.settings)


def get_poller(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
) -> ReconciliationPoller:
    return ReconciliationPoller.with_session(db, container.bank_feed, container.settings)


async def get_current_shop(
    api_key: str = Depends(extract_bearer_key),
    db: AsyncSession = Depends(get_db_session),
) -> Shop:
    """Resolve the bearer key to its shop; unknown or ambiguous keys are 401, inactive shops 403."""
    try:
        shop = await ShopRegistry.with_session(db).authenticate(api_key)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return shop


async def require_company_access(
    company_id: str = Path(..., min_length=1),
    admin_token: Optional[str] = Depends(admin_header),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(shop_bearer),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    """Operators may read any wallet; a shop key only the wallet of its own company."""
    if is_admin_token(admin_token):
        return
    shop = await get_current_shop(extract_bearer_key(credentials), db)
    if shop.company_id != company_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "FORBIDDEN", "message": "API key does not belong to this company"},
        )


__all__ = [
    "get_app_container",
    "get_current_shop",
    "get_orchestrator",
    "get_poller",
    "require_company_access",
]
