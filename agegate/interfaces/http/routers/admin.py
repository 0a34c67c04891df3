"""Administrative endpoints for companies, shops and the scheduled sweeps."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.core.security import require_admin
from agegate.interfaces.http.deps import get_db_session, get_orchestrator, get_poller
from agegate.interfaces.http.errors import to_http_exception
from agegate.modules.common.exceptions import DomainError
from agegate.modules.reconciliation import ReconciliationPoller
from agegate.modules.shops import Shop, ShopCreateInput, ShopRegistry
from agegate.modules.topups import TopupService
from agegate.modules.verifications import VerificationOrchestrator
from agegate.modules.wallets import LedgerService
from agegate.schemas import (
    CompanyCreate,
    CompanyResponse,
    CountResponse,
    LedgerAuditResponse,
    PaymentStatusResponse,
    ReconciliationSummaryResponse,
    ShopCreate,
    ShopKeyResponse,
    ShopMethodsUpdate,
    ShopResponse,
    ShopStatusUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def _shop_response(shop: Shop) -> ShopResponse:
    return ShopResponse(
        id=shop.id,
        company_id=shop.company_id,
        name=shop.name,
        status=shop.status,
        allowed_methods=sorted(shop.allowed_methods),
        created_at=shop.created_at,
    )


def _shop_key_response(shop: Shop) -> ShopKeyResponse:
    return ShopKeyResponse(**_shop_response(shop).model_dump(), api_key=shop.api_key)


@router.post("/companies", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(payload: CompanyCreate, db: AsyncSession = Depends(get_db_session)):
    try:
        company = await ShopRegistry.with_session(db).create_company(payload.name, currency=payload.currency)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return CompanyResponse.model_validate(company)


@router.get("/companies/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: str, db: AsyncSession = Depends(get_db_session)):
    try:
        company = await ShopRegistry.with_session(db).get_company(company_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return CompanyResponse.model_validate(company)


@router.get("/companies/{company_id}/audit", response_model=LedgerAuditResponse)
async def audit_company(company_id: str, db: AsyncSession = Depends(get_db_session)):
    try:
        audit = await LedgerService.with_session(db).audit(company_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if not audit.consistent:
        logger.error(
            "Ledger mismatch for company %s: balance %d, entries %d",
            company_id,
            audit.balance_cents,
            audit.ledger_sum_cents,
        )
    return LedgerAuditResponse(
        company_id=audit.company_id,
        balance_cents=audit.balance_cents,
        ledger_sum_cents=audit.ledger_sum_cents,
        consistent=audit.consistent,
    )


@router.get("/companies/{company_id}/shops", response_model=list[ShopResponse])
async def list_company_shops(company_id: str, db: AsyncSession = Depends(get_db_session)):
    shops = await ShopRegistry.with_session(db).list_shops(company_id)
    return [_shop_response(shop) for shop in shops]


@router.post("/shops", response_model=ShopKeyResponse, status_code=status.HTTP_201_CREATED)
async def create_shop(payload: ShopCreate, db: AsyncSession = Depends(get_db_session)):
    registry = ShopRegistry.with_session(db)
    try:
        shop = await registry.create_shop(
            ShopCreateInput(
                company_id=payload.company_id,
                name=payload.name,
                allowed_methods=payload.allowed_methods,
                status=payload.status,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return _shop_key_response(shop)


@router.patch("/shops/{shop_id}/status", response_model=ShopResponse)
async def update_shop_status(shop_id: str, payload: ShopStatusUpdate, db: AsyncSession = Depends(get_db_session)):
    try:
        shop = await ShopRegistry.with_session(db).set_status(shop_id, payload.status)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return _shop_response(shop)


@router.put("/shops/{shop_id}/methods", response_model=ShopResponse)
async def update_shop_methods(shop_id: str, payload: ShopMethodsUpdate, db: AsyncSession = Depends(get_db_session)):
    try:
        shop = await ShopRegistry.with_session(db).set_allowed_methods(shop_id, payload.allowed_methods)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return _shop_response(shop)


@router.post("/shops/{shop_id}/regenerate-key", response_model=ShopKeyResponse)
async def regenerate_shop_key(shop_id: str, db: AsyncSession = Depends(get_db_session)):
    try:
        shop = await ShopRegistry.with_session(db).regenerate_key(shop_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return _shop_key_response(shop)


@router.post("/reconciliation/check-all", response_model=ReconciliationSummaryResponse)
async def check_all_payments(poller: ReconciliationPoller = Depends(get_poller)):
    summary = await poller.check_all()
    return ReconciliationSummaryResponse(
        completed_count=summary.completed_count,
        pending_count=summary.pending_count,
        errored_count=summary.errored_count,
    )


@router.post("/topups/expire", response_model=CountResponse)
async def expire_overdue_topups(db: AsyncSession = Depends(get_db_session)):
    expired = await TopupService.with_session(db).expire_overdue()
    await db.commit()
    return CountResponse(count=expired)


@router.post("/topups/{transaction_id}/cancel", response_model=PaymentStatusResponse)
async def cancel_topup(transaction_id: str, db: AsyncSession = Depends(get_db_session)):
    try:
        transaction = await TopupService.with_session(db).cancel(transaction_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return PaymentStatusResponse(status=transaction.status)


@router.post("/verifications/fail-stale", response_model=CountResponse)
async def fail_stale_verifications(orchestrator: VerificationOrchestrator = Depends(get_orchestrator)):
    failed = await orchestrator.fail_stale()
    return CountResponse(count=failed)
