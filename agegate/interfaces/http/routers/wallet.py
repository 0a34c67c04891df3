"""Company wallet endpoints: balance, ledger and top-up requests."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.interfaces.http.deps import get_db_session, require_company_access
from agegate.interfaces.http.errors import to_http_exception
from agegate.modules.common.exceptions import DomainError
from agegate.modules.topups import TopupService, WalletTransaction
from agegate.modules.wallets import LedgerEntryRecord, LedgerService
from agegate.schemas import (
    LedgerEntryListResponse,
    LedgerEntryResponse,
    WalletSnapshotResponse,
    WalletTopupListResponse,
    WalletTopupRequest,
    WalletTopupResponse,
)

router = APIRouter(dependencies=[Depends(require_company_access)])


@router.get("/{company_id}", response_model=WalletSnapshotResponse, summary="Wallet balance")
async def get_wallet(
    company_id: str = Path(..., min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> WalletSnapshotResponse:
    try:
        snapshot = await LedgerService.with_session(db).get_balance(company_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return WalletSnapshotResponse(
        company_id=snapshot.company_id,
        balance_cents=snapshot.balance_cents,
        currency=snapshot.currency,
    )


@router.get("/{company_id}/entries", response_model=LedgerEntryListResponse, summary="Ledger entries")
async def list_entries(
    company_id: str = Path(..., min_length=1),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryListResponse:
    ledger = LedgerService.with_session(db)
    try:
        await ledger.get_balance(company_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    entries = await ledger.list_entries(company_id, limit=limit, offset=offset)
    return LedgerEntryListResponse(entries=[_to_entry_response(entry) for entry in entries])


@router.post(
    "/{company_id}/topups",
    response_model=WalletTopupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a bank transfer top-up",
)
async def create_topup(
    payload: WalletTopupRequest,
    company_id: str = Path(..., min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> WalletTopupResponse:
    service = TopupService.with_session(db)
    try:
        transaction = await service.create_topup(company_id, payload.amount_cents)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    await db.commit()
    return _to_topup_response(transaction)


@router.get("/{company_id}/topups", response_model=WalletTopupListResponse, summary="List top-ups")
async def list_topups(
    company_id: str = Path(..., min_length=1),
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> WalletTopupListResponse:
    service = TopupService.with_session(db)
    transactions = await service.list_for_company(company_id, limit=limit, offset=offset, status=status_filter)
    return WalletTopupListResponse(topups=[_to_topup_response(item) for item in transactions])


def _to_entry_response(entry: LedgerEntryRecord) -> LedgerEntryResponse:
    return LedgerEntryResponse(
        id=entry.id,
        kind=entry.kind,
        amount_cents=entry.amount_cents,
        verification_id=entry.verification_id,
        wallet_transaction_id=entry.wallet_transaction_id,
        description=entry.description,
        created_at=entry.created_at,
    )


def _to_topup_response(transaction: WalletTransaction) -> WalletTopupResponse:
    return WalletTopupResponse(
        id=transaction.id,
        company_id=transaction.company_id,
        amount_cents=transaction.amount_cents,
        currency=transaction.currency,
        external_reference=transaction.external_reference,
        status=transaction.status,
        created_at=transaction.created_at,
        confirmed_at=transaction.confirmed_at,
    )
