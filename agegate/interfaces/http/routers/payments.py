"""Top-up payment status endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from agegate.interfaces.http.deps import get_db_session, get_poller
from agegate.interfaces.http.errors import to_http_exception
from agegate.modules.common.exceptions import DomainError
from agegate.modules.reconciliation import ReconciliationPoller
from agegate.modules.topups import TopupService
from agegate.schemas import PaymentCheckRequest, PaymentStatusResponse

router = APIRouter()


@router.post("/check", response_model=PaymentStatusResponse, summary="Check a bank transfer for a top-up")
async def check_payment(
    payload: PaymentCheckRequest,
    poller: ReconciliationPoller = Depends(get_poller),
) -> PaymentStatusResponse:
    try:
        result = await poller.check(payload.transaction_reference)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return PaymentStatusResponse(status=result.status)


@router.get(
    "/transactions/{transaction_id}/status",
    response_model=PaymentStatusResponse,
    summary="Top-up status",
)
async def transaction_status(
    transaction_id: str = Path(..., min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> PaymentStatusResponse:
    try:
        transaction = await TopupService.with_session(db).get(transaction_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return PaymentStatusResponse(status=transaction.status)
