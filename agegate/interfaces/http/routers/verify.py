"""Shop-facing verification endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from agegate.core.container import ApplicationContainer
from agegate.interfaces.http.deps import get_app_container, get_current_shop, get_orchestrator
from agegate.interfaces.http.errors import to_http_exception
from agegate.modules.common.exceptions import DomainError
from agegate.modules.shops import Shop
from agegate.modules.verifications import RevalidationOutcome, VerificationOrchestrator, run_settlement
from agegate.schemas import (
    PreviousVerification,
    RevalidateRequest,
    RevalidateResponse,
    VerificationInitializeRequest,
    VerificationInitializeResponse,
    VerificationStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_same_shop(shop: Shop, shop_id: str) -> None:
    # an unknown shopId fails here as 401, the orchestrator's 404 is unreachable over HTTP
    if shop.id != shop_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_CREDENTIAL", "message": "API key does not belong to this shop"},
        )


@router.post("/initialize", response_model=VerificationInitializeResponse, summary="Start a paid verification")
async def initialize_verification(
    payload: VerificationInitializeRequest,
    background_tasks: BackgroundTasks,
    shop: Shop = Depends(get_current_shop),
    orchestrator: VerificationOrchestrator = Depends(get_orchestrator),
    container: ApplicationContainer = Depends(get_app_container),
) -> VerificationInitializeResponse:
    _require_same_shop(shop, payload.shop_id)
    try:
        outcome = await orchestrator.initialize(
            payload.shop_id,
            payload.verification_method,
            redirect_url=str(payload.redirect_url) if payload.redirect_url else None,
            identifier=payload.identifier,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    background_tasks.add_task(
        run_settlement,
        container.session_factory,
        container.providers,
        outcome.verification_id,
    )
    return VerificationInitializeResponse(verification_id=outcome.verification_id, status=outcome.status)


@router.get("/status", response_model=VerificationStatusResponse, summary="Verification status")
async def verification_status(
    verification_id: str = Query(..., alias="verificationId", min_length=1),
    orchestrator: VerificationOrchestrator = Depends(get_orchestrator),
) -> VerificationStatusResponse:
    try:
        view = await orchestrator.status(verification_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return VerificationStatusResponse(status=view.status, result=view.result, method=view.method)


@router.post("/revalidate", response_model=RevalidateResponse, summary="Revalidate an earlier verification")
async def revalidate(
    payload: RevalidateRequest,
    shop: Shop = Depends(get_current_shop),
    orchestrator: VerificationOrchestrator = Depends(get_orchestrator),
) -> RevalidateResponse:
    _require_same_shop(shop, payload.shop_id)
    try:
        outcome = await orchestrator.revalidate(payload.shop_id, payload.identifier, method=payload.method)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return RevalidateResponse(
        success=outcome.success,
        verification_id=outcome.verification_id,
        is_verified=outcome.is_verified,
        previous_verification=_previous(outcome),
    )


def _previous(outcome: RevalidationOutcome) -> PreviousVerification | None:
    details = outcome.previous_verification
    if not outcome.is_verified or not details or not details.get("previous_verification"):
        return None
    return PreviousVerification(
        id=details["previous_verification"],
        method=details.get("previous_method") or "",
        date=details.get("previous_date"),
    )
