from fastapi import APIRouter

from agegate.interfaces.http.routers import admin, payments, verify, wallet


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(verify.router, prefix="/verify", tags=["verification"])
    router.include_router(payments.router, prefix="/payments", tags=["payments"])
    router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    return router


__all__ = [
    "create_api_router",
]
