"""Pydantic schemas for the HTTP surface.

Shop-facing payloads use the camelCase field names existing widget
integrations send; admin payloads stay snake_case.
"""
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, HttpUrl
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VerificationInitializeRequest(CamelModel):
    shop_id: str = Field(..., min_length=1)
    verification_method: str = Field(..., min_length=1)
    redirect_url: Optional[HttpUrl] = None
    identifier: Optional[str] = Field(default=None, max_length=255)


class VerificationInitializeResponse(CamelModel):
    verification_id: str
    status: str


class VerificationStatusResponse(CamelModel):
    status: str
    result: Optional[str] = None
    method: str


class RevalidateRequest(CamelModel):
    shop_id: str = Field(..., min_length=1)
    identifier: str = Field(..., min_length=1, max_length=255)
    method: Optional[str] = None


class PreviousVerification(CamelModel):
    id: str
    method: str
    date: Optional[datetime] = None


class RevalidateResponse(CamelModel):
    success: bool
    verification_id: str
    is_verified: bool
    previous_verification: Optional[PreviousVerification] = None


class PaymentCheckRequest(CamelModel):
    transaction_reference: str = Field(
        ...,
        min_length=1,
        max_length=20,
        validation_alias=AliasChoices("transactionReference", "transactionNumber", "transaction_reference"),
    )


class PaymentStatusResponse(BaseModel):
    status: str


class WalletSnapshotResponse(CamelModel):
    company_id: str
    balance_cents: int
    currency: str


class LedgerEntryResponse(CamelModel):
    id: str
    kind: str
    amount_cents: int
    verification_id: Optional[str] = None
    wallet_transaction_id: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class LedgerEntryListResponse(BaseModel):
    entries: list[LedgerEntryResponse] = Field(default_factory=list)


class WalletTopupRequest(CamelModel):
    amount_cents: int = Field(..., gt=0)


class WalletTopupResponse(CamelModel):
    id: str
    company_id: str
    amount_cents: int
    currency: str
    external_reference: str
    status: str
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None


class WalletTopupListResponse(BaseModel):
    topups: list[WalletTopupResponse] = Field(default_factory=list)


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class CompanyResponse(BaseModel):
    id: str
    name: str
    balance_cents: int
    currency: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ShopCreate(BaseModel):
    company_id: str
    name: str = Field(..., min_length=1, max_length=255)
    allowed_methods: list[str] = Field(default_factory=list)
    status: str = "active"


class ShopStatusUpdate(BaseModel):
    status: str


class ShopMethodsUpdate(BaseModel):
    allowed_methods: list[str]


class ShopResponse(BaseModel):
    id: str
    company_id: str
    name: str
    status: str
    allowed_methods: list[str]
    created_at: Optional[datetime] = None


class ShopKeyResponse(ShopResponse):
    api_key: str


class ReconciliationSummaryResponse(BaseModel):
    completed_count: int
    pending_count: int
    errored_count: int


class CountResponse(BaseModel):
    count: int


class LedgerAuditResponse(BaseModel):
    company_id: str
    balance_cents: int
    ledger_sum_cents: int
    consistent: bool
