"""Domain models for verification records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"

SUCCESS = "success"
FAILURE = "failure"


@dataclass(slots=True)
class Verification:
    id: str
    shop_id: str
    company_id: str
    method: str
    status: str
    result: Optional[str]
    price_cents: int
    user_identifier: Optional[str] = None
    redirect_url: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None
    refunded: bool = False
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def is_terminal(self) -> bool:
        return self.status in {COMPLETED, FAILED}


@dataclass(slots=True)
class InitializeOutcome:
    verification_id: str
    status: str


@dataclass(slots=True)
class VerificationStatusView:
    status: str
    result: Optional[str]
    method: str


@dataclass(slots=True)
class RevalidationOutcome:
    success: bool
    verification_id: str
    is_verified: bool
    previous_verification: Optional[dict[str, Any]] = None
