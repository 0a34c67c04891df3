"""Domain model for wallet top-ups awaiting bank confirmation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"


@dataclass(slots=True)
class WalletTransaction:
    id: str
    company_id: str
    amount_cents: int
    currency: str
    external_reference: str
    status: str
    created_at: Optional[datetime]
    confirmed_at: Optional[datetime]

    def is_terminal(self) -> bool:
        return self.status in {COMPLETED, FAILED}
