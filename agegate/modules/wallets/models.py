"""Domain models for wallet operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

DEBIT = "debit"
CREDIT = "credit"
REFUND = "refund"


@dataclass(slots=True)
class WalletSnapshot:
    company_id: str
    balance_cents: int
    currency: str


@dataclass(slots=True)
class LedgerEntryRecord:
    id: str
    company_id: str
    kind: str
    amount_cents: int
    verification_id: Optional[str]
    wallet_transaction_id: Optional[str]
    description: Optional[str]
    created_at: Optional[datetime]


@dataclass(slots=True)
class LedgerAudit:
    company_id: str
    balance_cents: int
    ledger_sum_cents: int

    @property
    def consistent(self) -> bool:
        return self.balance_cents == self.ledger_sum_cents and self.balance_cents >= 0
