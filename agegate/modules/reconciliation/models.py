"""Reconciliation value objects and the bank feed contract."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence


@dataclass(frozen=True, slots=True)
class BankDeposit:
    amount_cents: int
    reference: str
    timestamp: Optional[datetime] = None


@dataclass(slots=True)
class CheckResult:
    reference: str
    status: str


@dataclass(slots=True)
class ReconciliationSummary:
    completed_count: int = 0
    pending_count: int = 0
    errored_count: int = 0


class BankFeed(Protocol):
    async def query(self, reference: str) -> Sequence[BankDeposit]:
        """Deposits whose variable symbol equals ``reference``."""
        ...

    async def fetch_statement(self) -> Sequence[BankDeposit]:
        """Every incoming deposit in the configured statement window."""
        ...
