"""Wallet ledger exports"""

from .models import CREDIT, DEBIT, REFUND, LedgerAudit, LedgerEntryRecord, WalletSnapshot
from .service import LedgerService

__all__ = [
    "CREDIT",
    "DEBIT",
    "REFUND",
    "LedgerAudit",
    "LedgerEntryRecord",
    "LedgerService",
    "WalletSnapshot",
]
