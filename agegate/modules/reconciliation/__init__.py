"""Payment reconciliation exports"""

from .models import BankDeposit, BankFeed, CheckResult, ReconciliationSummary
from .service import ReconciliationPoller

__all__ = [
    "BankDeposit",
    "BankFeed",
    "CheckResult",
    "ReconciliationPoller",
    "ReconciliationSummary",
]
