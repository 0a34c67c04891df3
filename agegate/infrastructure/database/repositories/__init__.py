"""SQLAlchemy-backed repository implementations."""

from .company_repository import SqlCompanyRepository
from .shop_repository import SqlShopRepository
from .ledger_repository import SqlLedgerRepository
from .verification_repository import SqlVerificationRepository
from .topup_repository import SqlTopupRepository

__all__ = [
    "SqlCompanyRepository",
    "SqlShopRepository",
    "SqlLedgerRepository",
    "SqlVerificationRepository",
    "SqlTopupRepository",
]
