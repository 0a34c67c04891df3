"""Top-up domain exports"""

from .models import COMPLETED, FAILED, PENDING, WalletTransaction
from .service import TopupService, generate_reference

__all__ = [
    "COMPLETED",
    "FAILED",
    "PENDING",
    "TopupService",
    "WalletTransaction",
    "generate_reference",
]
