"""Shop registry exports"""

from .models import ACTIVE, INACTIVE, Company, Shop, ShopCreateInput
from .service import ShopRegistry

__all__ = [
    "ACTIVE",
    "INACTIVE",
    "Company",
    "Shop",
    "ShopCreateInput",
    "ShopRegistry",
]
