"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .services import get_app_container, get_current_shop, get_orchestrator, get_poller, require_company_access

__all__ = [
    "get_db_session",
    "get_app_container",
    "get_current_shop",
    "get_orchestrator",
    "get_poller",
    "require_company_access",
]
