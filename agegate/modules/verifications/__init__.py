"""Verification domain exports"""

from .models import (
    COMPLETED,
    FAILED,
    FAILURE,
    PENDING,
    SUCCESS,
    InitializeOutcome,
    RevalidationOutcome,
    Verification,
    VerificationStatusView,
)
from .service import VerificationOrchestrator, run_settlement

__all__ = [
    "COMPLETED",
    "FAILED",
    "FAILURE",
    "PENDING",
    "SUCCESS",
    "InitializeOutcome",
    "RevalidationOutcome",
    "Verification",
    "VerificationOrchestrator",
    "VerificationStatusView",
    "run_settlement",
]
