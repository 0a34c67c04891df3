"""Verification methods known to the platform."""

from __future__ import annotations

from enum import Enum

from agegate.modules.common.exceptions import ValidationError


class VerificationMethod(str, Enum):
    BANKID = "bankid"
    MOJEID = "mojeid"
    OCR = "ocr"
    FACESCAN = "facescan"
    REVALIDATE = "revalidate"

    @classmethod
    def parse(cls, value: str) -> "VerificationMethod":
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError) as exc:
            raise ValidationError(f"Unknown verification method: {value!r}") from exc


# methods a shop can enable for first-time checks
IDENTITY_METHODS = frozenset(
    {
        VerificationMethod.BANKID,
        VerificationMethod.MOJEID,
        VerificationMethod.OCR,
        VerificationMethod.FACESCAN,
    }
)
