"""Fio banka statement feed.

The REST API returns the account statement for a date range as JSON::

    {"accountStatement": {"transactionList": {"transaction": [
        {"column0": {"value": "2024-05-01+0200"},
         "column1": {"value": 500.0},
         "column5": {"value": "1234567890"}}
    ]}}}

``column1`` is the amount in major units (negative for outgoing payments),
``column5`` the variable symbol used as the payment reference.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

import httpx

from agegate.core.config import BankFeedSettings, get_settings
from agegate.modules.common.exceptions import FeedUnavailableError
from agegate.modules.reconciliation.models import BankDeposit

logger = logging.getLogger(__name__)

RATE_LIMITED = 409


def _to_cents(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        amount = (Decimal(str(value)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
    return int(amount)


def _column(transaction: dict, index: int) -> Any:
    column = transaction.get(f"column{index}")
    if isinstance(column, dict):
        return column.get("value")
    return None


def _parse_date(value: Any) -> datetime | None:
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d")
    except ValueError:
        return None


def parse_statement(payload: Any) -> list[BankDeposit]:
    """Extract incoming deposits; entries without a symbol or a numeric amount are skipped."""
    try:
        transactions = payload["accountStatement"]["transactionList"]["transaction"]
    except (KeyError, TypeError):
        return []
    if not isinstance(transactions, list):
        return []

    deposits: list[BankDeposit] = []
    for transaction in transactions:
        if not isinstance(transaction, dict):
            continue
        symbol = _column(transaction, 5)
        amount_cents = _to_cents(_column(transaction, 1))
        if symbol in (None, ""):
            continue
        if amount_cents is None:
            logger.warning("Skipping statement entry with non-numeric amount: %r", _column(transaction, 1))
            continue
        if amount_cents <= 0:
            continue
        deposits.append(
            BankDeposit(
                amount_cents=amount_cents,
                reference=str(symbol).strip(),
                timestamp=_parse_date(_column(transaction, 0)),
            )
        )
    return deposits


class FioBankFeed:
    """Reads the statement window ``today - lookback_days .. today``."""

    def __init__(
        self,
        settings: BankFeedSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        today: date | None = None,
    ) -> None:
        self.settings = settings or get_settings().bank_feed
        self._transport = transport
        self._today = today

    def statement_url(self) -> str:
        end = self._today or date.today()
        start = end - timedelta(days=self.settings.lookback_days)
        base = self.settings.base_url.rstrip("/")
        return (
            f"{base}/periods/{self.settings.api_token}/"
            f"{start.isoformat()}/{end.isoformat()}/transactions.json"
        )

    async def fetch_statement(self) -> list[BankDeposit]:
        if not self.settings.api_token:
            raise FeedUnavailableError("Bank feed token is not configured")

        try:
            async with httpx.AsyncClient(timeout=self.settings.timeout_seconds, transport=self._transport) as client:
                response = await client.get(self.statement_url())
        except httpx.HTTPError as exc:
            logger.warning("Bank feed unreachable: %s", exc.__class__.__name__)
            raise FeedUnavailableError("Bank feed unreachable") from exc

        if response.status_code == RATE_LIMITED:
            logger.warning("Bank feed rate limit hit")
            raise FeedUnavailableError("Bank feed rate limited")
        if response.status_code >= 400:
            logger.error("Bank feed answered %s", response.status_code)
            raise FeedUnavailableError(f"Bank feed returned {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise FeedUnavailableError("Bank feed sent invalid JSON") from exc

        deposits = parse_statement(payload)
        logger.debug("Bank statement holds %d deposits", len(deposits))
        return deposits

    async def query(self, reference: str) -> list[BankDeposit]:
        reference = reference.strip()
        return [deposit for deposit in await self.fetch_statement() if deposit.reference == reference]
