"""Tests for the Fio bank statement adapter."""

from datetime import date

import httpx
import pytest

from agegate.core.config import BankFeedSettings
from agegate.infrastructure.bank_feed import FioBankFeed, parse_statement
from agegate.modules.common.exceptions import FeedUnavailableError

TODAY = date(2026, 10, 19)


def _statement(*transactions: dict) -> dict:
    return {
        "accountStatement": {
            "info": {"accountId": "2400000000", "currency": "CZK"},
            "transactionList": {"transaction": list(transactions)},
        }
    }


def _transaction(amount, symbol, day: str = "2026-10-19+0200") -> dict:
    entry = {
        "column0": {"value": day, "name": "Datum", "id": 0},
        "column1": {"value": amount, "name": "Objem", "id": 1},
    }
    if symbol is not None:
        entry["column5"] = {"value": symbol, "name": "VS", "id": 5}
    return entry


def _feed(handler, **overrides) -> FioBankFeed:
    settings = BankFeedSettings(api_token="secret-token", **overrides)
    return FioBankFeed(settings, transport=httpx.MockTransport(handler), today=TODAY)


class TestParseStatement:
    """Tests for statement parsing."""

    def test_converts_amounts_to_cents(self) -> None:
        """Should read the variable symbol and convert amounts exactly."""
        deposits = parse_statement(
            _statement(
                _transaction(500.0, "1234567890"),
                _transaction(123.45, 555),
            )
        )

        assert [(d.reference, d.amount_cents) for d in deposits] == [("1234567890", 50000), ("555", 12345)]
        assert deposits[0].timestamp.date() == TODAY

    def test_skips_unusable_entries(self) -> None:
        """Should ignore non-numeric amounts, missing symbols and outgoing payments."""
        deposits = parse_statement(
            _statement(
                _transaction("five hundred", "1"),
                _transaction(True, "2"),
                _transaction(500.0, None),
                _transaction(500.0, ""),
                _transaction(-200.0, "3"),
                _transaction(10, "4"),
            )
        )

        assert [(d.reference, d.amount_cents) for d in deposits] == [("4", 1000)]

    def test_empty_statement(self) -> None:
        """Should return no deposits when the statement has no transaction list."""
        assert parse_statement({"accountStatement": {"transactionList": None}}) == []
        assert parse_statement({}) == []


class TestFioBankFeed:
    """Tests for the HTTP side of the adapter."""

    @pytest.mark.asyncio
    async def test_requests_period_statement(self) -> None:
        """Should request today's statement with the token in the path."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json=_statement(_transaction(500.0, "1234567890")))

        deposits = await _feed(handler).fetch_statement()

        assert seen == ["/v1/rest/periods/secret-token/2026-10-19/2026-10-19/transactions.json"]
        assert deposits[0].amount_cents == 50000

    @pytest.mark.asyncio
    async def test_lookback_widens_period(self) -> None:
        """Should start the period ``lookback_days`` before today."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json=_statement())

        await _feed(handler, lookback_days=3).fetch_statement()

        assert "/2026-10-16/2026-10-19/" in seen[0]

    @pytest.mark.asyncio
    async def test_query_filters_by_reference(self) -> None:
        """Should return only deposits carrying the reference."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json=_statement(_transaction(500.0, "1111111111"), _transaction(200.0, "2222222222")),
            )

        deposits = await _feed(handler).query("2222222222")

        assert [d.amount_cents for d in deposits] == [20000]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [409, 500, 503])
    async def test_error_statuses_are_unavailable(self, status_code: int) -> None:
        """Should map rate limiting and server errors to FeedUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, text="try later")

        with pytest.raises(FeedUnavailableError) as excinfo:
            await _feed(handler).fetch_statement()

        assert excinfo.value.retryable is True

    @pytest.mark.asyncio
    async def test_transport_error_is_unavailable(self) -> None:
        """Should map connection failures to FeedUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FeedUnavailableError):
            await _feed(handler).fetch_statement()

    @pytest.mark.asyncio
    async def test_missing_token(self) -> None:
        """Should refuse to query without a configured token."""
        feed = FioBankFeed(BankFeedSettings(api_token=None), today=TODAY)

        with pytest.raises(FeedUnavailableError):
            await feed.fetch_statement()
