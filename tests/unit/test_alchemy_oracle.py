"""Unit tests for the Alchemy price oracle: grouping, merging and errors."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from portfolio_sync.clients.http import ProviderError
from portfolio_sync.constants import ALL_SYMBOLS, BTC, ETH, STETH, USDC, USDT
from portfolio_sync.oracles.alchemy import AlchemyPriceOracle


def _client(api_key: str = "key") -> MagicMock:
    client = MagicMock()
    client.api_key = api_key
    client.prices_by_symbol = AsyncMock(return_value=[])
    client.prices_by_address = AsyncMock(return_value=[])
    return client


def _entry(value: str, currency: str = "usd", **extra: str) -> dict:
    return {**extra, "prices": [{"currency": currency, "value": value}]}


class TestAlchemyPriceOracle:
    @pytest.mark.asyncio
    async def test_splits_symbols_by_contract(self) -> None:
        client = _client()
        oracle = AlchemyPriceOracle(client)

        await oracle.get_prices("USD", ALL_SYMBOLS)

        client.prices_by_symbol.assert_awaited_once_with(["BTC", "ETH"])
        addresses = client.prices_by_address.await_args.args[0]
        assert USDT.contract_address in addresses
        assert STETH.contract_address in addresses
        assert len(addresses) == 4

    @pytest.mark.asyncio
    async def test_merges_both_groups_by_symbol_code(self) -> None:
        client = _client()
        client.prices_by_symbol.return_value = [
            _entry("50000.5", symbol="btc"),
            _entry("3000", symbol="ETH"),
        ]
        client.prices_by_address.return_value = [
            _entry("0.9998", address=USDC.contract_address.upper()),
        ]
        oracle = AlchemyPriceOracle(client)

        prices = await oracle.get_prices("USD", ALL_SYMBOLS)

        assert prices == {
            BTC.code: {"usd": pytest.approx(50000.5)},
            ETH.code: {"usd": 3000.0},
            USDC.code: {"usd": pytest.approx(0.9998)},
        }

    @pytest.mark.asyncio
    async def test_skips_unknown_and_non_numeric_entries(self) -> None:
        client = _client()
        client.prices_by_symbol.return_value = [
            _entry("n/a", symbol="BTC"),
            _entry("1.0", symbol="DOGE"),
            {"symbol": "ETH", "prices": [], "error": "not found"},
        ]
        oracle = AlchemyPriceOracle(client)

        assert await oracle.get_prices("USD", ALL_SYMBOLS) == {}

    @pytest.mark.asyncio
    async def test_only_requested_currency_is_used(self) -> None:
        client = _client()
        client.prices_by_symbol.return_value = [_entry("50000", currency="usd", symbol="BTC")]
        oracle = AlchemyPriceOracle(client)

        assert await oracle.get_prices("EUR", [BTC]) == {}

    @pytest.mark.asyncio
    async def test_error_returns_empty_table(self) -> None:
        client = _client()
        client.prices_by_address.side_effect = ProviderError("HTTP 503")
        oracle = AlchemyPriceOracle(client)

        assert await oracle.get_prices("USD", ALL_SYMBOLS) == {}

    @pytest.mark.asyncio
    async def test_missing_key_returns_empty_without_call(self) -> None:
        client = _client(api_key="")
        oracle = AlchemyPriceOracle(client)

        assert await oracle.get_prices("USD", ALL_SYMBOLS) == {}
        client.prices_by_symbol.assert_not_called()
