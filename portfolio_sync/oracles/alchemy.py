"""Alchemy Prices API oracle."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from ..clients.alchemy import AlchemyClient
from ..models import PriceTable, Symbol

logger = logging.getLogger(__name__)


def _price_value(entry: dict[str, Any], currency: str) -> float | None:
    """Pick the entry's price in ``currency``; None when absent or not numeric."""
    for price in entry.get("prices") or []:
        if str(price.get("currency", "")).lower() != currency:
            continue
        try:
            return float(price.get("value"))
        except (TypeError, ValueError):
            return None
    return None


class AlchemyPriceOracle:
    """Fetch fiat prices for tracked symbols from Alchemy.

    Native coins are looked up by ticker, tokens by contract address. Both
    lookups run concurrently and are merged into one table keyed by symbol
    code. Any failure yields an empty table.
    """

    def __init__(self, client: AlchemyClient, log: logging.Logger | None = None) -> None:
        self._client = client
        self._log = log or logger

    async def get_prices(self, currency: str, symbols: Sequence[Symbol]) -> PriceTable:
        if not self._client.api_key:
            self._log.error("No Alchemy API key provided, prices unavailable")
            return {}

        currency_key = currency.lower()
        by_symbol = [s for s in symbols if not s.contract_address]
        by_address = [s for s in symbols if s.contract_address]

        try:
            symbol_entries, address_entries = await asyncio.gather(
                self._client.prices_by_symbol([s.code.upper() for s in by_symbol]),
                self._client.prices_by_address(
                    [s.contract_address for s in by_address if s.contract_address]
                ),
            )
        except Exception as e:
            self._log.error("Failed to fetch prices: %s", e)
            return {}

        prices: PriceTable = {}

        for entry in symbol_entries:
            ticker = str(entry.get("symbol", "")).upper()
            token = next((s for s in by_symbol if s.code.upper() == ticker), None)
            value = _price_value(entry, currency_key)
            if token is None or value is None:
                continue
            prices.setdefault(token.code, {})[currency_key] = value

        for entry in address_entries:
            address = str(entry.get("address", "")).lower()
            token = next(
                (s for s in by_address if (s.contract_address or "").lower() == address),
                None,
            )
            value = _price_value(entry, currency_key)
            if token is None or value is None:
                continue
            prices.setdefault(token.code, {})[currency_key] = value

        self._log.info("Fetched %d prices in %s", len(prices), currency.upper())
        for code, quote in sorted(prices.items()):
            self._log.debug("  %s: %.4f", code, quote[currency_key])
        return prices
