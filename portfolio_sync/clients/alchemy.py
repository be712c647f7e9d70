"""Alchemy client: JSON-RPC balance batches and the Prices API."""
from __future__ import annotations

import logging
from typing import Any

from ..constants import REQUEST_TIMEOUT_SECONDS
from .http import ProviderError, request_json

logger = logging.getLogger(__name__)

ALCHEMY_PRICES_API_BASE = "https://api.g.alchemy.com/prices/v1"
ALCHEMY_RPC_BASE = "https://eth-mainnet.g.alchemy.com/v2"
DEFAULT_NETWORK = "eth-mainnet"


def _parse_hex(value: Any) -> int:
    if not value or value == "0x":
        return 0
    return int(value, 16)


class AlchemyClient:
    """Thin async wrapper around the Alchemy endpoints this project uses."""

    def __init__(
        self,
        api_key: str,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        network: str = DEFAULT_NETWORK,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.network = network

    # ------------------------------------------------------------------
    # Prices API
    # ------------------------------------------------------------------

    async def prices_by_symbol(self, symbols: list[str]) -> list[dict[str, Any]]:
        """Fetch price entries by ticker symbol (``symbols=BTC&symbols=ETH``)."""
        if not symbols:
            return []

        data = await request_json(
            "GET",
            f"{ALCHEMY_PRICES_API_BASE}/{self.api_key}/tokens/by-symbol",
            params=[("symbols", s) for s in symbols],
            timeout=self.timeout,
            label="Alchemy prices",
        )
        return self._price_entries(data)

    async def prices_by_address(self, addresses: list[str]) -> list[dict[str, Any]]:
        """Fetch price entries by token contract address."""
        if not addresses:
            return []

        data = await request_json(
            "POST",
            f"{ALCHEMY_PRICES_API_BASE}/{self.api_key}/tokens/by-address",
            json={
                "addresses": [
                    {"network": self.network, "address": addr} for addr in addresses
                ]
            },
            timeout=self.timeout,
            label="Alchemy prices",
        )
        return self._price_entries(data)

    @staticmethod
    def _price_entries(data: Any) -> list[dict[str, Any]]:
        if not isinstance(data, dict):
            raise ProviderError("Alchemy prices returned an unexpected payload")
        entries = data.get("data") or []
        return [e for e in entries if isinstance(e, dict)]

    # ------------------------------------------------------------------
    # JSON-RPC
    # ------------------------------------------------------------------

    async def _rpc_batch(
        self, method: str, params_list: list[list[Any]]
    ) -> dict[int, Any]:
        """Send one JSON-RPC batch; return results keyed by request index.

        Entries that carry an error are logged and left out.
        """
        batch = [
            {"jsonrpc": "2.0", "method": method, "params": params, "id": index}
            for index, params in enumerate(params_list)
        ]
        data = await request_json(
            "POST",
            f"{ALCHEMY_RPC_BASE}/{self.api_key}",
            json=batch,
            timeout=self.timeout,
            label="Alchemy RPC",
        )
        if not isinstance(data, list):
            raise ProviderError("Alchemy RPC returned an unexpected payload")

        results: dict[int, Any] = {}
        for entry in data:
            index = entry.get("id")
            if not isinstance(index, int):
                continue
            if entry.get("error"):
                logger.warning(
                    "Alchemy %s failed for request %d: %s",
                    method, index, entry["error"],
                )
                continue
            if entry.get("result") is not None:
                results[index] = entry["result"]
        return results

    async def eth_balances(self, addresses: list[str]) -> dict[str, int]:
        """Native ETH balances in wei; addresses whose call failed are omitted."""
        if not addresses:
            return {}

        results = await self._rpc_batch(
            "eth_getBalance", [[addr, "latest"] for addr in addresses]
        )
        balances: dict[str, int] = {}
        for index, result in results.items():
            if 0 <= index < len(addresses):
                balances[addresses[index]] = _parse_hex(result)
        return balances

    async def erc20_balances(
        self, addresses: list[str], contract_address: str
    ) -> dict[str, int]:
        """Token balances in raw units; addresses whose call failed are omitted."""
        if not addresses:
            return {}

        results = await self._rpc_batch(
            "alchemy_getTokenBalances",
            [[addr, [contract_address]] for addr in addresses],
        )
        balances: dict[str, int] = {}
        for index, result in results.items():
            if not 0 <= index < len(addresses):
                continue
            token_balances = result.get("tokenBalances") or []
            if token_balances:
                balances[addresses[index]] = _parse_hex(
                    token_balances[0].get("tokenBalance")
                )
            else:
                balances[addresses[index]] = 0
        return balances
